# Pydantic request and response models for the pricing API.
