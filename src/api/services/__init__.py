# Service layer between pricing routers and the marketplace pricing engine.
