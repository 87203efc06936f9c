# Route groups mounted by src.api.app: operational probes and pricing endpoints.
