"""HTTP API: dependency providers, request/response models and routers."""
