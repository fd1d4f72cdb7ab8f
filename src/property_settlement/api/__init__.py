"""HTTP layer: FastAPI routes, dependencies, and middleware."""
