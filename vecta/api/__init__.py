"""HTTP API surface (FastAPI)."""
