"""HTTP API for UXR Metrics (FastAPI)."""
