"""Application layer: FastAPI composition root and admin boundary."""
