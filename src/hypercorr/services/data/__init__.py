"""FastAPI data service."""
