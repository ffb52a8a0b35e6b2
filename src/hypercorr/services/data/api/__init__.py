"""Data-service API routers."""
