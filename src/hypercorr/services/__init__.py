"""hypercorr.services — Data service (FastAPI) and pipeline engine."""
