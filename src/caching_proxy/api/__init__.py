"""FastAPI application for the caching proxy."""
