"""Movie Catalog API: a FastAPI service for browsing, curating and rating movies."""

__version__ = "1.0.0"
