"""
asgi.py -- ASGI entry point for authgate.

Run with:  uvicorn asgi:app --port 5000
"""

from api.main import app

__all__ = ["app"]
