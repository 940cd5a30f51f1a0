"""
asgi.py -- ASGI entry point for Inkwell.

Run with:  uvicorn asgi:app --reload

The application is assembled in api/main.py; this module only gives process
managers (uvicorn, gunicorn -k uvicorn.workers.UvicornWorker) a stable,
dependency-free import path.
"""

from api.main import app

__all__ = ["app"]
