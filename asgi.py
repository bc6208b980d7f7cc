"""
asgi.py -- ASGI entry point for the credential service.

Run with:  uvicorn asgi:app --reload

Importing this module validates Settings. Without JWT_SECRET (and without
DEBUG=true) the import raises and the server refuses to start.
"""

from api.main import app

__all__ = ["app"]
