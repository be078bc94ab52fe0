"""
HTTP API for the shop email extension.

This package provides a single FastAPI application that exposes:
- Email listing and settings
- Order creation, which triggers the Pending Order email
- Manual triggering and the dispatcher outbox
"""

from api.main import app

__all__ = ["app"]
