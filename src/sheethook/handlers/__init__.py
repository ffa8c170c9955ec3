"""
Module: handlers
Description: Package initialization for API endpoint handlers.

This package contains FastAPI route handlers for the relay:
- notifications: change notification intake and queue status

Handlers resolve the relay and queue through dependency injection
from application state.
"""

__all__ = []
