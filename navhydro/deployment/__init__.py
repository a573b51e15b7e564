"""
deployment/ - HTTP boundary for the engine.
"""

from .api import create_app, create_router, API_PREFIX

__all__ = [
    "create_app",
    "create_router",
    "API_PREFIX",
]
