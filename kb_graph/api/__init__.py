"""
REST boundary for the knowledge-graph analytics.
"""

from .server import create_app, status_code_for
from .routes import router

__all__ = ["create_app", "status_code_for", "router"]
