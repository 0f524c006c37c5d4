"""
HTTP API for WebSift.
"""

from .main import create_app

__all__ = ["create_app"]
