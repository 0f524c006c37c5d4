"""
WebSift - selector-driven web extraction with search-backed discovery.
"""

from __future__ import annotations

__version__ = "1.0.0"

from .config import Config
from .container import DependencyContainer

__all__ = ["__version__", "Config", "DependencyContainer"]
