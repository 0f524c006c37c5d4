"""
Configuration models and loaders for WebSift.
"""

from .config import (
    BatchConfig,
    BrowserConfig,
    Config,
    MonitoringConfig,
    RobotsConfig,
    ScraperConfig,
    SearchConfig,
    WebConfig,
    find_config_file,
)

__all__ = [
    "BatchConfig",
    "BrowserConfig",
    "Config",
    "MonitoringConfig",
    "RobotsConfig",
    "ScraperConfig",
    "SearchConfig",
    "WebConfig",
    "find_config_file",
]
