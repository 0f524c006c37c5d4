"""
Configuration management for WebSift using Pydantic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from websift.crawler.user_agents import BROWSER_USER_AGENT, SEARCH_USER_AGENT

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class ScraperConfig(BaseModel):
    """Static fetch configuration."""

    user_agent: str = Field(default=BROWSER_USER_AGENT, description="User-Agent sent with page requests.")
    timeout_ms: int = Field(default=30000, ge=0, description="Default per-request timeout in milliseconds.")
    max_redirects: int = Field(default=5, ge=0, description="Maximum redirects followed by a static fetch.")
    default_selector: str = Field(default="h1, h2, h3, p", description="Selector used when none is supplied.")


class RobotsConfig(BaseModel):
    """Configuration for the advisory robots.txt check."""

    enabled: bool = Field(default=True, description="Whether to fetch and inspect robots.txt at all.")
    timeout_seconds: float = Field(default=5.0, gt=0, description="Timeout for the robots.txt fetch.")
    agent_tokens: List[str] = Field(
        default_factory=lambda: ["*", "educational"],
        description="User-agent tokens whose sections apply to this scraper.",
    )

    @field_validator("agent_tokens")
    @classmethod
    def lowercase_tokens(cls, v: List[str]) -> List[str]:
        return [token.strip().lower() for token in v if token.strip()]


class BrowserConfig(BaseModel):
    """Configuration for the shared headless browser."""

    headless: bool = True
    chromium_sandbox: bool = Field(default=False, description="Run Chromium with its OS-level sandbox.")
    launch_args: List[str] = Field(
        default_factory=lambda: [
            "--disable-dev-shm-usage",
            "--disable-accelerated-2d-canvas",
            "--no-first-run",
            "--no-zygote",
            "--disable-gpu",
        ]
    )
    viewport_width: int = Field(default=1920, gt=0)
    viewport_height: int = Field(default=1080, gt=0)
    wait_for_selector_timeout_ms: int = Field(
        default=5000, ge=0, description="How long to wait for options.wait_for_selector to appear."
    )


class SearchConfig(BaseModel):
    """Configuration for the search providers."""

    user_agent: str = Field(default=SEARCH_USER_AGENT, description="User-Agent sent to search engines.")
    timeout_ms: int = Field(default=10000, ge=0, description="Per-provider request timeout in milliseconds.")
    default_max_results: int = Field(default=5, ge=0)
    duckduckgo_url: str = "https://html.duckduckgo.com/html/"
    bing_url: str = "https://www.bing.com/search"
    blocked_domains: List[str] = Field(
        default_factory=lambda: [
            "facebook.com",
            "twitter.com",
            "instagram.com",
            "linkedin.com",
            "youtube.com",
        ],
        description="Hosts dropped by SearchOrchestrator.validate_results().",
    )


class BatchConfig(BaseModel):
    item_timeout_ms: int = Field(default=15000, ge=0, description="Timeout forced onto every batch item.")


class WebConfig(BaseModel):
    """Configuration for the HTTP API."""

    host: str = Field(default="127.0.0.1", description="Host for the web server.")
    port: int = Field(default=3000, description="Port for the web server.")
    api_version: str = Field(default="1.0.0", description="Version reported by the health endpoint.")


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(
        default=None,
        description="Path to log file. If None, logs to console.",
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "WebSift"
    scraper: ScraperConfig = Field(default_factory=ScraperConfig)
    robots: RobotsConfig = Field(default_factory=RobotsConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="WEBSIFT_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data: Dict[str, Any] | None = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "config.yaml", current_dir / "config.yml"):
        if path.exists():
            return path
    return None

