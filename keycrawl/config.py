"""Centralised settings for the keycrawl service.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from keycrawl.crawler.models import CrawlConfig

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("KEYCRAWL_WORKSPACE", Path.home() / ".keycrawl_data")
        )
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        return self.workspace_dir / "reports.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Crawl budgets
    # ------------------------------------------------------------------
    crawl_max_depth: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_DEPTH", "3"))
    )
    crawl_max_pages: int = field(
        default_factory=lambda: int(os.environ.get("CRAWL_MAX_PAGES", "500"))
    )

    # ------------------------------------------------------------------
    # Page fetcher
    # ------------------------------------------------------------------
    fetcher_backend: str = field(
        default_factory=lambda: os.environ.get("FETCHER_BACKEND", "playwright")
    )
    navigation_timeout: float = field(
        default_factory=lambda: float(os.environ.get("NAVIGATION_TIMEOUT", "60.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "CRAWLER_USER_AGENT",
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/122.0.0.0 Safari/537.36",
        )
    )

    # ------------------------------------------------------------------
    # Analysis backend
    # ------------------------------------------------------------------
    analysis_webhook_url: str = field(
        default_factory=lambda: os.environ.get("ANALYSIS_WEBHOOK_URL", "")
    )
    analysis_timeout: float = field(
        default_factory=lambda: float(os.environ.get("ANALYSIS_TIMEOUT", "220.0"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )

    def crawl_config(self) -> CrawlConfig:
        """Build the immutable per-job crawl configuration."""
        return CrawlConfig(
            max_depth=self.crawl_max_depth,
            max_pages=self.crawl_max_pages,
            navigation_timeout=self.navigation_timeout,
        )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton; import this everywhere:
#   from keycrawl.config import settings
settings = Settings()
