"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Flapper happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. This is
      the official FastAPI dependency injection pattern for config.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. executor_url -> EXECUTOR_URL). Type coercion and validation are
      built in.

  @model_validator(mode="after"): Runs cross-field validation after all fields
      are resolved from environment. Used to default INVENTORY_URL to the
      executor and to reject timeouts that would hang a workflow forever.

Layer rule: core/ is the kernel. This module may not import from api/, web/,
or relay/.
"""

import logging
from datetime import datetime
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("flapper.config")

_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False

    # ------------------------------------------------------------------
    # Remote endpoints (dashboard side)
    # ------------------------------------------------------------------

    executor_url: str = "http://localhost:3001"
    # Empty string means "same host as the executor".
    inventory_url: str = ""
    # Upper bound for inventory and academy calls.
    remote_timeout: float = 15.0
    # Upper bound for a hardening run. The relay runs the script synchronously
    # for up to SCRIPT_TIMEOUT, so this must not be shorter than that.
    run_timeout: float = 330.0
    # 0 disables background polling; the inventory is then loaded once.
    inventory_poll_seconds: float = 60.0

    # ------------------------------------------------------------------
    # Mitigation workflow
    # ------------------------------------------------------------------

    validate_delay: float = 0.8
    commit_delay: float = 1.2
    log_capacity: int = 50

    # ------------------------------------------------------------------
    # Academy (optional -- empty key means offline fallback content)
    # ------------------------------------------------------------------

    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-pro"

    # ------------------------------------------------------------------
    # Relay (executor side)
    # ------------------------------------------------------------------

    hardening_script: Path = _ROOT / "scripts" / "harden.ps1"
    powershell_executable: str = "powershell.exe"
    script_timeout: float = 300.0
    inventory_path: Path = _ROOT / "scripts" / "inventory.json"

    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def normalize(self) -> "Settings":
        """Strip trailing slashes from URLs and reject unusable timings."""
        self.executor_url = self.executor_url.rstrip("/")
        self.inventory_url = (self.inventory_url or self.executor_url).rstrip("/")
        if self.remote_timeout <= 0 or self.script_timeout <= 0:
            raise ValueError("REMOTE_TIMEOUT and SCRIPT_TIMEOUT must be positive.")
        if self.run_timeout < self.script_timeout:
            raise ValueError("RUN_TIMEOUT must be at least SCRIPT_TIMEOUT.")
        if self.validate_delay < 0 or self.commit_delay < 0:
            raise ValueError("VALIDATE_DELAY and COMMIT_DELAY must not be negative.")
        if self.inventory_poll_seconds < 0:
            raise ValueError("INVENTORY_POLL_SECONDS must not be negative.")
        if self.log_capacity < 1:
            raise ValueError("LOG_CAPACITY must be at least 1.")
        if self.debug and not self.gemini_api_key:
            logger.warning("GEMINI_API_KEY not set -- academy lookups will return offline content.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()


def local_timestamp() -> str:
    """Return the current local wall-clock time as HH:MM:SS."""
    return datetime.now().strftime("%H:%M:%S")
