"""Configuration for the Tote link cache."""
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


# Sent with every outbound request; some servers reject or degrade
# responses for clients they do not recognize.
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

APP_NAME = "tote"


def default_cache_dir() -> Path:
    """Get the platform cache directory for the application.

    Returns:
        Path to the application cache root
    """
    home = Path.home()
    if os.name == "nt":  # Windows
        local_app_data = os.environ.get("LOCALAPPDATA")
        base = Path(local_app_data) if local_app_data else home / "AppData" / "Local"
        return base / APP_NAME
    elif sys.platform == "darwin":  # macOS
        return home / "Library" / "Caches" / APP_NAME

    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    base = Path(xdg_cache) if xdg_cache else home / ".cache"
    return base / APP_NAME


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class FetchConfig:
    """Configuration for outbound page and asset fetches."""
    user_agent: str = USER_AGENT
    request_timeout: Optional[float] = 30.0  # Seconds, None = wait forever

    # Batch refresh
    max_concurrent_requests: int = 5

    # Download icon and image concurrently once metadata is known
    parallel_assets: bool = False

    @classmethod
    def from_env(cls) -> "FetchConfig":
        """Create config from environment variables."""
        timeout_str = os.environ.get("TOTE_TIMEOUT", "30.0")
        timeout = None if timeout_str.strip().lower() in ("", "none") else float(timeout_str)

        return cls(
            request_timeout=timeout,
            max_concurrent_requests=int(os.environ.get("TOTE_MAX_CONCURRENT", "5")),
            parallel_assets=_env_flag("TOTE_PARALLEL_ASSETS"),
        )


@dataclass
class Config:
    """Main configuration for the link cache."""
    fetch: FetchConfig = field(default_factory=FetchConfig.from_env)
    cache_dir: Path = field(default_factory=default_cache_dir)

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        cache_dir_str = os.environ.get("TOTE_CACHE_DIR")
        cache_dir = Path(cache_dir_str).expanduser() if cache_dir_str else default_cache_dir()

        return cls(
            fetch=FetchConfig.from_env(),
            cache_dir=cache_dir,
        )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global config instance.

    Returns:
        Config loaded from environment
    """
    global _config

    if _config is None:
        _config = Config.from_env()

    return _config
