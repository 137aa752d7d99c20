"""Configuration loaded from the environment (and an optional .env file)."""
import logging
import os
from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional
from dotenv import load_dotenv
from stalefinder.domain.errors import ConfigError
from stalefinder.domain.models import SearchCriteria


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Gofrs popstalerepo bot"


@dataclass(frozen=True)
class FinderConfig:
    """Runtime settings for one run of the finder."""
    github_token: str
    criteria: SearchCriteria
    godoc_base_url: str = "https://godoc.org"
    user_agent: str = DEFAULT_USER_AGENT
    scrape_concurrency: int = 8
    http_timeout: int = 30


def load_env_files() -> None:
    """Load environment variables from .env or env file."""
    load_dotenv('.env') or load_dotenv('env')


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def _get_date(env: Mapping[str, str], name: str, default: date) -> date:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an ISO date (YYYY-MM-DD), got {raw!r}")


def load_config(env: Optional[Mapping[str, str]] = None) -> FinderConfig:
    """Build the configuration from environment variables.

    Args:
        env: Mapping to read instead of ``os.environ`` (used by tests)

    Raises:
        ConfigError: When GITHUB_TOKEN is missing or a value is invalid
    """
    if env is None:
        env = os.environ

    github_token = env.get("GITHUB_TOKEN")
    if not github_token:
        raise ConfigError("environment variable GITHUB_TOKEN is required")

    defaults = SearchCriteria()
    criteria = SearchCriteria(
        min_stars=_get_int(env, "STALE_MIN_STARS", defaults.min_stars),
        pushed_before=_get_date(env, "STALE_PUSHED_BEFORE", defaults.pushed_before),
        language=env.get("STALE_LANGUAGE") or defaults.language
    )

    config = FinderConfig(
        github_token=github_token,
        criteria=criteria,
        godoc_base_url=env.get("GODOC_BASE_URL") or "https://godoc.org",
        user_agent=env.get("SCRAPER_USER_AGENT") or DEFAULT_USER_AGENT,
        scrape_concurrency=_get_int(env, "SCRAPE_CONCURRENCY", 8),
        http_timeout=_get_int(env, "HTTP_TIMEOUT_SECONDS", 30)
    )
    logger.debug(
        f"Loaded configuration: criteria={criteria.to_query()!r}, "
        f"godoc={config.godoc_base_url}, concurrency={config.scrape_concurrency}"
    )
    return config
