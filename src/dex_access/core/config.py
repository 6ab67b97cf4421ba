"""Configuration dataclasses for dex-access.

These dataclasses centralize all configuration options for type safety and
easy testing. Build them directly in code, or read them from the environment
(and an optional .env file) with DexConfig.from_env().
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from dotenv import find_dotenv, load_dotenv


@dataclass
class RetryConfig:
    """Configuration for retry logic with exponential backoff.

    Attributes:
        base_delay: Wait before the first retry in seconds (default: 10.0)
        exponential_base: Multiplier applied to each following wait (default: 2)
        max_delay: Cap for a single wait in seconds (default: 60.0)
        max_elapsed: Total time budget in seconds; no wait is taken past it (default: 60.0)
        jitter: Randomize waits by a factor in [0.5, 1.5] (default: False)
    """

    base_delay: float = 10.0
    exponential_base: int = 2
    max_delay: float = 60.0
    max_elapsed: float = 60.0
    jitter: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and diagnostics."""
        return {
            "base_delay": self.base_delay,
            "exponential_base": self.exponential_base,
            "max_delay": self.max_delay,
            "max_elapsed": self.max_elapsed,
            "jitter": self.jitter,
        }


@dataclass
class CacheConfig:
    """Configuration for per-accessor result caching.

    Attributes:
        enabled: Store fetched values (default: True)
        ttl_seconds: Sliding time-to-live since last access (default: 86400 = 24 hours)
        max_size: Maximum entries before LRU eviction, None for unbounded (default: None)
    """

    enabled: bool = True
    ttl_seconds: float = 24 * 60 * 60
    max_size: int | None = None


@dataclass
class IndexConfig:
    """Configuration for building name indexes from paginated listings.

    Attributes:
        batch_size: Items requested per listing page (default: 100)
        show_progress: Display a progress bar while draining listings (default: False)
    """

    batch_size: int = 100
    show_progress: bool = False


@dataclass
class SuggestConfig:
    """Configuration for spelling suggestions.

    Attributes:
        default_limit: Distance buckets inspected by a plain suggest() (default: 10)
        hint_max_distance: Maximum edit distance for guess hints (default: 1)
        hint_max_results: Distance buckets inspected for guess hints (default: 1)
    """

    default_limit: int = 10
    hint_max_distance: int = 1
    hint_max_results: int = 1


@dataclass
class ClientConfig:
    """Configuration for the PokeAPI HTTP client.

    Attributes:
        base_url: API root (default: https://pokeapi.co/api/v2)
        timeout: Request timeout in seconds (default: 30.0)
        user_agent: User-Agent header sent with each request
    """

    base_url: str = "https://pokeapi.co/api/v2"
    timeout: float = 30.0
    user_agent: str = "dex-access"


@dataclass
class LogConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level string (default: "INFO")
        format: "text" or "json" (default: "text")
        file: Optional log file path, rotated at 10MB (default: None)
    """

    level: str = "INFO"
    format: str = "text"
    file: str | None = None


@dataclass
class DexConfig:
    """Master configuration, created once at start-up and passed down explicitly."""

    retry: RetryConfig = field(default_factory=RetryConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    index: IndexConfig = field(default_factory=IndexConfig)
    suggest: SuggestConfig = field(default_factory=SuggestConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def from_env(cls, dotenv: bool = True, logger: logging.Logger | None = None) -> DexConfig:
        """Create configuration from DEX_* environment variables.

        Args:
            dotenv: Load a .env file from the working directory first (default: True)
            logger: Logger for warnings about ignored values

        Invalid values are ignored with a warning and the default is kept.
        """
        logger = logger or logging.getLogger(__name__)
        if dotenv and load_dotenv(find_dotenv(usecwd=True)):
            logger.debug(".env file found and loaded")

        env = _EnvReader(logger)
        retry = RetryConfig(
            base_delay=env.number("DEX_RETRY_BASE_DELAY", float, RetryConfig.base_delay),
            max_delay=env.number("DEX_RETRY_MAX_DELAY", float, RetryConfig.max_delay),
            max_elapsed=env.number("DEX_RETRY_MAX_ELAPSED", float, RetryConfig.max_elapsed),
            jitter=env.flag("DEX_RETRY_JITTER", RetryConfig.jitter),
        )
        # Guard against inverted windows that would cap every wait below the base
        if retry.max_delay < retry.base_delay:
            logger.warning(
                f"Ignoring invalid retry delay window (max_delay={retry.max_delay} < "
                f"base_delay={retry.base_delay}); using max_delay={retry.base_delay}"
            )
            retry.max_delay = retry.base_delay

        max_size = env.number("DEX_CACHE_MAX_SIZE", int, 0)
        return cls(
            retry=retry,
            cache=CacheConfig(
                enabled=env.flag("DEX_CACHE_ENABLED", CacheConfig.enabled),
                ttl_seconds=env.number("DEX_CACHE_TTL", float, CacheConfig.ttl_seconds),
                max_size=max_size or None,
            ),
            index=IndexConfig(
                batch_size=env.number("DEX_INDEX_BATCH_SIZE", int, IndexConfig.batch_size, minimum=1),
                show_progress=env.flag("DEX_INDEX_PROGRESS", IndexConfig.show_progress),
            ),
            suggest=SuggestConfig(
                default_limit=env.number("DEX_SUGGEST_LIMIT", int, SuggestConfig.default_limit, minimum=1),
            ),
            client=ClientConfig(
                base_url=os.environ.get("DEX_API_BASE_URL", ClientConfig.base_url).rstrip("/"),
                timeout=env.number("DEX_API_TIMEOUT", float, ClientConfig.timeout),
            ),
            log=LogConfig(
                level=os.environ.get("LOG_LEVEL", LogConfig.level),
                format=os.environ.get("DEX_LOG_FORMAT", LogConfig.format),
                file=os.environ.get("DEX_LOG_FILE") or None,
            ),
        )


class _EnvReader:
    """Read typed values from os.environ, warning about bad ones."""

    _TRUE = {"1", "true", "yes", "on"}
    _FALSE = {"0", "false", "no", "off"}

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def number(self, name: str, cast: Callable[[str], Any], default: Any, minimum: float = 0) -> Any:
        raw = os.environ.get(name)
        if raw is None:
            return default
        try:
            parsed = cast(raw)
        except (TypeError, ValueError):
            parsed = None
        if parsed is None or (isinstance(parsed, float) and not math.isfinite(parsed)) or parsed < minimum:
            self.logger.warning(f"Ignoring invalid {name}={raw!r}; using default {default}")
            return default
        return parsed

    def flag(self, name: str, default: bool) -> bool:
        raw = os.environ.get(name)
        if raw is None:
            return default
        value = raw.strip().lower()
        if value in self._TRUE:
            return True
        if value in self._FALSE:
            return False
        self.logger.warning(f"Ignoring invalid {name}={raw!r}; using default {default}")
        return default
