"""Core module - Foundation components with no internal dependencies.

This module provides the basic building blocks used throughout the library:
- Version information
- Custom exceptions
- Configuration dataclasses
- Constants and defaults
- Logging setup
"""

from dex_access.core.version import __version__

from dex_access.core.exceptions import (
    DexAccessError,
    ConfigurationError,
    UnsupportedResourceKindError,
    DuplicateAccessorError,
    ResourceNotFoundError,
    RetryableHTTPError,
    RetryExhaustedError,
    IndexBuildError,
)

from dex_access.core.config import (
    RetryConfig,
    CacheConfig,
    IndexConfig,
    SuggestConfig,
    ClientConfig,
    LogConfig,
    DexConfig,
)

from dex_access.core.constants import (
    DEFAULT_RETRY,
    DEFAULT_CACHE,
    DEFAULT_INDEX,
    DEFAULT_SUGGEST,
    DEFAULT_LOG,
    DEFAULT_BATCH_SIZE,
    DEFAULT_SUGGESTION_LIMIT,
    LOG_FILE_MAX_BYTES,
    LOG_FILE_BACKUP_COUNT,
    RETRYABLE_STATUS_CODES,
)

from dex_access.core.logging import (
    JSONFormatter,
    SensitiveDataFilter,
    setup_logging,
    with_log_context,
)

__all__ = [
    # Version
    '__version__',
    # Exceptions
    'DexAccessError',
    'ConfigurationError',
    'UnsupportedResourceKindError',
    'DuplicateAccessorError',
    'ResourceNotFoundError',
    'RetryableHTTPError',
    'RetryExhaustedError',
    'IndexBuildError',
    # Config dataclasses
    'RetryConfig',
    'CacheConfig',
    'IndexConfig',
    'SuggestConfig',
    'ClientConfig',
    'LogConfig',
    'DexConfig',
    # Constants
    'DEFAULT_RETRY',
    'DEFAULT_CACHE',
    'DEFAULT_INDEX',
    'DEFAULT_SUGGEST',
    'DEFAULT_LOG',
    'DEFAULT_BATCH_SIZE',
    'DEFAULT_SUGGESTION_LIMIT',
    'LOG_FILE_MAX_BYTES',
    'LOG_FILE_BACKUP_COUNT',
    'RETRYABLE_STATUS_CODES',
    # Logging
    'JSONFormatter',
    'SensitiveDataFilter',
    'setup_logging',
    'with_log_context',
]
