"""Constants and default values for dex-access.

This module centralizes the reference numbers used throughout the library.
"""

from dex_access.core.config import CacheConfig, IndexConfig, LogConfig, RetryConfig, SuggestConfig

# ==================== DEFAULT CONFIG INSTANCES ====================

DEFAULT_RETRY = RetryConfig()
DEFAULT_CACHE = CacheConfig()
DEFAULT_INDEX = IndexConfig()
DEFAULT_SUGGEST = SuggestConfig()
DEFAULT_LOG = LogConfig()

# ==================== PAGINATION ====================

DEFAULT_BATCH_SIZE: int = DEFAULT_INDEX.batch_size  # Items per listing page

# ==================== SUGGESTIONS ====================

DEFAULT_SUGGESTION_LIMIT: int = DEFAULT_SUGGEST.default_limit

# ==================== LOGGING ====================

LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024  # 10MB max per log file
LOG_FILE_BACKUP_COUNT: int = 5  # Number of backup log files to keep

# ==================== RETRYABLE ERRORS ====================

# HTTP status codes that should trigger a retry
RETRYABLE_STATUS_CODES: set[int] = {408, 429, 500, 502, 503, 504}
