"""Custom exceptions for dex-access.

Every error raised on purpose by the library derives from DexAccessError so
callers can tell library failures apart from bugs.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable


class DexAccessError(Exception):
    """Base exception for all dex-access errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(DexAccessError):
    """Exception raised for invalid construction-time configuration.

    Examples:
        - Empty dictionary handed to a FuzzyMatcher
        - Non-positive batch size for a paginated listing
        - Supported kind requested with no fetch function available
    """

    def __init__(self, message: str, field: str | None = None, details: str | None = None):
        self.field = field
        super().__init__(message, details)


class UnsupportedResourceKindError(ConfigurationError):
    """Raised when a registry is asked for a kind it holds no accessor for."""

    def __init__(self, kind: Hashable, supported: Iterable[Hashable] = ()):
        self.kind = kind
        self.supported = tuple(supported)
        names = ", ".join(sorted(str(k) for k in self.supported)) or "none"
        super().__init__(f"No accessor registered for resource kind '{kind}'", details=f"supported kinds: {names}")


class DuplicateAccessorError(ConfigurationError):
    """Raised when two fetch functions claim the same resource kind."""

    def __init__(self, kind: Hashable, candidates: Iterable[str]):
        self.kind = kind
        self.candidates = tuple(candidates)
        super().__init__(
            f"More than one fetch function provides resource kind '{kind}'",
            details=f"candidates: {', '.join(self.candidates)}",
        )


class ResourceNotFoundError(DexAccessError):
    """Raised by a raw fetch when the resource definitively does not exist upstream.

    Never retried.
    """

    def __init__(self, resource_id: int | str, kind: Hashable | None = None, details: str | None = None):
        self.resource_id = resource_id
        self.kind = kind
        what = f"{kind} #{resource_id}" if kind is not None else f"resource #{resource_id}"
        super().__init__(f"{what} not found", details)


class RetryableHTTPError(Exception):
    """Exception raised when the API returns a retryable HTTP status code."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}: {message}" if message else f"HTTP {status_code}")


class RetryExhaustedError(DexAccessError):
    """Terminal failure after the retry budget ran out.

    Attributes:
        operation: Name of the operation that was retried
        attempts: Number of attempts made (initial call included)
        elapsed: Seconds elapsed between the first attempt and giving up
        last_error: The exception raised by the final attempt
    """

    def __init__(self, operation: str, attempts: int, elapsed: float, last_error: BaseException):
        self.operation = operation
        self.attempts = attempts
        self.elapsed = elapsed
        self.last_error = last_error
        super().__init__(
            f"{operation} failed after {attempts} attempt(s) in {elapsed:.1f}s",
            details=f"{type(last_error).__name__}: {last_error}",
        )


class IndexBuildError(DexAccessError):
    """Raised when a batch request fails while building a name index.

    The index is never left partially built.
    """

    def __init__(self, offset: int, original_error: BaseException, label: str | None = None):
        self.offset = offset
        self.original_error = original_error
        self.label = label
        target = f"'{label}' index" if label else "name index"
        super().__init__(
            f"Failed to build {target} at offset {offset}",
            details=f"{type(original_error).__name__}: {original_error}",
        )
