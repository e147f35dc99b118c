"""
BeatCheck Custom Exceptions
===========================

Exception hierarchy for BeatCheck with error codes, context information,
and user-friendly error messages.

Only hard failures are raised to callers. Best-effort operations (batch
refresh, full-content enrichment, cookie lookup, blocklist loading) catch
these internally and degrade to an empty result.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for categorizing exceptions."""

    # Configuration errors (C001-C099)
    CONFIG_INVALID = "C001"

    # Feed ingestion errors (F001-F099)
    FEED_FETCH_TIMEOUT = "F002"
    FEED_PARSE_ERROR = "F003"
    FEED_NETWORK_ERROR = "F004"
    FEED_HTTP_STATUS = "F005"
    FEED_NOT_FOUND = "F006"

    # Content processing errors (P001-P099)
    CONTENT_EXTRACTION_FAILED = "P003"

    # Browser cookie store errors (K001-K099)
    COOKIE_STORE_COPY = "K001"
    COOKIE_STORE_OPEN = "K002"
    COOKIE_STORE_QUERY = "K003"


class BeatCheckError(Exception):
    """Base exception for all BeatCheck errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        recoverable: bool = False,
    ):
        """Initialize BeatCheck error.

        Args:
            message: Technical error message for logging
            error_code: Categorized error code
            context: Additional context information
            user_message: User-friendly error message
            recoverable: Whether the error is recoverable
        """
        super().__init__(message)
        self.error_code = error_code
        self.context = context or {}
        self.user_message = user_message or message
        self.recoverable = recoverable

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code.value if self.error_code else None,
            "error_message": str(self),
            "user_message": self.user_message,
            "context": self.context,
            "recoverable": self.recoverable,
        }

    def __str__(self) -> str:
        """String representation with error code."""
        if self.error_code:
            return f"[{self.error_code.value}] {super().__str__()}"
        return super().__str__()


class ConfigurationError(BeatCheckError):
    """Configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        """Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused the error
            **kwargs: Additional arguments for BeatCheckError
        """
        context = kwargs.get("context", {})
        if config_key:
            context["config_key"] = config_key

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONFIG_INVALID),
            context=context,
            user_message=kwargs.get("user_message", f"Configuration error: {message}"),
            **{
                k: v
                for k, v in kwargs.items()
                if k not in ["context", "error_code", "user_message"]
            },
        )


class FeedError(BeatCheckError):
    """Feed ingestion and parsing errors."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        """Initialize feed error.

        Args:
            message: Error message
            feed_url: Feed URL that caused the error
            **kwargs: Additional arguments for BeatCheckError
        """
        context = kwargs.get("context", {})
        if feed_url:
            context["feed_url"] = feed_url

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.FEED_NETWORK_ERROR),
            context=context,
            user_message=kwargs.get(
                "user_message", f"Feed processing failed: {message}"
            ),
            recoverable=kwargs.get("recoverable", True),
            **{
                k: v
                for k, v in kwargs.items()
                if k not in ["context", "error_code", "user_message", "recoverable"]
            },
        )

    @property
    def feed_url(self) -> Optional[str]:
        return self.context.get("feed_url")


class FetchError(FeedError):
    """Feed could not be retrieved: bad HTTP status, network failure or timeout."""

    def __init__(
        self,
        message: str,
        feed_url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if status_code is not None:
            context["status_code"] = status_code
            kwargs.setdefault("error_code", ErrorCode.FEED_HTTP_STATUS)
        super().__init__(message, feed_url=feed_url, context=context, **kwargs)

    @property
    def status_code(self) -> Optional[int]:
        return self.context.get("status_code")


class FeedParseError(FetchError):
    """Response body is not a recognized RSS or Atom document."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.FEED_PARSE_ERROR)
        kwargs.setdefault("user_message", "The response is not a valid RSS or Atom feed")
        super().__init__(message, feed_url=feed_url, **kwargs)


class DiscoveryError(FeedError):
    """No feed could be found at a site URL."""

    def __init__(self, message: str, feed_url: Optional[str] = None, **kwargs):
        kwargs.setdefault("error_code", ErrorCode.FEED_NOT_FOUND)
        kwargs.setdefault("user_message", "No RSS or Atom feed found at this URL")
        kwargs.setdefault("recoverable", False)
        super().__init__(message, feed_url=feed_url, **kwargs)


class ContentExtractionError(BeatCheckError):
    """HTML could not be rendered to text."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        if url:
            context["url"] = url

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.CONTENT_EXTRACTION_FAILED),
            context=context,
            user_message=kwargs.get("user_message", "Could not extract readable text"),
            recoverable=kwargs.get("recoverable", True),
        )


class CookieStoreError(BeatCheckError):
    """Browser cookie database could not be copied, opened or queried."""

    def __init__(
        self,
        message: str,
        browser: Optional[str] = None,
        store_path: Optional[str] = None,
        **kwargs,
    ):
        """Initialize cookie store error.

        Args:
            message: Error message
            browser: Browser family name ("chromium", "firefox")
            store_path: Path of the cookie database that failed
            **kwargs: Additional arguments for BeatCheckError
        """
        context = kwargs.get("context", {})
        if browser:
            context["browser"] = browser
        if store_path:
            context["store_path"] = str(store_path)

        super().__init__(
            message=message,
            error_code=kwargs.get("error_code", ErrorCode.COOKIE_STORE_QUERY),
            context=context,
            user_message=kwargs.get("user_message", "Browser cookies unavailable"),
            recoverable=kwargs.get("recoverable", True),
        )


def get_user_friendly_message(exception: Exception) -> str:
    """Get user-friendly error message for any exception.

    Args:
        exception: Exception to get message for

    Returns:
        User-friendly error message
    """
    if isinstance(exception, BeatCheckError):
        return exception.user_message

    # Fallback for non-BeatCheck exceptions
    return "An unexpected error occurred. Please try again later."
