"""
Structured error types for the OLX scraping engine.

Inner layers raise these; the public scraper operations and the tool
execution framework turn them into failed Results.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Machine-readable error kinds."""
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    ABORT_ERROR = "ABORT_ERROR"

    NETWORK_ERROR = "NETWORK_ERROR"
    PARSING_ERROR = "PARSING_ERROR"

    BROWSER_LAUNCH_ERROR = "BROWSER_LAUNCH_ERROR"
    PAGE_NAVIGATION_ERROR = "PAGE_NAVIGATION_ERROR"

    UNSUPPORTED_DOMAIN = "UNSUPPORTED_DOMAIN"
    LISTING_NOT_FOUND = "LISTING_NOT_FOUND"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"


class OlxError(Exception):
    """
    Base class for all engine errors.

    Args:
        message: Human readable message, reported verbatim to callers
        context: Optional tags (operation, component, url, selector, metadata)
        cause: Underlying exception, if any
    """

    code = ErrorCode.UNKNOWN_ERROR

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': type(self).__name__,
            'code': self.code.value,
            'message': self.message,
            'context': self.context,
            'cause': str(self.cause) if self.cause is not None else None,
        }


class ValidationError(OlxError):
    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(f"Validation failed: {message}", context, cause)


class CancellationError(OlxError):
    """Raised when a cancellation token has been signaled."""
    code = ErrorCode.ABORT_ERROR

    def __init__(self, operation: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        message = f'Operation "{operation}" was cancelled' if operation else "Operation cancelled"
        super().__init__(message, {**(context or {}), 'operation': operation})


class UnsupportedDomainError(OlxError):
    code = ErrorCode.UNSUPPORTED_DOMAIN

    def __init__(self, domain: Any, context: Optional[Dict[str, Any]] = None):
        from .config import list_supported_domains

        valid = ', '.join(d.value for d in list_supported_domains())
        super().__init__(
            f"Unsupported OLX domain: {domain}. Supported domains: {valid}",
            {**(context or {}), 'metadata': {'domain': str(domain)}},
        )
        self.domain = domain


class NavigationError(OlxError):
    code = ErrorCode.PAGE_NAVIGATION_ERROR

    def __init__(self, url: str, reason: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        message = f"Failed to navigate to {url}: {reason}" if reason else f"Failed to navigate to {url}"
        super().__init__(message, {**(context or {}), 'url': url}, cause)
        self.url = url


class NetworkError(OlxError):
    code = ErrorCode.NETWORK_ERROR

    def __init__(self, message: str, url: Optional[str] = None,
                 status: Optional[int] = None,
                 context: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(
            f"Network error: {message}",
            {**(context or {}), 'url': url, 'metadata': {'status': status}},
            cause,
        )
        self.url = url
        self.status = status


class ListingNotFoundError(OlxError):
    code = ErrorCode.LISTING_NOT_FOUND

    def __init__(self, listing_id: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"Listing with ID {listing_id} not found. Try searching first to cache the URL.",
            {**(context or {}), 'metadata': {'listing_id': listing_id}},
        )
        self.listing_id = listing_id


NotFoundError = ListingNotFoundError


class ParsingError(OlxError):
    code = ErrorCode.PARSING_ERROR

    def __init__(self, message: str, selector: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(f"Parsing failed: {message}", {**(context or {}), 'selector': selector}, cause)


class BrowserLaunchError(OlxError):
    code = ErrorCode.BROWSER_LAUNCH_ERROR

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(f"Browser launch failed: {message}", context, cause)


class BrowserNotStartedError(BrowserLaunchError):
    def __init__(self):
        super().__init__("browser session has not been started")


class ToolNotFoundError(OlxError):
    code = ErrorCode.TOOL_NOT_FOUND

    def __init__(self, tool_name: str):
        super().__init__(f"Tool not found: {tool_name}", {'metadata': {'tool_name': tool_name}})
        self.tool_name = tool_name


class UnexpectedError(OlxError):
    """Anything outside the taxonomy, tagged with where it happened."""
    code = ErrorCode.UNKNOWN_ERROR


def wrap_error(error: Any, operation: str, component: Optional[str] = None) -> OlxError:
    """
    Convert an arbitrary raised value into an OlxError.

    Errors already in the taxonomy keep their type and gain the operation
    tag. Anything else becomes an UnexpectedError whose message is the
    stringified value.
    """
    tags = {'operation': operation}
    if component:
        tags['component'] = component

    if isinstance(error, OlxError):
        for key, value in tags.items():
            error.context.setdefault(key, value)
        return error

    message = str(error) or type(error).__name__
    cause = error if isinstance(error, BaseException) else None
    return UnexpectedError(message, tags, cause)


# Errors that will fail the same way on every attempt
_NON_RETRYABLE = (
    CancellationError,
    ListingNotFoundError,
    ValidationError,
    UnsupportedDomainError,
)


def is_retryable(error: BaseException) -> bool:
    """Return True if repeating the failed operation could succeed."""
    return not isinstance(error, _NON_RETRYABLE)


def is_user_error(error: BaseException) -> bool:
    """Return True for errors caused by the caller's input."""
    return isinstance(error, (ValidationError, UnsupportedDomainError, ToolNotFoundError))
