"""
Unified Error Handling

Catalog error taxonomy, transport error mapping and user-facing error messages.
"""

import asyncio
import json
import time
from functools import wraps
from typing import Any, Callable, Dict, Optional

import httpx

from ecocatalog.core.logger import get_logger


class CatalogError(Exception):
    """Base error"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(CatalogError):
    """Invalid configuration"""
    pass


class NetworkFailure(CatalogError):
    """Catalog service unreachable or timed out"""
    pass


class ServerRejection(CatalogError):
    """Catalog service answered with an error status or an unsuccessful envelope"""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class ValidationRejected(ServerRejection):
    """Payload refused by server-side validation"""
    pass


class NotFound(ServerRejection):
    """Listing identifier unknown to the server"""
    pass


class UnexpectedFailure(CatalogError):
    """Anything else, malformed responses included"""
    pass


def _server_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return response.text.strip()
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or "").strip()
    return ""


def rejection_from_response(response: httpx.Response) -> ServerRejection:
    """
    Build the rejection matching an error response

    Args:
        response: HTTP response with a 4xx/5xx status

    Returns:
        ServerRejection subclass instance
    """
    status = response.status_code
    message = _server_message(response) or response.reason_phrase or "Request rejected"
    if status == 404:
        return NotFound(message, status_code=status)
    if status in (400, 422):
        return ValidationRejected(message, status_code=status)
    return ServerRejection(message, status_code=status)


def handle_transport_errors(func: Callable) -> Callable:
    """
    Map httpx and decoding failures of a transport call onto the catalog taxonomy

    CatalogError subclasses raised by the wrapped call pass through untouched.
    """
    @wraps(func)
    async def async_wrapper(self, *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except CatalogError:
            raise
        except asyncio.CancelledError:
            self.logger.debug(f"Task cancelled in {func.__name__}")
            raise
        except (httpx.TimeoutException, httpx.NetworkError, ConnectionError) as e:
            self.logger.warning(f"Network error in {func.__name__}: {e}")
            raise NetworkFailure(str(e) or e.__class__.__name__) from e
        except httpx.HTTPStatusError as e:
            self.logger.error(f"HTTP error in {func.__name__}: {e.response.status_code}")
            raise rejection_from_response(e.response) from e
        except httpx.HTTPError as e:
            self.logger.error(f"HTTP request error in {func.__name__}: {e}")
            raise NetworkFailure(str(e) or e.__class__.__name__) from e
        except Exception as e:
            self.logger.error(f"Unexpected error in {func.__name__}: {e}")
            raise UnexpectedFailure(str(e) or e.__class__.__name__) from e

    return async_wrapper


def describe_error(error: BaseException, action: str) -> str:
    """
    Render a failure as the single message shown to the user

    Args:
        error: the failure
        action: what was attempted, e.g. "load products"

    Returns:
        Human-readable message
    """
    message = f"Failed to {action}."
    if isinstance(error, ServerRejection):
        if error.status_code is not None:
            message += f" Server responded with status {error.status_code}."
        if error.message:
            message += f" {error.message}"
    elif isinstance(error, NetworkFailure):
        message += " No response received from server. Please check your connection."
    elif isinstance(error, CatalogError):
        if error.message:
            message += f" {error.message}"
    else:
        detail = str(error) or error.__class__.__name__
        message += f" {detail}"
    return message


def log_execution_time(logger=None):
    """
    Log how long the decorated coroutine took

    Args:
        logger: logger to use, the global one by default
    """
    if logger is None:
        logger = get_logger()

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.monotonic()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                elapsed = time.monotonic() - start_time
                logger.debug(f"{func.__name__} failed after {elapsed:.2f}s: {e}")
                raise
            elapsed = time.monotonic() - start_time
            logger.debug(f"{func.__name__} executed in {elapsed:.2f}s")
            return result

        return async_wrapper
    return decorator
