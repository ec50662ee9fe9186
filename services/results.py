"""
services/results.py
-------------------
Uniform result shape for every mutating service operation:
``{"success": bool, "message": str, ...}``. Handlers branch on
``success`` and show ``message`` to the user verbatim.
"""

from functools import wraps
from typing import Callable

from services.errors import LedgerError
from utils.logger import get_logger

logger = get_logger(__name__)


def ok(message: str, **extra) -> dict:
    return {"success": True, "message": message, **extra}


def fail(message: str, **extra) -> dict:
    return {"success": False, "message": message, **extra}


def service_action(action: str) -> Callable:
    """
    Decorator that converts exceptions raised by a service method into
    failed results.

    LedgerError subclasses keep their own message, ValueError from model
    validation is reported as-is, and anything else is logged with its
    traceback and reported as a server error.

    Usage:
        @service_action("close the period")
        def close_period(self, user_id): ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs) -> dict:
            try:
                return func(*args, **kwargs)
            except LedgerError as e:
                logger.warning(f"Could not {action}: {e.message}")
                return fail(e.message)
            except ValueError as e:
                logger.warning(f"Validation failed while trying to {action}: {e}")
                return fail(str(e))
            except Exception as e:
                logger.exception(f"Unexpected error while trying to {action}: {e}")
                return fail(f"Server error: could not {action}. Please try again.")
        return wrapper
    return decorator


def service_report(func: Callable) -> Callable:
    """
    Decorator for read-only methods that return formatted text.
    A LedgerError becomes its message instead of an exception.
    """
    @wraps(func)
    def wrapper(*args, **kwargs) -> str:
        try:
            return func(*args, **kwargs)
        except LedgerError as e:
            return f"⚠️ {e.message}"
    return wrapper
