"""Decorators for command functions."""

import asyncio
import functools
import inspect
import time
import traceback
from collections.abc import Callable

import pydantic
import typer

from taskboard_cli.exceptions import (
    NetworkOrServerError,
    SessionExpiredError,
    ValidationError,
)
from taskboard_cli.utils import exit_codes
from taskboard_cli.utils.logger import get_logger
from taskboard_cli.utils.ui.formatters import format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = exit_codes.ERROR_GENERAL):
        super().__init__(message)
        self.exit_code = exit_code


def _classify(error: Exception) -> tuple[str, int]:
    """Map an exception onto a user-facing message and exit code."""
    if isinstance(error, AppError):
        return str(error), error.exit_code
    if isinstance(error, SessionExpiredError):
        return (
            "Your session has expired. Update the token with "
            "'taskboard config set api.token <token>'.",
            exit_codes.ERROR_AUTH_FAILURE,
        )
    if isinstance(error, ValidationError):
        return f"Rejected by server: {error}", exit_codes.ERROR_INVALID_ARGS
    if isinstance(error, NetworkOrServerError):
        return f"Request failed: {error}", exit_codes.ERROR_NETWORK
    if isinstance(error, pydantic.ValidationError):
        details = "; ".join(err["msg"] for err in error.errors())
        return f"Invalid input: {details}", exit_codes.ERROR_INVALID_ARGS
    return f"An unexpected error occurred: {error}", exit_codes.ERROR_GENERAL


def command_wrapper(func: Callable):
    """Run a (possibly async) command with logging and error reporting."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger("commands")
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            if inspect.iscoroutinefunction(func):
                result = asyncio.run(func(*args, **kwargs))
            else:
                result = func(*args, **kwargs)

            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except typer.Exit:
            # Re-raise Typer's own exits (like --help or explicit Exit(0))
            raise

        except Exception as e:
            elapsed = time.monotonic() - start
            message, code = _classify(e)
            if code == exit_codes.ERROR_GENERAL:
                logger.error(
                    "command failed: %s (%.3fs) - %s\n%s",
                    cmd,
                    elapsed,
                    str(e),
                    traceback.format_exc(),
                )
            else:
                logger.error("command failed: %s (%.3fs) - %s", cmd, elapsed, str(e))
            format_error(message)
            raise typer.Exit(code=code) from e

    return wrapper
