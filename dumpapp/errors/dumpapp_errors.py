"""Centralized error handling for the dumpapp client.

This module provides a hierarchy of exceptions for the different ways a
dumpapp run can fail, along with the mapping from an exception to the
process exit status reported by the command line entry point.

Two families matter to callers:

* :class:`HumanReadableError` and its subclasses describe problems with the
  environment or the target (bad configuration, no device, no matching
  process). Only their message is shown to the user.
* Everything else describes a broken peer or an internal bug and is
  reported with full diagnostic detail.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any
from typing import TextIO

logger = logging.getLogger(__name__)

EXIT_HUMAN_READABLE = 1
EXIT_INTERNAL_ERROR = 2


class DumpappError(Exception):
    """Base exception for all dumpapp errors.

    All dumpapp-specific exceptions inherit from this class so the CLI can
    tell them apart from unexpected failures.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for structured logging."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause!s})"
        return self.message


class HumanReadableError(DumpappError):
    """Raised for failures whose message alone explains what went wrong."""

    def __str__(self) -> str:
        return self.message


class ConfigurationError(HumanReadableError):
    """Raised when an environment value or option cannot be used."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, error_code="ConfigurationError", details=details, **kwargs)
        self.config_key = config_key


class DiscoveryEmptyError(HumanReadableError):
    """Raised when no stetho-enabled process is listening on the device."""

    def __init__(self, message: str = "No stetho-enabled processes running", **kwargs: Any) -> None:
        super().__init__(message, error_code="DiscoveryEmptyError", **kwargs)


class DiscoveryAmbiguityError(HumanReadableError):
    """Raised when more than one stetho-enabled process is listening."""

    def __init__(self, processes: list[str], **kwargs: Any) -> None:
        listing = "".join(f"\t{name}\n" for name in processes)
        message = (
            "Multiple stetho-enabled processes available:\n"
            f"{listing}"
            "Use -p <process> or the environment variable STETHO_PROCESS to select one"
        )
        details = kwargs.pop("details", {})
        details["processes"] = list(processes)
        super().__init__(message, error_code="DiscoveryAmbiguityError", details=details, **kwargs)
        self.processes = list(processes)


class AdbConnectionError(DumpappError):
    """Raised when the adb daemon cannot be reached or the stream breaks."""

    def __init__(
        self,
        message: str,
        *,
        host: str | None = None,
        port: int | None = None,
        operation: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        if host:
            details["host"] = host
        if port is not None:
            details["port"] = port
        super().__init__(message, error_code="AdbConnectionError", details=details, **kwargs)
        self.host = host
        self.port = port
        self.operation = operation


class TruncatedStreamError(DumpappError):
    """Raised when the peer closes the stream in the middle of a frame."""

    def __init__(
        self,
        expected: int,
        received: int,
        context: str,
        **kwargs: Any,
    ) -> None:
        message = f"Unexpected end of stream while reading {context}"
        details = kwargs.pop("details", {})
        details.update({"expected": expected, "received": received, "context": context})
        super().__init__(message, error_code="TruncatedStreamError", details=details, **kwargs)
        self.expected = expected
        self.received = received
        self.context = context


class ServiceSelectionError(DumpappError):
    """Raised when the daemon answers a service request with FAIL."""

    def __init__(self, reason: str, *, service: str | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if service:
            details["service"] = service
        super().__init__(reason, error_code="ServiceSelectionError", details=details, **kwargs)
        self.reason = reason
        self.service = service


class ProtocolViolationError(DumpappError):
    """Raised when a peer sends bytes that do not fit the protocol."""

    def __init__(self, message: str, *, received: bytes | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if received is not None:
            details["received"] = received
        super().__init__(message, error_code="ProtocolViolationError", details=details, **kwargs)
        self.received = received


class ConnectionStateError(DumpappError):
    """Raised when a connection operation is attempted in the wrong state."""

    def __init__(self, operation: str, state: str, **kwargs: Any) -> None:
        message = f"Cannot {operation} a connection in state {state}"
        details = kwargs.pop("details", {})
        details.update({"operation": operation, "state": state})
        super().__init__(message, error_code="ConnectionStateError", details=details, **kwargs)
        self.operation = operation
        self.state = state


def is_human_readable(error: BaseException) -> bool:
    """Return True when only the error message should be shown to the user.

    An unreachable daemon is an environment problem and is reported like the
    other human readable failures. A stream that breaks later is not.
    """
    if isinstance(error, HumanReadableError):
        return True
    return isinstance(error, AdbConnectionError) and error.operation == "connect"


def exit_status_for(error: BaseException) -> int:
    """Map an exception to the exit status the CLI reports for it."""
    if is_human_readable(error):
        return EXIT_HUMAN_READABLE
    return EXIT_INTERNAL_ERROR


def report_error(error: BaseException, stream: TextIO) -> int:
    """Write ``error`` to ``stream`` and return the exit status for it.

    Human readable errors print only their message. Anything else prints the
    full traceback so an internal bug can be diagnosed.
    """
    if isinstance(error, DumpappError):
        logger.debug("dumpapp failed: %s", error.to_dict())
    if is_human_readable(error):
        print(str(error), file=stream)
    else:
        traceback.print_exception(type(error), error, error.__traceback__, file=stream)
    stream.flush()
    return exit_status_for(error)
