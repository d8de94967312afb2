"""Error handling for the dumpapp client."""

from dumpapp.errors.dumpapp_errors import EXIT_HUMAN_READABLE
from dumpapp.errors.dumpapp_errors import EXIT_INTERNAL_ERROR
from dumpapp.errors.dumpapp_errors import AdbConnectionError
from dumpapp.errors.dumpapp_errors import ConfigurationError
from dumpapp.errors.dumpapp_errors import ConnectionStateError
from dumpapp.errors.dumpapp_errors import DiscoveryAmbiguityError
from dumpapp.errors.dumpapp_errors import DiscoveryEmptyError
from dumpapp.errors.dumpapp_errors import DumpappError
from dumpapp.errors.dumpapp_errors import HumanReadableError
from dumpapp.errors.dumpapp_errors import ProtocolViolationError
from dumpapp.errors.dumpapp_errors import ServiceSelectionError
from dumpapp.errors.dumpapp_errors import TruncatedStreamError
from dumpapp.errors.dumpapp_errors import exit_status_for
from dumpapp.errors.dumpapp_errors import is_human_readable
from dumpapp.errors.dumpapp_errors import report_error

__all__ = [
    "EXIT_HUMAN_READABLE",
    "EXIT_INTERNAL_ERROR",
    "AdbConnectionError",
    "ConfigurationError",
    "ConnectionStateError",
    "DiscoveryAmbiguityError",
    "DiscoveryEmptyError",
    "DumpappError",
    "HumanReadableError",
    "ProtocolViolationError",
    "ServiceSelectionError",
    "TruncatedStreamError",
    "exit_status_for",
    "is_human_readable",
    "report_error",
]
