"""Client side of the adb daemon's smart socket protocol."""

from dumpapp.adb.connection import AdbConnection
from dumpapp.adb.connection import ConnectionState
from dumpapp.adb.connection import SocketConnector
from dumpapp.adb.resolver import SocketTableRow
from dumpapp.adb.resolver import connect_to_device
from dumpapp.adb.resolver import extract_process
from dumpapp.adb.resolver import find_only_stetho_socket
from dumpapp.adb.resolver import format_process_as_socket_name
from dumpapp.adb.resolver import list_listening_abstract_sockets
from dumpapp.adb.resolver import parse_socket_table_line
from dumpapp.adb.resolver import resolve_target_socket_name
from dumpapp.adb.resolver import stetho_open
from dumpapp.adb.smart_socket import encode_service_request
from dumpapp.adb.smart_socket import select_service

__all__ = [
    "AdbConnection",
    "ConnectionState",
    "SocketConnector",
    "SocketTableRow",
    "connect_to_device",
    "encode_service_request",
    "extract_process",
    "find_only_stetho_socket",
    "format_process_as_socket_name",
    "list_listening_abstract_sockets",
    "parse_socket_table_line",
    "resolve_target_socket_name",
    "select_service",
    "stetho_open",
]
