"""Configuration management for the dumpapp client."""

from dumpapp.config.dumpapp_config import DEFAULT_ADB_PORT
from dumpapp.config.dumpapp_config import DEFAULT_HOST
from dumpapp.config.dumpapp_config import LOG_LEVELS
from dumpapp.config.dumpapp_config import DumpappConfig
from dumpapp.config.dumpapp_config import get_adb_server_port

__all__ = [
    "DEFAULT_ADB_PORT",
    "DEFAULT_HOST",
    "LOG_LEVELS",
    "DumpappConfig",
    "get_adb_server_port",
]
