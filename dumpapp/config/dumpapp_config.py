"""Environment-derived configuration for the dumpapp client.

The adb tool family is configured through environment variables rather than
a config file. This module gathers them in one place so the protocol layers
only ever receive plain values.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal
from typing import Mapping

from dumpapp.errors import ConfigurationError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_ADB_PORT = 5037

ENV_SERVER_SOCKET = "ADB_SERVER_SOCKET"
ENV_SERVER_PORT = "ANDROID_ADB_SERVER_PORT"
ENV_SERIAL = "ANDROID_SERIAL"
ENV_PROCESS = "STETHO_PROCESS"
ENV_LOG_LEVEL = "DUMPAPP_LOG_LEVEL"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_adb_server_port_from_server_socket(environ: Mapping[str, str]) -> str | None:
    """Return the port field of ``ADB_SERVER_SOCKET``, if it is set.

    Only ``tcp:`` socket specs are supported; the last colon separated field
    is taken as the port.
    """
    socket_spec = environ.get(ENV_SERVER_SOCKET)
    if socket_spec is None:
        return None
    if not socket_spec.startswith("tcp:"):
        raise ConfigurationError(
            f"Invalid or unsupported socket spec '{socket_spec}' specified in {ENV_SERVER_SOCKET}.",
            config_key=ENV_SERVER_SOCKET,
        )
    return socket_spec.split(":")[-1]


def get_adb_server_port(environ: Mapping[str, str] | None = None) -> int:
    """Resolve the adb server port from the environment (default 5037)."""
    if environ is None:
        environ = os.environ
    port_str = get_adb_server_port_from_server_socket(environ)
    if port_str is None:
        port_str = environ.get(ENV_SERVER_PORT)
    if port_str is None:
        return DEFAULT_ADB_PORT
    try:
        return int(port_str)
    except ValueError:
        raise ConfigurationError(
            f"Invalid integer '{port_str}' specified in {ENV_SERVER_PORT} or {ENV_SERVER_SOCKET}.",
            config_key=ENV_SERVER_PORT,
        ) from None


@dataclass
class DumpappConfig:
    """Settings for one dumpapp run."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_ADB_PORT
    device: str | None = None
    process: str | None = None
    log_level: LogLevel = "WARNING"

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> DumpappConfig:
        """Create config from ``ADB_*``, ``ANDROID_*`` and ``STETHO_*`` variables."""
        if environ is None:
            environ = os.environ
        log_level = environ.get(ENV_LOG_LEVEL, "WARNING").upper()
        config = cls(
            port=get_adb_server_port(environ),
            device=environ.get(ENV_SERIAL) or None,
            process=environ.get(ENV_PROCESS) or None,
            log_level=log_level,  # type: ignore[arg-type]
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration and raise errors for unusable values."""
        if not 0 < self.port < 65536:
            raise ConfigurationError(
                f"Port {self.port} is out of range",
                config_key="port",
                details={"port": self.port},
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level '{self.log_level}' specified in --log-level or {ENV_LOG_LEVEL}.",
                config_key=ENV_LOG_LEVEL,
                details={"choices": list(LOG_LEVELS)},
            )
        if self.process is not None and not self.process:
            raise ConfigurationError("Process name must not be empty", config_key="process")
        # Service requests are ASCII on the wire.
        if self.device is not None and not self.device.isascii():
            raise ConfigurationError(
                f"Device serial '{self.device}' must be ASCII", config_key=ENV_SERIAL
            )
        if self.process is not None and not self.process.isascii():
            raise ConfigurationError(
                f"Process name '{self.process}' must be ASCII", config_key="process"
            )
