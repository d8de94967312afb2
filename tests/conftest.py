from __future__ import annotations

# isort: skip-file
import sys
from pathlib import Path

import pytest

# Make ``tests.*`` helpers and the in-tree package importable without an
# editable install.
_ROOT_DIR = str(Path(__file__).resolve().parent.parent)
if _ROOT_DIR not in sys.path:
    sys.path.insert(0, _ROOT_DIR)

from tests.mocks import ScriptedConnector  # noqa: E402


@pytest.fixture
def scripted_connector():
    """Build ScriptedConnectors whose sockets are closed at the end of the test."""
    connectors: list[ScriptedConnector] = []

    def factory(*responses: bytes) -> ScriptedConnector:
        connector = ScriptedConnector(*responses)
        connectors.append(connector)
        return connector

    yield factory
    for connector in connectors:
        connector.close()


@pytest.fixture(autouse=True)
def _isolate_adb_environment(monkeypatch):
    """Keep the developer's adb environment from leaking into tests."""
    for name in (
        "ADB_SERVER_SOCKET",
        "ANDROID_ADB_SERVER_PORT",
        "ANDROID_SERIAL",
        "STETHO_PROCESS",
        "DUMPAPP_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
