"""Tests for environment-derived configuration."""

import pytest

from dumpapp.config import DumpappConfig
from dumpapp.config import get_adb_server_port
from dumpapp.errors import ConfigurationError


class TestAdbServerPort:
    def test_default_port(self) -> None:
        assert get_adb_server_port({}) == 5037

    def test_android_adb_server_port(self) -> None:
        assert get_adb_server_port({"ANDROID_ADB_SERVER_PORT": "5555"}) == 5555

    def test_server_socket_takes_last_field(self) -> None:
        assert get_adb_server_port({"ADB_SERVER_SOCKET": "tcp:localhost:6000"}) == 6000

    def test_server_socket_wins_over_port(self) -> None:
        environ = {"ADB_SERVER_SOCKET": "tcp:6000", "ANDROID_ADB_SERVER_PORT": "5555"}
        assert get_adb_server_port(environ) == 6000

    def test_unsupported_socket_spec(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            get_adb_server_port({"ADB_SERVER_SOCKET": "localfilesystem:/tmp/adb"})
        assert str(exc_info.value) == (
            "Invalid or unsupported socket spec 'localfilesystem:/tmp/adb' specified in ADB_SERVER_SOCKET."
        )

    @pytest.mark.parametrize(
        "environ",
        [{"ANDROID_ADB_SERVER_PORT": "abc"}, {"ADB_SERVER_SOCKET": "tcp:localhost:"}],
    )
    def test_invalid_integer(self, environ) -> None:
        with pytest.raises(ConfigurationError, match="Invalid integer"):
            get_adb_server_port(environ)

    def test_reads_process_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("ANDROID_ADB_SERVER_PORT", "5040")
        assert get_adb_server_port() == 5040


class TestDumpappConfig:
    def test_default_config(self) -> None:
        config = DumpappConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 5037
        assert config.device is None
        assert config.process is None
        assert config.log_level == "WARNING"

    def test_from_environ(self) -> None:
        config = DumpappConfig.from_environ(
            {
                "ANDROID_SERIAL": "emulator-5554",
                "STETHO_PROCESS": "com.example",
                "ANDROID_ADB_SERVER_PORT": "5038",
                "DUMPAPP_LOG_LEVEL": "debug",
            }
        )

        assert config.device == "emulator-5554"
        assert config.process == "com.example"
        assert config.port == 5038
        assert config.log_level == "DEBUG"

    def test_empty_values_are_unset(self) -> None:
        config = DumpappConfig.from_environ({"ANDROID_SERIAL": "", "STETHO_PROCESS": ""})

        assert config.device is None
        assert config.process is None

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown log level"):
            DumpappConfig.from_environ({"DUMPAPP_LOG_LEVEL": "chatty"})

    def test_port_out_of_range(self) -> None:
        with pytest.raises(ConfigurationError, match="out of range"):
            DumpappConfig(port=70000).validate()

    def test_empty_process(self) -> None:
        with pytest.raises(ConfigurationError, match="must not be empty"):
            DumpappConfig(process="").validate()

    def test_non_ascii_device(self) -> None:
        with pytest.raises(ConfigurationError, match="must be ASCII") as exc_info:
            DumpappConfig.from_environ({"ANDROID_SERIAL": "émulator-5554"})
        assert exc_info.value.config_key == "ANDROID_SERIAL"

    def test_non_ascii_process(self) -> None:
        with pytest.raises(ConfigurationError, match="must be ASCII") as exc_info:
            DumpappConfig(process="café").validate()
        assert exc_info.value.config_key == "process"
