from __future__ import annotations

import pytest

from dumpapp import cli
from dumpapp.errors import ConfigurationError
from dumpapp.errors import DiscoveryEmptyError
from dumpapp.errors import ProtocolViolationError


class TestSplitLocalOptions:
    def test_no_options(self) -> None:
        assert cli.split_local_options(["prefs", "print"]) == ([], ["prefs", "print"])

    def test_process_option(self) -> None:
        assert cli.split_local_options(["-p", "com.example", "hprof"]) == (
            ["-p", "com.example"],
            ["hprof"],
        )

    def test_command_options_are_forwarded(self) -> None:
        local, command = cli.split_local_options(["--process", "app", "crash", "-p", "--help"])
        assert local == ["--process", "app"]
        assert command == ["crash", "-p", "--help"]

    def test_help_is_forwarded(self) -> None:
        assert cli.split_local_options(["--help"]) == ([], ["--help"])

    def test_missing_process(self) -> None:
        with pytest.raises(ConfigurationError, match="Missing <process>"):
            cli.split_local_options(["-p"])


class TestLoadConfig:
    def test_environment_only(self) -> None:
        config, command = cli.load_config(["prefs"], {"STETHO_PROCESS": "from.env"})
        assert config.process == "from.env"
        assert command == ["prefs"]

    def test_option_wins_over_environment(self) -> None:
        config, _ = cli.load_config(
            ["-p", "from.option", "--log-level", "debug", "prefs"], {"STETHO_PROCESS": "from.env"}
        )
        assert config.process == "from.option"
        assert config.log_level == "DEBUG"

    def test_device_and_port_from_environment(self) -> None:
        config, _ = cli.load_config(
            [], {"ANDROID_SERIAL": "abc123", "ADB_SERVER_SOCKET": "tcp:127.0.0.1:5039"}
        )
        assert config.device == "abc123"
        assert config.port == 5039


class TestMain:
    def test_exit_status_mirrors_remote(self, monkeypatch) -> None:
        seen = {}

        def fake_run(config, command):
            seen["config"] = config
            seen["command"] = command
            return 3

        monkeypatch.setattr(cli, "run", fake_run)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["-p", "app", "dumpheap", "-o", "/tmp/x"])
        assert exc_info.value.code == 3
        assert seen["config"].process == "app"
        assert seen["command"] == ["dumpheap", "-o", "/tmp/x"]

    def test_human_readable_error(self, monkeypatch, capsys) -> None:
        def fake_run(config, command):
            raise DiscoveryEmptyError()

        monkeypatch.setattr(cli, "run", fake_run)
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 1
        assert capsys.readouterr().err == "No stetho-enabled processes running\n"

    def test_configuration_error(self, monkeypatch, capsys) -> None:
        monkeypatch.setenv("ADB_SERVER_SOCKET", "udp:1234")
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["prefs"])
        assert exc_info.value.code == 1
        assert "Invalid or unsupported socket spec 'udp:1234'" in capsys.readouterr().err

    def test_missing_process(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["-p"])
        assert exc_info.value.code == 1
        assert capsys.readouterr().err == "Missing <process>\n"

    def test_non_ascii_process(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["-p", "café", "prefs"])
        assert exc_info.value.code == 1
        assert capsys.readouterr().err == "Process name 'café' must be ASCII\n"

    def test_unknown_log_level(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--log-level", "loud", "prefs"])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "Unknown log level 'LOUD'" in err
        assert "Traceback" not in err

    def test_internal_error(self, monkeypatch, capsys) -> None:
        def fake_run(config, command):
            raise ProtocolViolationError("Unexpected header: b'?'")

        monkeypatch.setattr(cli, "run", fake_run)
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["prefs"])
        assert exc_info.value.code == 2
        err = capsys.readouterr().err
        assert "Traceback" in err
        assert "Unexpected header" in err

    def test_run_closes_connection(self, monkeypatch) -> None:
        closed = []

        class FakeAdb:
            def __enter__(self):
                return self

            def __exit__(self, *exc_info):
                closed.append(True)

        class FakeSession:
            def __init__(self, connection) -> None:
                self.connection = connection

            def run(self, command):
                return 7

        opened = {}

        def fake_open(device, process, port, host):
            opened.update(device=device, process=process, port=port, host=host)
            return FakeAdb()

        monkeypatch.setattr(cli, "stetho_open", fake_open)
        monkeypatch.setattr(cli, "DumpappSession", FakeSession)
        config, command = cli.load_config(["-p", "app", "prefs"], {"ANDROID_SERIAL": "dev"})

        assert cli.run(config, command) == 7
        assert closed == [True]
        assert opened == {"device": "dev", "process": "app", "port": 5037, "host": "127.0.0.1"}
