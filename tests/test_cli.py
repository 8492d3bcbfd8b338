import pytest
from typer.testing import CliRunner

from communicator.base import ConnectionConfig, OutputChunk, OutputStream
from communicator.exceptions import (
    CommandFailure,
    ConnectionRefused,
    KeyPermissionError,
    TransferUnavailable,
)

from cli.app import app
from cli.commands import files, remote


runner = CliRunner()


class StubCommunicator:
    """Records what the CLI asks of the communicator."""

    def __init__(self, options, input_stream=None, ready=True, error=None, exit_status=0, output=b""):
        self.options = options
        self.input_stream = input_stream
        self.config = ConnectionConfig(
            host=options.host,
            port=options.port,
            username=options.user,
            private_key_path=options.key,
        )
        self._ready = ready
        self.error = error
        self.exit_status = exit_status
        self.output = output
        self.calls: list[tuple] = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True

    def ready(self):
        return self._ready

    def _run(self, name, command, options, sink):
        self.calls.append((name, command, options))
        if self.output:
            sink(OutputChunk(OutputStream.STDOUT, self.output))
        if self.error is not None:
            raise self.error
        return self.exit_status

    def execute(self, command, options=None, sink=None):
        return self._run("execute", command, options, sink)

    def sudo(self, command, options=None, sink=None):
        return self._run("sudo", command, options, sink)

    def upload(self, local_path, remote_path):
        self.calls.append(("upload", local_path, remote_path))
        if self.error is not None:
            raise self.error

    def download(self, remote_path, local_path=None):
        self.calls.append(("download", remote_path, local_path))
        if self.error is not None:
            raise self.error


@pytest.fixture
def stub(monkeypatch):
    """Patches the CLI to build `StubCommunicator`s; returns a dict to tune and inspect them."""
    state = {"kwargs": {}, "instances": []}

    def build(options, input_stream=None):
        communicator = StubCommunicator(options, input_stream, **state["kwargs"])
        state["instances"].append(communicator)
        return communicator

    monkeypatch.setattr(remote, "build_communicator", build)
    monkeypatch.setattr(files, "build_communicator", build)
    return state


class TestGlobalOptions:
    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "vmcomm version 0.1.0" in result.output

    def test_help_without_command(self):
        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert "remote" in result.output

    def test_connection_options_reach_communicator(self, stub):
        result = runner.invoke(app, [
            "--host", "10.0.0.5", "--port", "22", "--user", "deploy", "--key", "/keys/id_ed25519",
            "remote", "ready",
        ])

        assert result.exit_code == 0
        options = stub["instances"][0].options
        assert (options.host, options.port, options.user, options.key) == (
            "10.0.0.5", 22, "deploy", "/keys/id_ed25519",
        )


class TestRemoteCommands:
    def test_ready(self, stub):
        result = runner.invoke(app, ["remote", "ready"])

        assert result.exit_code == 0
        assert "SSH is ready." in result.output
        assert stub["instances"][0].closed

    def test_not_ready(self, stub):
        stub["kwargs"] = {"ready": False}

        result = runner.invoke(app, ["remote", "ready"])

        assert result.exit_code == 1

    def test_exec_streams_output(self, stub):
        stub["kwargs"] = {"output": b"hello\n"}

        result = runner.invoke(app, ["remote", "exec", "echo hello", "--no-stdin"])

        assert result.exit_code == 0
        assert "hello" in result.output
        assert "WARNING" not in result.output
        name, command, options = stub["instances"][0].calls[0]
        assert (name, command) == ("execute", "echo hello")
        assert options["strip_ansi"] is True
        assert stub["instances"][0].input_stream is None

    def test_exec_with_sudo_flag(self, stub):
        result = runner.invoke(app, ["remote", "exec", "whoami", "--sudo", "--no-stdin"])

        assert result.exit_code == 0
        assert stub["instances"][0].calls[0][0] == "sudo"

    def test_sudo_command(self, stub):
        result = runner.invoke(app, ["remote", "sudo", "apt-get update", "--no-stdin"])

        assert result.exit_code == 0
        assert stub["instances"][0].calls[0][:2] == ("sudo", "apt-get update")

    def test_exec_options(self, stub):
        result = runner.invoke(app, [
            "remote", "exec", "ls", "--no-stdin", "--keep-ansi", "--term", "xterm",
            "--quoting", "ESCAPE", "--no-error-check",
        ])

        assert result.exit_code == 0
        options = stub["instances"][0].calls[0][2]
        assert options["strip_ansi"] is False
        assert options["terminal_type"] == "xterm"
        assert options["quoting"] == "escape"
        assert options["error_check"] is False

    def test_exit_status_passed_through(self, stub):
        stub["kwargs"] = {"exit_status": 3}

        result = runner.invoke(app, ["remote", "exec", "exit 3", "--no-error-check", "--no-stdin"])

        assert result.exit_code == 3
        assert "WARNING: The command <exit 3> exited with status 3" in result.output

    def test_command_failure_exit_status(self, stub):
        stub["kwargs"] = {"error": CommandFailure(command="false", exit_status=1)}

        result = runner.invoke(app, ["remote", "exec", "false", "--no-stdin"])

        assert result.exit_code == 1

    def test_connection_failure_shows_hint(self, stub):
        stub["kwargs"] = {"error": ConnectionRefused("Connection refused")}

        result = runner.invoke(app, ["remote", "exec", "ls", "--no-stdin"])

        assert result.exit_code == 1
        assert "remote ready" in result.output

    def test_invalid_port(self):
        result = runner.invoke(app, ["--port", "70000", "remote", "exec", "ls", "--no-stdin"])

        assert result.exit_code == 1


class TestFileCommands:
    def test_upload(self, stub):
        result = runner.invoke(app, ["files", "upload", "setup.sh", "/tmp/setup.sh"])

        assert result.exit_code == 0
        assert stub["instances"][0].calls == [("upload", "setup.sh", "/tmp/setup.sh")]

    def test_download(self, stub):
        result = runner.invoke(app, ["files", "download", "/etc/hostname", "hostname"])

        assert result.exit_code == 0
        assert stub["instances"][0].calls == [("download", "/etc/hostname", "hostname")]

    def test_transfer_unavailable_shows_hint(self, stub):
        stub["kwargs"] = {"error": TransferUnavailable("EOF during negotiation")}

        result = runner.invoke(app, ["files", "upload", "a", "b"])

        assert result.exit_code == 1
        assert "SFTP server" in result.output

    def test_key_permissions_hint(self, stub):
        stub["kwargs"] = {"error": KeyPermissionError("too open", key_path="/keys/id_rsa")}

        result = runner.invoke(app, ["files", "download", "a", "b"])

        assert result.exit_code == 1
        assert "chmod 600 /keys/id_rsa" in result.output
