import socket

import paramiko
import pytest
from paramiko.ssh_exception import SSHException

from communicator.commands import TransferDirection
from communicator.connection import ConnectionManager
from communicator.exceptions import TransferError, TransferUnavailable
from communicator.transfer import FileTransfer


@pytest.fixture
def connection(config, connector):
    return ConnectionManager(config, connector=connector).acquire()


@pytest.fixture
def remote_files(connection):
    return connection.transport.files


class TestFileTransfer:
    def test_upload(self, tmp_path, connection, remote_files):
        local = tmp_path / "provision.sh"
        local.write_bytes(b"#!/bin/sh\necho hi\n")

        FileTransfer().upload(connection, str(local), "/tmp/provision.sh")

        assert remote_files["/tmp/provision.sh"] == b"#!/bin/sh\necho hi\n"

    def test_download_to_file(self, tmp_path, connection, remote_files):
        remote_files["/etc/hostname"] = b"box\n"
        local = tmp_path / "hostname"

        result = FileTransfer().download(connection, "/etc/hostname", str(local))

        assert result is None
        assert local.read_bytes() == b"box\n"

    def test_download_to_memory(self, connection, remote_files):
        remote_files["/etc/hostname"] = b"box\n"

        assert FileTransfer().download(connection, "/etc/hostname") == b"box\n"

    def test_missing_remote_file(self, tmp_path, connection):
        with pytest.raises(TransferError) as exc_info:
            FileTransfer().download(connection, "/nope", str(tmp_path / "nope"))

        assert exc_info.value.request.direction is TransferDirection.DOWNLOAD
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_missing_sftp_server(self, tmp_path, connection, monkeypatch):
        # the remote end accepts the subsystem request, then hangs up before answering the version
        local_end, remote_end = socket.socketpair()
        remote_end.shutdown(socket.SHUT_WR)
        monkeypatch.setattr(connection.client, "open_sftp", lambda: paramiko.SFTPClient(local_end))
        local = tmp_path / "a.txt"
        local.write_text("a")

        try:
            with pytest.raises(TransferUnavailable) as exc_info:
                FileTransfer().upload(connection, str(local), "/tmp/a.txt")
        finally:
            local_end.close()
            remote_end.close()

        assert "EOF during negotiation" in str(exc_info.value)
        assert exc_info.value.request.direction is TransferDirection.UPLOAD

    def test_sftp_subsystem_refused(self, connection):
        connection.transport.sftp_open_error = SSHException("Channel closed.")

        with pytest.raises(TransferUnavailable):
            FileTransfer().download(connection, "/etc/hostname")

    def test_inactive_connection_is_not_reported_as_unavailable(self, connection):
        connection.client.close()

        with pytest.raises(TransferError) as exc_info:
            FileTransfer().download(connection, "/etc/hostname")

        assert not isinstance(exc_info.value, TransferUnavailable)

    def test_channel_lost_during_copy_is_a_plain_failure(self, connection, remote_files):
        remote_files["/etc/hostname"] = b"box\n"
        connection.transport.sftp_error = SSHException("Channel closed.")

        with pytest.raises(TransferError) as exc_info:
            FileTransfer().download(connection, "/etc/hostname")

        assert not isinstance(exc_info.value, TransferUnavailable)

    def test_failure_during_copy(self, tmp_path, connection):
        connection.transport.sftp_error = OSError("Permission denied")
        local = tmp_path / "a.txt"
        local.write_text("a")

        with pytest.raises(TransferError) as exc_info:
            FileTransfer().upload(connection, str(local), "/root/a.txt")

        assert not isinstance(exc_info.value, TransferUnavailable)
        assert "Permission denied" in str(exc_info.value)
        assert str(exc_info.value.request) == f"upload {local} -> /root/a.txt"
