import logging

from .commands import TransferDirection, TransferRequest
from .connection import Connection
from .translator import ErrorTranslator, TRANSFER_FAILURES

logger = logging.getLogger(__name__)


class FileTransfer:
    """
    Copies files between the local machine and the remote one over an SFTP
    session opened on an existing connection. Transfers are never retried.
    """

    def upload(self, connection: Connection, local_path: str, remote_path: str) -> None:
        """
        Uploads a local file to the remote machine.

        Raises:
            TransferUnavailable: If the remote machine has no SFTP server available.
            TransferError: On any other transfer failure.
        """
        logger.debug(f"Uploading: {local_path} to {remote_path}")
        request = TransferRequest(
            source= str(local_path),
            destination= str(remote_path),
            direction= TransferDirection.UPLOAD,
        )
        self.perform(connection, request)

    def download(self, connection: Connection, remote_path: str, local_path: str | None = None) -> bytes | None:
        """
        Downloads a remote file.

        Args:
            connection (Connection): A live connection.
            remote_path (str): The file to fetch.
            local_path (str | None): Where to write it. If None, the content is returned instead.

        Returns:
            bytes | None: The file content when `local_path` is None, otherwise None.

        Raises:
            TransferUnavailable: If the remote machine has no SFTP server available.
            TransferError: On any other transfer failure.
        """
        logger.debug(f"Downloading: {remote_path} to {local_path}")
        request = TransferRequest(
            source= str(remote_path),
            destination= None if local_path is None else str(local_path),
            direction= TransferDirection.DOWNLOAD,
        )
        return self.perform(connection, request)

    def perform(self, connection: Connection, request: TransferRequest) -> bytes | None:
        """
        Runs a transfer request to completion, translating its failures.

        Raises:
            TransferUnavailable: If the SFTP session could not be started on the machine.
            TransferError: On any other transfer failure.
        """
        try:
            sftp = connection.open_sftp()
        except TRANSFER_FAILURES as e:
            error = ErrorTranslator.translate_session_open(e, request)
            logger.error(f"Could not open SFTP session ({request}): {error}")
            raise error from e

        try:
            with sftp:
                if request.direction is TransferDirection.UPLOAD:
                    sftp.put(request.source, request.destination)
                    return None

                if request.destination is None:
                    with sftp.open(request.source, "rb") as remote_file:
                        return remote_file.read()

                sftp.get(request.source, request.destination)
                return None

        except TRANSFER_FAILURES as e:
            error = ErrorTranslator.translate_transfer(e, request)
            logger.error(f"Transfer failed ({request}): {error}")
            raise error from e
