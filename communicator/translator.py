import re
from paramiko.pkey import UnknownKeyType
from paramiko.sftp import SFTPError
from paramiko.ssh_exception import (
    SSHException,
    AuthenticationException,
    BadHostKeyException,
    NoValidConnectionsError,
)

from .commands import TransferRequest
from .exceptions import (
    SSHConnectionError,
    ConnectionTimeout,
    ConnectionRefused,
    SSHDisconnected,
    AuthenticationFailed,
    KeyTypeNotSupported,
    TransferError,
    TransferUnavailable,
)


# Shells exit with 127 when the command is not found
TRANSFER_UNAVAILABLE_PATTERN = re.compile(r"\(127\)|command not found", re.IGNORECASE)

# What paramiko raises when the sftp subsystem is refused or its server is missing
SFTP_SUBSYSTEM_UNAVAILABLE_PATTERN = re.compile(
    r"EOF during negotiation|Channel closed|\(127\)|command not found",
    re.IGNORECASE,
)

# Failures the transport raises while connecting; anything else is a bug and propagates as-is
CONNECT_FAILURES: tuple[type[BaseException], ...] = (
    SSHException,
    OSError,
    EOFError,
    NotImplementedError,
    SSHConnectionError,
)

TRANSFER_FAILURES: tuple[type[BaseException], ...] = (
    SSHException,
    SFTPError,
    OSError,
    EOFError,
)


class ErrorTranslator:
    """
    Maps transport-level failures (paramiko and socket errors) to the domain errors
    in `communicator.exceptions`. Holds no state.
    """

    @staticmethod
    def translate_connect(error: BaseException) -> SSHConnectionError:
        """
        Translates a failure raised while opening a connection.

        The order of the checks matters: paramiko's authentication errors are
        `SSHException`s and `NoValidConnectionsError` is an `OSError`.

        Args:
            error (BaseException): The exception raised by the transport.

        Returns:
            SSHConnectionError: The matching domain error (not raised).
        """
        message = str(error) or type(error).__name__

        if isinstance(error, SSHConnectionError):
            return error
        if isinstance(error, AuthenticationException):
            return AuthenticationFailed(f"Authentication failed: {message}")
        if isinstance(error, (UnknownKeyType, NotImplementedError)):
            return KeyTypeNotSupported(f"The private key type is not supported: {message}")
        if isinstance(error, (NoValidConnectionsError, ConnectionRefusedError)):
            return ConnectionRefused(f"Connection refused: {message}")
        if isinstance(error, TimeoutError):
            return ConnectionTimeout(f"Timed out while connecting: {message}")
        if isinstance(error, BadHostKeyException):
            return SSHConnectionError(f"Host key verification failed: {message}")
        if isinstance(error, (SSHException, EOFError, ConnectionError)):
            return SSHDisconnected(f"The remote side closed the connection: {message}")
        return SSHConnectionError(f"Could not connect: {message}")

    @staticmethod
    def translate_transfer(error: BaseException, request: TransferRequest | None = None) -> TransferError:
        """
        Translates a failure raised during an upload or download.

        Args:
            error (BaseException): The exception raised by the transfer.
            request (TransferRequest | None): The transfer that failed, kept as context.

        Returns:
            TransferError: `TransferUnavailable` when the message says the remote transfer
                command is missing, otherwise a `TransferError` with the original message.
        """
        if isinstance(error, TransferError):
            return error

        message = str(error) or type(error).__name__
        if TRANSFER_UNAVAILABLE_PATTERN.search(message):
            return TransferUnavailable(
                f"The remote machine has no file transfer command available: {message}",
                request= request,
            )
        return TransferError(message, request= request)

    @staticmethod
    def translate_session_open(error: BaseException, request: TransferRequest | None = None) -> TransferError:
        """
        Translates a failure raised while opening the SFTP session of a transfer.

        At this point the connection is known to be live, so a negotiation that ends
        early (EOF, closed channel) means the remote machine has no SFTP server to
        start. Failures of the connection itself are left to `translate_transfer`.

        Args:
            error (BaseException): The exception raised while opening the session.
            request (TransferRequest | None): The transfer that failed, kept as context.

        Returns:
            TransferError: `TransferUnavailable` when the SFTP subsystem could not be
                started, otherwise what `translate_transfer` returns.
        """
        message = str(error) or type(error).__name__
        if isinstance(error, EOFError) or SFTP_SUBSYSTEM_UNAVAILABLE_PATTERN.search(message):
            return TransferUnavailable(
                f"The remote machine has no SFTP server available: {message}",
                request= request,
            )
        return ErrorTranslator.translate_transfer(error, request)
