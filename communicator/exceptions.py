from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .commands import TransferRequest


class ErrorKind(str, Enum):
    CONNECTION_FAILED = "connection_failed"
    CONNECTION_TIMEOUT = "connection_timeout"
    CONNECTION_REFUSED = "connection_refused"
    DISCONNECTED = "disconnected"
    AUTHENTICATION_FAILED = "authentication_failed"
    KEY_TYPE_NOT_SUPPORTED = "key_type_not_supported"
    KEY_PERMISSIONS = "key_permissions"
    COMMAND_FAILED = "command_failed"
    MISSING_EXIT_STATUS = "missing_exit_status"
    TRANSFER_FAILED = "transfer_failed"
    TRANSFER_UNAVAILABLE = "transfer_unavailable"


class CommunicatorError(Exception):
    """Base class for every error this package raises on purpose."""
    kind: ErrorKind = ErrorKind.CONNECTION_FAILED


class SSHConnectionError(CommunicatorError):
    """Raised when a connection to the machine could not be established."""
    kind = ErrorKind.CONNECTION_FAILED

    # Retrying the connect attempt may succeed for these errors
    retryable: bool = False


class ConnectionTimeout(SSHConnectionError):
    kind = ErrorKind.CONNECTION_TIMEOUT
    retryable = True


class ConnectionRefused(SSHConnectionError):
    kind = ErrorKind.CONNECTION_REFUSED
    retryable = True


class SSHDisconnected(SSHConnectionError):
    """Raised when the transport dropped the connection during setup."""
    kind = ErrorKind.DISCONNECTED
    retryable = True


class AuthenticationFailed(SSHConnectionError):
    kind = ErrorKind.AUTHENTICATION_FAILED


class KeyTypeNotSupported(SSHConnectionError):
    kind = ErrorKind.KEY_TYPE_NOT_SUPPORTED


class KeyPermissionError(SSHConnectionError):
    """
    Raised when the private key is missing or its permissions are too open
    and could not be fixed.

    Attributes:
        key_path (str): Path to the offending private key.
    """
    kind = ErrorKind.KEY_PERMISSIONS

    def __init__(self, message: str, *, key_path: str) -> None:
        self.key_path = key_path
        super().__init__(message)


class CommandFailure(CommunicatorError):
    """
    Raised when a remote command exits with a non-zero status while error checking is on.

    Custom error classes passed through `CommandOptions.error_class` must subclass this
    one and keep its keyword-only constructor.

    Attributes:
        command (str): The command text as given by the caller.
        options (CommandOptions): The merged options the command ran with.
        exit_status (int | None): Remote exit status, None when it was never reported.
    """
    kind = ErrorKind.COMMAND_FAILED

    def __init__(
        self,
        *,
        command: str,
        options: Any = None,
        exit_status: int | None = None,
    ) -> None:
        self.command = command
        self.options = options
        self.exit_status = exit_status

        super().__init__()

    def __str__(self) -> str:
        return (
            f"The command <{self.command}> exited with a non-zero exit status "
            f"({self.exit_status})."
        )


class MissingExitStatus(CommandFailure):
    """Raised when the channel closed without ever reporting an exit status."""
    kind = ErrorKind.MISSING_EXIT_STATUS

    def __str__(self) -> str:
        return f"The command <{self.command}> finished without reporting an exit status."


class TransferError(CommunicatorError):
    """
    Raised when an upload or download fails.

    Attributes:
        request (TransferRequest | None): The transfer that failed.
    """
    kind = ErrorKind.TRANSFER_FAILED

    def __init__(self, message: str, *, request: "TransferRequest | None" = None) -> None:
        self.request = request
        super().__init__(message)


class TransferUnavailable(TransferError):
    """Raised when the remote machine has no file transfer command available."""
    kind = ErrorKind.TRANSFER_UNAVAILABLE
