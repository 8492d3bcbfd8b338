import typer

from settings import DEFAULT_CLI_NAME
from communicator.exceptions import (
    CommunicatorError,
    ConnectionRefused,
    ConnectionTimeout,
    AuthenticationFailed,
    KeyPermissionError,
    KeyTypeNotSupported,
    TransferUnavailable,
)


def hint_machine_not_running(err: bool = True) -> None:
    typer.echo("Make sure the machine is running and that its SSH port is forwarded.", err=err)
    typer.echo(f"{' '*4}{DEFAULT_CLI_NAME} --host <host> --port <port> remote ready", err=err)


def hint_key_permissions(key_path: str, err: bool = True) -> None:
    """
    Tell the user how to restrict the private key to its owner.
    """
    typer.echo("The private key must only be readable by its owner. Fix it with:", err=err)
    typer.echo(f"{' '*4}chmod 600 {key_path}", err=err)


def hint_authentication(err: bool = True) -> None:
    typer.echo(
        "The machine rejected the private key. Check the --user and --key options "
        "(or SSH_USERNAME and SSH_PRIVATE_KEY_PATH in the .env file).",
        err=err,
    )


def hint_key_type(err: bool = True) -> None:
    typer.echo("Use an RSA, ECDSA or Ed25519 private key in OpenSSH format.", err=err)


def hint_install_transfer_command(err: bool = True) -> None:
    typer.echo(
        "Install an SFTP server on the machine (for example the openssh-server package) "
        "to enable file transfers.",
        err=err,
    )


def hint_for_error(error: CommunicatorError) -> None:
    """
    Print the hint matching a communicator error, if there is one.
    """
    if isinstance(error, (ConnectionRefused, ConnectionTimeout)):
        hint_machine_not_running()
    elif isinstance(error, KeyPermissionError):
        hint_key_permissions(error.key_path)
    elif isinstance(error, AuthenticationFailed):
        hint_authentication()
    elif isinstance(error, KeyTypeNotSupported):
        hint_key_type()
    elif isinstance(error, TransferUnavailable):
        hint_install_transfer_command()
