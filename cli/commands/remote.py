import sys
import typer
from paramiko.ssh_exception import SSHException
from pydantic import ValidationError

import log_utils
from communicator.base import DEFAULT_TERMINAL_TYPE, Quoting
from communicator.exceptions import CommandFailure, CommunicatorError, MissingExitStatus

from cli.context import build_communicator
from cli.console_ui import banners, output, usage_hints

remote_app = typer.Typer()


@remote_app.command("ready")
def remote_ready(ctx: typer.Context) -> None:
    """
    Check whether an SSH connection to the machine can be established.
    """
    try:
        communicator = build_communicator(ctx.obj)
    except ValidationError as e:
        log_utils.log_error(str(e))
        raise typer.Exit(1)

    with communicator:
        is_ready = communicator.ready()

    if not is_ready:
        typer.echo("SSH is not ready.", err=True)
        usage_hints.hint_machine_not_running()
        raise typer.Exit(1)

    typer.echo("SSH is ready.")


def _run_remote_command(
        ctx: typer.Context,
        command: str,
        sudo: bool,
        error_check: bool,
        keep_ansi: bool,
        terminal_type: str,
        quoting: Quoting,
        relay_stdin: bool,
    ) -> None:
    options = {
        "error_check": error_check,
        "strip_ansi": not keep_ansi,
        "terminal_type": terminal_type,
        "quoting": quoting,
    }

    try:
        communicator = build_communicator(
            ctx.obj,
            input_stream= sys.stdin if relay_stdin else None,
        )
    except ValidationError as e:
        log_utils.log_error(str(e))
        raise typer.Exit(1)

    banners.display_connection_banner(communicator.config)

    try:
        with communicator:
            run = communicator.sudo if sudo else communicator.execute
            exit_status = run(command, options, sink= output.write_chunk)

    except MissingExitStatus as e:
        log_utils.log_error(str(e))
        raise typer.Exit(1)
    except CommandFailure as e:
        log_utils.log_error(str(e))
        raise typer.Exit(e.exit_status or 1)
    except CommunicatorError as e:
        log_utils.log_error(str(e))
        usage_hints.hint_for_error(e)
        raise typer.Exit(1)
    except (SSHException, ValueError) as e:
        # ValueError covers rejected quoting and invalid options
        log_utils.log_error(str(e))
        raise typer.Exit(1)

    log_utils.log_debug(f"Remote command <{command}> finished with exit status {exit_status}")
    if exit_status != 0:
        log_utils.log_warning(f"The command <{command}> exited with status {exit_status}")

    raise typer.Exit(exit_status)


@remote_app.command("exec")
def remote_exec(
    ctx: typer.Context,
    command: str = typer.Argument(..., help="Shell command to run on the machine."),
    sudo: bool = typer.Option(False, "--sudo", help="Run the command through sudo."),
    error_check: bool = typer.Option(
        True,
        "--error-check/--no-error-check",
        help="Report a non-zero exit status as an error.",
    ),
    keep_ansi: bool = typer.Option(False, "--keep-ansi", help="Keep ANSI escape codes in the output."),
    terminal_type: str = typer.Option(DEFAULT_TERMINAL_TYPE, "--term", help="Terminal type for the PTY."),
    quoting: Quoting = typer.Option(
        Quoting.NAIVE,
        "--quoting",
        case_sensitive=False,
        help="How the command is quoted for the remote shell.",
    ),
    relay_stdin: bool = typer.Option(
        True,
        "--stdin/--no-stdin",
        help="Forward local standard input to the command.",
    ),
) -> None:
    """
    Run a command on the machine, streaming its output. Exits with the remote exit status.
    """
    _run_remote_command(
        ctx= ctx,
        command= command,
        sudo= sudo,
        error_check= error_check,
        keep_ansi= keep_ansi,
        terminal_type= terminal_type,
        quoting= quoting,
        relay_stdin= relay_stdin,
    )


@remote_app.command("sudo")
def remote_sudo(
    ctx: typer.Context,
    command: str = typer.Argument(..., help="Shell command to run as root."),
    error_check: bool = typer.Option(
        True,
        "--error-check/--no-error-check",
        help="Report a non-zero exit status as an error.",
    ),
    keep_ansi: bool = typer.Option(False, "--keep-ansi", help="Keep ANSI escape codes in the output."),
    terminal_type: str = typer.Option(DEFAULT_TERMINAL_TYPE, "--term", help="Terminal type for the PTY."),
    quoting: Quoting = typer.Option(
        Quoting.NAIVE,
        "--quoting",
        case_sensitive=False,
        help="How the command is quoted for the remote shell.",
    ),
    relay_stdin: bool = typer.Option(
        True,
        "--stdin/--no-stdin",
        help="Forward local standard input to the command.",
    ),
) -> None:
    """
    Run a command on the machine through sudo.
    """
    _run_remote_command(
        ctx= ctx,
        command= command,
        sudo= True,
        error_check= error_check,
        keep_ansi= keep_ansi,
        terminal_type= terminal_type,
        quoting= quoting,
        relay_stdin= relay_stdin,
    )
