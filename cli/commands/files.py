import typer
from pydantic import ValidationError

import log_utils
from communicator.exceptions import CommunicatorError

from cli.context import build_communicator
from cli.console_ui import usage_hints

files_app = typer.Typer()


@files_app.command("upload")
def files_upload(
    ctx: typer.Context,
    local_path: str = typer.Argument(..., help="Local file to upload."),
    remote_path: str = typer.Argument(..., help="Destination path on the machine."),
) -> None:
    """
    Upload a local file to the machine.
    """
    try:
        with build_communicator(ctx.obj) as communicator:
            communicator.upload(local_path, remote_path)
    except ValidationError as e:
        log_utils.log_error(str(e))
        raise typer.Exit(1)
    except CommunicatorError as e:
        log_utils.log_error(str(e))
        usage_hints.hint_for_error(e)
        raise typer.Exit(1)

    log_utils.log_info(f"Uploaded {local_path} to {remote_path}")


@files_app.command("download")
def files_download(
    ctx: typer.Context,
    remote_path: str = typer.Argument(..., help="File on the machine to download."),
    local_path: str = typer.Argument(..., help="Local destination path."),
) -> None:
    """
    Download a file from the machine.
    """
    try:
        with build_communicator(ctx.obj) as communicator:
            communicator.download(remote_path, local_path)
    except ValidationError as e:
        log_utils.log_error(str(e))
        raise typer.Exit(1)
    except CommunicatorError as e:
        log_utils.log_error(str(e))
        usage_hints.hint_for_error(e)
        raise typer.Exit(1)

    log_utils.log_info(f"Downloaded {remote_path} to {local_path}")
