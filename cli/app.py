import typer

import log_utils  # noqa: F401  (configures logging)
from settings import (
    VERSION,
    DEFAULT_CLI_NAME,
    SSH_HOST,
    SSH_PORT,
    SSH_USERNAME,
    SSH_PRIVATE_KEY_PATH,
    SSH_FORWARD_AGENT,
    SSH_TIMEOUT,
    SSH_MAX_TRIES,
    SSH_SHELL,
)

from cli.context import ConnectionOptions
from cli.commands.remote import remote_app
from cli.commands.files import files_app
from cli.console_ui import banners

app = typer.Typer(
    name= f"{DEFAULT_CLI_NAME}",
    help= f"{DEFAULT_CLI_NAME}: Runs commands and transfers files on managed virtual machines over SSH.",
)

app.add_typer(remote_app, name="remote", help="Remote command execution")
app.add_typer(files_app, name="files", help="File transfer between this machine and the remote one")


@app.command("about", help="Show program information")
def about() -> None:
    banners.display_general_info_banner()


@app.callback(invoke_without_command=True)
def global_options(
    ctx: typer.Context,
    version: bool = False,
    host: str = typer.Option(SSH_HOST, "--host", help="Machine host name or IP."),
    port: int = typer.Option(SSH_PORT, "--port", help="SSH port."),
    user: str = typer.Option(SSH_USERNAME, "--user", "-u", help="SSH user name."),
    key: str = typer.Option(SSH_PRIVATE_KEY_PATH, "--key", "-i", help="Path to the private key."),
    forward_agent: bool = typer.Option(
        SSH_FORWARD_AGENT,
        "--forward-agent/--no-forward-agent",
        help="Request SSH agent forwarding.",
    ),
    timeout: float = typer.Option(SSH_TIMEOUT, "--timeout", help="Seconds allowed per connection attempt."),
    max_tries: int = typer.Option(SSH_MAX_TRIES, "--max-tries", help="Connection attempts before giving up."),
    shell: str = typer.Option(SSH_SHELL, "--shell", help="Remote login shell."),
):
    if version:
        typer.echo(f"{DEFAULT_CLI_NAME} version {VERSION}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        # If they ran just `mycli` with no command, print the top-level help
        typer.echo(ctx.get_help())
        raise typer.Exit()

    ctx.obj = ConnectionOptions(
        host= host,
        port= port,
        user= user,
        key= key,
        forward_agent= forward_agent,
        timeout= timeout,
        max_tries= max_tries,
        shell= shell,
    )
