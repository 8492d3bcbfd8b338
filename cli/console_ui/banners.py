from rich import box
from rich.console import Console
from rich.table import Table
from rich.align import Align
from rich.panel import Panel

from settings import VERSION, DEFAULT_CLI_NAME
from communicator.base import ConnectionConfig


def display_general_info_banner() -> None:
    """
    Render the program info in a panel.
    """
    console = Console()

    row_format = "[bold dodger_blue2]{key}:[/] [bold bright_white]{value}[/]"
    info = Table.grid(padding=1)
    info.add_column(justify="left", style="bold dodger_blue2", max_width=70)
    info.add_row(row_format.format(key="Program", value=DEFAULT_CLI_NAME))
    info.add_row(row_format.format(key="Version", value=VERSION))
    info.add_row(row_format.format(
        key="Description",
        value="Runs commands and transfers files on managed virtual machines over SSH."
        )
    )

    info_panel = Panel(
        Align(info, align="left", vertical="middle"),
        box= box.SQUARE,
        border_style="cyan",
        padding=(0, 1),
    )
    console.print(info_panel)


def display_connection_banner(config: ConnectionConfig, console: Console | None = None) -> None:
    """
    Print where the CLI is about to connect, shown before long-running operations.
    """
    console = console or Console(stderr=True)
    console.print(
        f"[bold cyan]==>[/] Connecting to [bold]{config.username}@{config.address}[/] "
        f"(key: {config.private_key_path}, tries: {config.max_tries})",
        highlight=False,
    )
