from rich.console import Console

from communicator.base import OutputChunk, OutputStream


stdout_console = Console(highlight=False, soft_wrap=True)
stderr_console = Console(stderr=True, highlight=False, soft_wrap=True)


def write_chunk(chunk: OutputChunk) -> None:
    """
    Print a chunk of remote output as it arrives: stdout as-is, stderr in red.
    """
    text = chunk.data.decode("utf-8", errors="replace")
    if chunk.stream is OutputStream.STDERR:
        stderr_console.out(text, style="red", end="")
    else:
        stdout_console.out(text, end="")
