import logging
import time
import paramiko

from typing import IO, Callable, Iterator, Optional
from paramiko.agent import AgentRequestHandler
from paramiko.ssh_exception import SSHException

from .ansi import strip_ansi_codes
from .base import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_SHELL,
    OutputChunk,
    OutputStream,
)
from .commands import CommandOptions, ExecutionOutcome
from .connection import Connection
from .exceptions import MissingExitStatus
from .formatter import CommandFormatter
from .relay import StdinRelay

logger = logging.getLogger(__name__)

OutputSink = Callable[[OutputChunk], None]


class CommandRun:
    """
    One command running on its own channel.

    Iterating over it drives the channel: output is read every `poll_interval`
    seconds and yielded as `OutputChunk`s in arrival order, until the channel
    reports completion. The output can be consumed only once. `exit_status`
    is available after iteration finished.
    """
    RECV_BUFFER_SIZE = 4096

    def __init__(
            self,
            channel: paramiko.Channel,
            options: CommandOptions,
            poll_interval: float = DEFAULT_POLL_INTERVAL,
            input_stream: Optional[IO] = None,
        ) -> None:
        self.channel = channel
        self.options = options
        self.poll_interval = poll_interval
        self.input_stream = input_stream
        self.chunks_delivered: int = 0
        self._started = False
        self._finished = False

    def __iter__(self) -> Iterator[OutputChunk]:
        if self._started:
            raise RuntimeError("The output of a command can only be consumed once.")
        self._started = True
        return self._produce()

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def exit_status(self) -> int:
        """
        The exit status reported by the remote side.

        Raises:
            RuntimeError: If the output has not been fully consumed yet.
            MissingExitStatus: If the channel closed without reporting an exit status.
        """
        if not self._finished:
            raise RuntimeError("The command is still running; consume its output first.")

        # paramiko keeps -1 until an exit-status request arrives
        status = self.channel.exit_status
        if status < 0:
            raise MissingExitStatus(command= self.options.command, options= self.options)
        return status

    @property
    def outcome(self) -> ExecutionOutcome:
        return ExecutionOutcome(exit_status= self.exit_status, chunks_delivered= self.chunks_delivered)

    def _produce(self) -> Iterator[OutputChunk]:
        relay = None
        if self.input_stream is not None:
            relay = StdinRelay(self.channel, self.input_stream, self.poll_interval)
            relay.start()

        try:
            while not self._channel_complete():
                received = False
                for chunk in self._drain():
                    received = True
                    yield chunk
                if not received:
                    time.sleep(self.poll_interval)

            # Final pass for output that arrived together with the close
            yield from self._drain()
        finally:
            if relay is not None:
                relay.stop()
            self._finished = True
            self.channel.close()

        if self.channel.exit_status >= 0:
            logger.debug(f"Command exit status: {self.channel.exit_status}")

    def _channel_complete(self) -> bool:
        channel = self.channel
        return channel.closed or (channel.eof_received and channel.exit_status_ready())

    def _drain(self) -> Iterator[OutputChunk]:
        while self.channel.recv_ready():
            data = self.channel.recv(self.RECV_BUFFER_SIZE)
            if not data:
                break
            yield self._chunk(OutputStream.STDOUT, data)

        while self.channel.recv_stderr_ready():
            data = self.channel.recv_stderr(self.RECV_BUFFER_SIZE)
            if not data:
                break
            yield self._chunk(OutputStream.STDERR, data)

    def _chunk(self, stream: OutputStream, data: bytes) -> OutputChunk:
        if self.options.strip_ansi:
            data = strip_ansi_codes(data)
        logger.debug(f"{stream.value}: {data!r}")
        self.chunks_delivered += 1
        return OutputChunk(stream, data)


class CommandExecutor:
    """
    Runs commands through a login shell on a live connection.

    Each command gets its own channel with a pseudo-terminal. Output is streamed
    to the caller while the local input stream (if any) is relayed to the command.
    """

    def __init__(
            self,
            shell: str = DEFAULT_SHELL,
            poll_interval: float = DEFAULT_POLL_INTERVAL,
            input_stream: Optional[IO] = None,
            forward_agent: bool = False,
        ) -> None:
        """
        Args:
            shell (str): The remote login shell.
            poll_interval (float): Seconds between polls of the channel and of the input stream.
            input_stream (IO | None): Local stream relayed to the remote command; None disables the relay.
            forward_agent (bool): Request SSH agent forwarding on every command channel.
        """
        self.shell = shell
        self.poll_interval = poll_interval
        self.input_stream = input_stream
        self.forward_agent = forward_agent

    def stream(self, connection: Connection, options: CommandOptions) -> CommandRun:
        """
        Starts a command and returns its run; iterate over it to receive the output.

        Args:
            connection (Connection): A live connection.
            options (CommandOptions): The command and its settings.

        Returns:
            CommandRun: The running command.

        Raises:
            ValueError: If the quoting policy rejects the command (nothing is sent).
            SSHException: If the channel could not be opened or the command not started.
        """
        invocation = CommandFormatter.shell_invocation(
            command= options.command,
            shell= self.shell,
            sudo= options.sudo,
            quoting= options.quoting,
        )
        logger.info(f"Execute: {options.command} (sudo={options.sudo})")

        channel = connection.open_channel()

        if self.forward_agent:
            try:
                AgentRequestHandler(channel)
            except SSHException as e:
                logger.warning(f"Agent forwarding request failed: {e}")

        try:
            channel.get_pty(term= options.terminal_type)
            logger.debug("request_pty: PTY request succeeded.")
        except SSHException as e:
            logger.warning(f"request_pty: PTY request failed. ({e})")

        channel.exec_command(invocation)

        return CommandRun(
            channel= channel,
            options= options,
            poll_interval= self.poll_interval,
            input_stream= self.input_stream,
        )

    def execute(
            self,
            connection: Connection,
            options: CommandOptions,
            sink: Optional[OutputSink] = None,
        ) -> int:
        """
        Runs a command to completion, handing every output chunk to `sink`.

        Args:
            connection (Connection): A live connection.
            options (CommandOptions): The command and its settings.
            sink (Callable[[OutputChunk], None] | None): Receives output chunks as they arrive.

        Returns:
            int: The remote exit status.

        Raises:
            CommandFailure: `options.error_class` when error checking is on and the status is non-zero.
            MissingExitStatus: If the remote side never reported an exit status.
        """
        run = self.stream(connection, options)
        for chunk in run:
            if sink is not None:
                sink(chunk)

        exit_status = run.exit_status
        if options.error_check and exit_status != 0:
            raise options.error_class(
                command= options.command,
                options= options,
                exit_status= exit_status,
            )

        return exit_status
