import logging
import paramiko

from typing import IO, Any, Callable, Mapping, Optional, Union

from .base import ConnectionConfig, ConnectionState, DEFAULT_POLL_INTERVAL, DEFAULT_SHELL
from .commands import CommandOptions
from .connection import ConnectionManager, open_client
from .executor import CommandExecutor, CommandRun, OutputSink
from .exceptions import CommunicatorError
from .transfer import FileTransfer

logger = logging.getLogger(__name__)

Options = Union[Mapping[str, Any], CommandOptions, None]


class SSHCommunicator:
    """
    Talks to one managed machine over a single, reusable SSH connection.

    Every operation first asks the connection manager for a live connection
    (reusing, validating or re-establishing it), then runs a command or a file
    transfer on it. One communicator must not be used from several threads at once.

    Example:
        with SSHCommunicator(config) as comm:
            if comm.ready():
                comm.sudo("apt-get update", sink=print)
    """

    def __init__(
            self,
            config: ConnectionConfig,
            shell: str = DEFAULT_SHELL,
            input_stream: Optional[IO] = None,
            poll_interval: float = DEFAULT_POLL_INTERVAL,
            connector: Callable[[ConnectionConfig], paramiko.SSHClient] = open_client,
        ) -> None:
        """
        Initializes the communicator. No connection is made until it is needed.

        Args:
            config (ConnectionConfig): Connection parameters for the machine.
            shell (str): The remote login shell commands run in.
            input_stream (IO | None): Local stream relayed to running commands
                (typically `sys.stdin`); None disables input relaying.
            poll_interval (float): Seconds between polls of a running command's channel.
            connector (Callable): Opens one transport client per connect attempt.
        """
        self.config = config
        self.manager = ConnectionManager(
            config= config,
            connector= connector,
            poll_interval= poll_interval,
        )
        self.executor = CommandExecutor(
            shell= shell,
            poll_interval= poll_interval,
            input_stream= input_stream,
            forward_agent= config.forward_agent,
        )
        self.transfer = FileTransfer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def state(self) -> ConnectionState:
        return self.manager.state

    def ready(self) -> bool:
        """
        Reports whether a connection to the machine can currently be made. Never raises.
        """
        logger.debug("Checking whether SSH is ready...")
        try:
            self.manager.acquire()
        except CommunicatorError as e:
            logger.info(f"SSH not up: {e!r}")
            return False

        logger.info("SSH is ready!")
        return True

    def execute(self, command: str, options: Options = None, sink: Optional[OutputSink] = None) -> int:
        """
        Executes a command in the remote login shell.

        Args:
            command (str): The shell command to run.
            options (Mapping | CommandOptions | None): Overrides for the default `CommandOptions`.
            sink (Callable[[OutputChunk], None] | None): Receives output chunks as they arrive.

        Returns:
            int: The remote exit status.

        Raises:
            SSHConnectionError: If no connection could be established.
            CommandFailure: When error checking is on and the command exits non-zero.
            pydantic.ValidationError: If an option is unknown or invalid.
        """
        opts = CommandOptions.merge(command, options)
        connection = self.manager.acquire()
        return self.executor.execute(connection, opts, sink)

    def sudo(self, command: str, options: Options = None, sink: Optional[OutputSink] = None) -> int:
        """
        Same as `execute`, but always through `sudo`, whatever `options` says.
        """
        opts = CommandOptions.merge(command, options, sudo= True)
        connection = self.manager.acquire()
        return self.executor.execute(connection, opts, sink)

    def stream(self, command: str, options: Options = None) -> CommandRun:
        """
        Starts a command and returns its run, to be iterated for output chunks.

        Error checking does not apply; read `exit_status` from the run once
        its output is consumed.
        """
        opts = CommandOptions.merge(command, options)
        connection = self.manager.acquire()
        return self.executor.stream(connection, opts)

    def upload(self, local_path: str, remote_path: str) -> None:
        connection = self.manager.acquire()
        self.transfer.upload(connection, local_path, remote_path)

    def download(self, remote_path: str, local_path: str | None = None) -> bytes | None:
        """
        Downloads a remote file to `local_path`, or returns its content when no path is given.
        """
        connection = self.manager.acquire()
        return self.transfer.download(connection, remote_path, local_path)

    def close(self) -> None:
        """
        Closes the connection, if one is open.
        """
        self.manager.close()
