import logging
import os
import time
import paramiko

from typing import Callable, Optional
from paramiko.ssh_exception import SSHException

from .base import ConnectionConfig, ConnectionState, DEFAULT_POLL_INTERVAL
from .keys import check_key_permissions, load_private_key
from .translator import ErrorTranslator, CONNECT_FAILURES
from .exceptions import SSHConnectionError

logger = logging.getLogger(__name__)

# Failures that mean a cached connection is no longer usable
PROBE_FAILURES: tuple[type[BaseException], ...] = (SSHException, EOFError, OSError)


def open_client(config: ConnectionConfig) -> paramiko.SSHClient:
    """
    Opens a paramiko client authenticated with the configured private key only.

    No ssh config file is read, the SSH agent and default key locations are not
    consulted, and host keys are only verified when the config asks for it.
    Every phase of the handshake (TCP connect, banner, auth) is bounded by `config.timeout`.

    Args:
        config (ConnectionConfig): Where and how to connect.

    Returns:
        paramiko.SSHClient: A connected client.
    """
    pkey = load_private_key(config.private_key_path)

    client = paramiko.SSHClient()
    if config.strict_host_key_checking:
        client.load_system_host_keys()
        client.set_missing_host_key_policy(paramiko.RejectPolicy())
    else:
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

    if config.known_hosts_file:
        client.load_host_keys(os.path.expanduser(config.known_hosts_file))

    try:
        client.connect(
            hostname= config.host,
            port= config.port,
            username= config.username,
            pkey= pkey,
            look_for_keys= False,
            allow_agent= False,
            timeout= config.timeout,
            banner_timeout= config.timeout,
            auth_timeout= config.timeout,
        )
    except Exception:
        client.close()
        raise

    return client


class Connection:
    """
    A live SSH session with one machine.

    Owned by a `ConnectionManager`, which decides when it is reused, marked stale
    or replaced. Commands and transfers open their own channel on it.
    """

    def __init__(self, client: paramiko.SSHClient) -> None:
        self.client: paramiko.SSHClient = client
        self.state: ConnectionState = ConnectionState.CONNECTED

    @property
    def transport(self) -> Optional[paramiko.Transport]:
        return self.client.get_transport()

    def ensure_active(self) -> paramiko.Transport:
        """
        Ensures the underlying transport is connected and returns it.

        Raises:
            SSHException: If the connection is not in the CONNECTED state or its transport is gone.
        """
        transport = self.transport
        if (
            self.state is not ConnectionState.CONNECTED or
            transport is None or
            not transport.is_active()
        ):
            raise SSHException("SSH session not active")
        return transport

    def open_channel(self) -> paramiko.Channel:
        return self.ensure_active().open_session()

    def open_sftp(self) -> paramiko.SFTPClient:
        self.ensure_active()
        return self.client.open_sftp()

    def probe(self, timeout: float, poll_interval: float = DEFAULT_POLL_INTERVAL) -> None:
        """
        Sends an empty command through the connection to prove it still works.

        A socket can look open while the remote end is long gone; only pushing data
        through it tells for sure.

        Args:
            timeout (float): Max time (in seconds) to wait for the empty command to finish.
            poll_interval (float): Seconds between checks for the exit status.

        Raises:
            SSHException: If the transport is inactive or the channel could not be opened.
            TimeoutError: If the empty command did not finish within `timeout`.
            OSError | EOFError: On socket-level failures.
        """
        channel = self.open_channel()
        try:
            channel.exec_command("")
            deadline = time.monotonic() + timeout
            while not channel.exit_status_ready():
                if time.monotonic() > deadline:
                    raise TimeoutError(f"Liveness probe got no answer after {timeout}s.")
                time.sleep(poll_interval)
        finally:
            channel.close()

    def mark_stale(self) -> None:
        self.state = ConnectionState.STALE

    def close(self) -> None:
        """
        Close the SSH client.
        """
        self.client.close()
        self.state = ConnectionState.DISCONNECTED


class ConnectionManager:
    """
    Owns the single reusable connection of a communicator.

    `acquire()` hands out the cached connection after a successful liveness probe,
    or establishes a new one with a bounded number of attempts. Not thread-safe:
    callers must serialise their use of one manager.
    """

    def __init__(
            self,
            config: ConnectionConfig,
            connector: Callable[[ConnectionConfig], paramiko.SSHClient] = open_client,
            poll_interval: float = DEFAULT_POLL_INTERVAL,
        ) -> None:
        """
        Args:
            config (ConnectionConfig): Connection parameters, fixed for the manager's lifetime.
            connector (Callable): Opens one transport client; called once per connect attempt.
            poll_interval (float): Seconds between checks while probing a cached connection.
        """
        self.config = config
        self.connector = connector
        self.poll_interval = poll_interval
        self._connection: Connection | None = None

    @property
    def state(self) -> ConnectionState:
        if self._connection is None:
            return ConnectionState.DISCONNECTED
        return self._connection.state

    def acquire(self) -> Connection:
        """
        Returns a live connection, reusing the cached one when it passes a liveness probe.

        Returns:
            Connection: A connection ready to open channels on.

        Raises:
            KeyPermissionError: If the private key permissions are wrong (no attempt is made).
            AuthenticationFailed | KeyTypeNotSupported: On the first attempt that hits them.
            ConnectionTimeout | ConnectionRefused | SSHDisconnected: When every attempt failed.
        """
        if self._connection is not None:
            if self._is_alive(self._connection):
                logger.debug("Re-using SSH connection.")
                return self._connection
            self._discard()

        self._connection = self._establish()
        return self._connection

    def reconnect(self) -> Connection:
        """
        Drops the cached connection, if any, and establishes a new one.
        """
        self._discard()
        self._connection = self._establish()
        return self._connection

    def close(self) -> None:
        self._discard()

    def _is_alive(self, connection: Connection) -> bool:
        try:
            connection.probe(timeout= self.config.timeout, poll_interval= self.poll_interval)
        except PROBE_FAILURES as e:
            logger.info(f"Connection has been closed. Not re-using. ({e!r})")
            connection.mark_stale()
            return False
        return True

    def _discard(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            connection.close()
        except PROBE_FAILURES as e:
            logger.debug(f"Error while closing discarded connection: {e!r}")

    def _establish(self) -> Connection:
        """
        Connects to the machine, retrying on refusals, disconnects and timeouts.

        Raises:
            SSHConnectionError: The translation of the failure that ended the attempts.
        """
        config = self.config

        check_key_permissions(config.private_key_path)

        failure: tuple[SSHConnectionError, BaseException] | None = None
        for attempt in range(1, config.max_tries + 1):
            logger.info(
                f"Attempting to connect to SSH: {config.address} "
                f"(attempt {attempt}/{config.max_tries})"
            )
            try:
                client = self.connector(config)
            except CONNECT_FAILURES as e:
                error = ErrorTranslator.translate_connect(e)
                failure = (error, e)
                if not error.retryable:
                    break

                logger.warning(f"SSH connection attempt {attempt} failed: {e!r}")
                if attempt < config.max_tries and config.retry_delay:
                    time.sleep(config.retry_delay)
                continue

            connection = Connection(client)
            # Give the transport some time to settle before the first request
            if config.settle_delay:
                time.sleep(config.settle_delay)

            logger.info(f"Connected to SSH: {config.address}")
            return connection

        if failure is None:
            raise SSHConnectionError(
                f"No connection attempt was made to {config.address} (max_tries={config.max_tries})"
            )

        error, cause = failure
        if error is cause:
            raise error
        raise error from cause
