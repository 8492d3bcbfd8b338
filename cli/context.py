from dataclasses import dataclass
from typing import IO

from settings import SSH_SETTLE_DELAY, SSH_POLL_INTERVAL
from communicator.base import ConnectionConfig
from communicator.session import SSHCommunicator


@dataclass
class ConnectionOptions:
    """
    Connection settings collected from the global CLI options.
    """
    host: str
    port: int
    user: str
    key: str
    forward_agent: bool
    timeout: float
    max_tries: int
    shell: str


def build_communicator(options: ConnectionOptions, input_stream: IO | None = None) -> SSHCommunicator:
    """
    Builds a communicator from the CLI connection options.

    Raises:
        pydantic.ValidationError: If an option is out of range (e.g. a port above 65535).
    """
    config = ConnectionConfig(
        host= options.host,
        port= options.port,
        username= options.user,
        private_key_path= options.key,
        forward_agent= options.forward_agent,
        timeout= options.timeout,
        max_tries= options.max_tries,
        settle_delay= SSH_SETTLE_DELAY,
    )
    return SSHCommunicator(
        config= config,
        shell= options.shell,
        input_stream= input_stream,
        poll_interval= SSH_POLL_INTERVAL,
    )
