from enum import Enum
from typing import NamedTuple
from pydantic.dataclasses import dataclass
from pydantic import Field


# Pause after a fresh handshake before the connection is used. The transport has been
# seen to drop the first requests sent right after authentication.
DEFAULT_SETTLE_DELAY: float = 4.0

# Interval at which channels are polled for output, exit status and stdin.
DEFAULT_POLL_INTERVAL: float = 0.05

DEFAULT_CONNECT_TIMEOUT: float = 30.0

DEFAULT_MAX_TRIES: int = 100

DEFAULT_SHELL: str = "bash"

DEFAULT_TERMINAL_TYPE: str = "vt100"


class ConnectionState(Enum):
    """
    Lifecycle states of the single connection owned by a `ConnectionManager`.

    Attributes:
        DISCONNECTED: No connection has been established (or it was closed).
        CONNECTED: A live connection is cached and may be reused after a liveness probe.
        STALE: The cached connection failed its liveness probe and is pending discard.
    """
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    STALE = "stale"


class Quoting(str, Enum):
    """
    How the command text is embedded in the single-quoted `-c` argument of the login shell.

    Attributes:
        NAIVE: Wrap the command in single quotes as-is. Embedded single quotes are the
            caller's responsibility and will end the quoted string early.
        STRICT: Refuse commands that contain a single quote.
        ESCAPE: Quote the command with `shlex.quote`, so it reaches the shell verbatim.
    """
    NAIVE = "naive"
    STRICT = "strict"
    ESCAPE = "escape"


class OutputStream(str, Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


class OutputChunk(NamedTuple):
    """A piece of remote output, tagged with the stream it arrived on."""
    stream: OutputStream
    data: bytes


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Container for the parameters used to reach one managed machine.

    Host-key verification is off unless `strict_host_key_checking` is set: managed
    machines are reached through forwarded ports that get reused by different
    machines, so remembered host keys would only produce false mismatches.
    """
    host: str
    username: str
    private_key_path: str
    port: int = Field(default=22, ge=1, le=65535)
    forward_agent: bool = False
    known_hosts_file: str | None = None
    strict_host_key_checking: bool = False
    timeout: float = Field(default=DEFAULT_CONNECT_TIMEOUT, gt=0)
    max_tries: int = Field(default=DEFAULT_MAX_TRIES, ge=1)
    settle_delay: float = Field(default=DEFAULT_SETTLE_DELAY, ge=0)
    retry_delay: float = Field(default=0.0, ge=0)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"
