import io
import logging
import os
import platform
import select
import threading
import paramiko

from typing import IO, Optional
from paramiko.ssh_exception import SSHException

from .base import DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)


class StdinRelay(threading.Thread):
    """
    Forwards a local input stream to a remote channel while the command runs.

    Streams backed by a file descriptor are watched with `select`, so the relay only
    reads when input is waiting, then forwards whatever the descriptor holds. Other
    streams (and every stream on Windows, where `select` only handles sockets) are
    read line by line at a fixed interval instead.
    The relay ends when `stop()` is called, at end of input, or when the channel
    refuses more data.
    """
    READ_SIZE = 4096

    def __init__(
            self,
            channel: paramiko.Channel,
            input_stream: IO,
            poll_interval: float = DEFAULT_POLL_INTERVAL,
        ) -> None:
        super().__init__(name="stdin-relay", daemon=True)
        self.channel = channel
        self.input_stream = input_stream
        self.poll_interval = poll_interval
        self._stop_event = threading.Event()
        self._fileno = self._selectable_fileno(input_stream)

    @staticmethod
    def _selectable_fileno(stream: IO) -> Optional[int]:
        if platform.system() == "Windows":
            return None
        try:
            return stream.fileno()
        except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
            return None

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                if not self._wait_for_input():
                    continue
                data = self._read_input()
            except (OSError, ValueError) as e:
                logger.debug(f"stdin relay: input stream unavailable ({e!r})")
                return

            if not data:
                logger.debug("stdin relay: end of input")
                return

            if isinstance(data, str):
                data = data.encode("utf-8")

            try:
                self.channel.sendall(data)
            except (SSHException, OSError) as e:
                logger.debug(f"stdin relay: channel no longer accepts data ({e!r})")
                return

    def _read_input(self) -> bytes | str:
        # Reading the descriptor directly leaves nothing behind in the stream's buffer,
        # where `select` could not see it.
        if self._fileno is not None:
            return os.read(self._fileno, self.READ_SIZE)
        return self.input_stream.readline()

    def _wait_for_input(self) -> bool:
        if self._fileno is None:
            self._stop_event.wait(self.poll_interval)
            return not self._stop_event.is_set()

        readable, _, _ = select.select([self._fileno], [], [], self.poll_interval)
        return bool(readable) and not self._stop_event.is_set()

    def stop(self, timeout: float = 1.0) -> None:
        """
        Stops the relay and waits up to `timeout` seconds for its thread to finish.

        A read that is already blocked on a non-selectable stream cannot be interrupted;
        the thread is a daemon, so it never keeps the process alive.
        """
        self._stop_event.set()
        if self.is_alive() and threading.current_thread() is not self:
            self.join(timeout)
