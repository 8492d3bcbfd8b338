from enum import Enum
from dataclasses import dataclass
from typing import Any, Mapping, Union
from pydantic import BaseModel, ConfigDict

from .base import DEFAULT_TERMINAL_TYPE, Quoting
from .exceptions import CommandFailure


class CommandOptions(BaseModel):
    """
    Per-invocation settings for a remote command.

    Attributes:
        command (str): The shell command to run.
        sudo (bool): Run the login shell through `sudo -H`. Defaults to False.
        error_check (bool): Raise `error_class` on a non-zero exit status. Defaults to True.
        error_class (type[CommandFailure]): Exception raised when error checking fails.
        strip_ansi (bool): Remove ANSI escape sequences from the output. Defaults to True.
        terminal_type (str): Terminal type requested for the pseudo-terminal. Defaults to "vt100".
        quoting (Quoting): How the command is embedded in the shell invocation.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    command: str
    sudo: bool = False
    error_check: bool = True
    error_class: type[CommandFailure] = CommandFailure
    strip_ansi: bool = True
    terminal_type: str = DEFAULT_TERMINAL_TYPE
    quoting: Quoting = Quoting.NAIVE

    @classmethod
    def merge(
        cls,
        command: str,
        overrides: Union[Mapping[str, Any], "CommandOptions", None] = None,
        **forced: Any,
    ) -> "CommandOptions":
        """
        Build the options for `command`: defaults, then caller overrides, then `forced` values.

        Args:
            command (str): The command text.
            overrides (Mapping | CommandOptions | None): Values given by the caller.
            **forced: Values that win over anything the caller passed (e.g. `sudo=True`).

        Returns:
            CommandOptions: The merged, validated options.

        Raises:
            pydantic.ValidationError: If an option is unknown or has an invalid value.
        """
        if isinstance(overrides, CommandOptions):
            values = overrides.model_dump(exclude={"command"})
        else:
            values = dict(overrides or {})

        values.update(forced)
        values["command"] = command

        return cls(**values)


@dataclass
class ExecutionOutcome:
    """
    Result of a finished remote command.

    Attributes:
        exit_status (int): The exit status reported by the remote side.
        chunks_delivered (int): How many output chunks were handed to the caller.
    """
    exit_status: int
    chunks_delivered: int = 0


class TransferDirection(str, Enum):
    UPLOAD = "upload"
    DOWNLOAD = "download"


@dataclass(frozen=True)
class TransferRequest:
    source: str
    destination: str | None
    direction: TransferDirection

    def __str__(self) -> str:
        return f"{self.direction.value} {self.source} -> {self.destination or '<memory>'}"
