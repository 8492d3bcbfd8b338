import shlex

from .base import Quoting


class CommandFormatter:
    """
    Builds the login-shell invocations that wrap every remote command.
    """

    @staticmethod
    def quote_command(command: str, quoting: Quoting = Quoting.NAIVE) -> str:
        """
        Quotes the command text so it can be passed as the shell's `-c` argument.

        Args:
            command (str): The raw command text.
            quoting (Quoting): The quoting policy, see `Quoting`.

        Returns:
            str: The quoted command.

        Raises:
            ValueError: If `quoting` is STRICT and the command contains a single quote.
        """
        if quoting is Quoting.ESCAPE:
            return shlex.quote(command)

        if quoting is Quoting.STRICT and "'" in command:
            raise ValueError(
                f"Command <{command}> contains a single quote, which cannot be passed "
                f"safely inside the single-quoted shell argument."
            )

        return f"'{command}'"

    @staticmethod
    def shell_invocation(
        command: str,
        shell: str,
        sudo: bool = False,
        quoting: Quoting = Quoting.NAIVE,
    ) -> str:
        """
        Formats a command to run inside a login shell, optionally through sudo.

        Args:
            command (str): The shell command to run.
            shell (str): Path or name of the remote login shell.
            sudo (bool): If True, wraps the shell with `sudo -H`.
            quoting (Quoting): The quoting policy for the command text.

        Returns:
            str: The full invocation, e.g. `sudo -H bash -l -c 'echo hi'`.

        Example:
            shell_invocation("ls /", shell="bash") -> "bash -l -c 'ls /'"
        """
        login_shell = f"{shell} -l"
        if sudo:
            login_shell = f"sudo -H {login_shell}"

        return f"{login_shell} -c {CommandFormatter.quote_command(command, quoting)}"
