"""Exceptions raised by the command runner."""


class OSCmdsError(Exception):
    """Base class for oscmds errors."""


class CommandError(OSCmdsError):
    """A single command did not complete successfully."""

    def __init__(self, command: str, detail: str):
        super().__init__(detail)
        self.command = command
        self.detail = detail


class LaunchError(CommandError):
    """The shell process could not be started."""


class ExitStatusError(CommandError):
    """The command ran and exited with a non-zero status."""

    def __init__(self, command: str, exit_code: int):
        super().__init__(command, f"exited with status {exit_code}")
        self.exit_code = exit_code


class CommandFailed(OSCmdsError):
    """A batch stopped at a failing command.

    str() is the failing descriptor's failure message. The technical
    error is chained as __cause__.

    Attributes:
        command: The command text that failed
        outputs: Captured stdout of the commands that completed before
            the failure (inspect batches only)
    """

    def __init__(
        self,
        message: str,
        command: str,
        outputs: list[str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.command = command
        self.outputs = outputs or []


class UnknownCommandSet(OSCmdsError, LookupError):
    """No command set with the requested name is configured."""
