"""Result types for best-effort command execution."""

from enum import Enum

from pydantic import BaseModel

from oscmds.core.commands import CommandDescriptor


class Outcome(str, Enum):
    """How a best-effort command ended."""

    OK = "ok"
    SOFT_FAILURE = "soft_failure"
    FATAL_FAILURE = "fatal_failure"


class CommandOutcome(BaseModel):
    """Result of one send_command() call."""

    command: CommandDescriptor
    outcome: Outcome
    exit_code: int | None = None
    output: str = ""
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome is Outcome.OK


class RunReport(BaseModel):
    """Outcomes of a best-effort batch, in execution order."""

    identifier: str
    outcomes: list[CommandOutcome] = []

    @property
    def fatal(self) -> CommandOutcome | None:
        """The fatal outcome that stopped the batch, if any."""
        for outcome in self.outcomes:
            if outcome.outcome is Outcome.FATAL_FAILURE:
                return outcome
        return None

    @property
    def failures(self) -> list[CommandOutcome]:
        return [o for o in self.outcomes if not o.success]
