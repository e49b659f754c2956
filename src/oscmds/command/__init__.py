"""CLI command modules for oscmds."""

from oscmds.command.attempt import TryCommand
from oscmds.command.capture import InspectCommand
from oscmds.command.listing import ListCommand
from oscmds.command.run import RunCommand, exit_on_fatal

__all__ = [
    "InspectCommand",
    "ListCommand",
    "RunCommand",
    "TryCommand",
    "exit_on_fatal",
]
