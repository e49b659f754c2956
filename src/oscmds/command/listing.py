"""List command - show the configured command sets."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from oscmds.core.config import State


def format_command_sets(command_sets: dict) -> str:
    """Render command sets as an indented listing."""
    if not command_sets:
        return "No command sets configured.\n"

    output = "Command sets:\n\n"
    for name, command_set in sorted(command_sets.items()):
        output += f"  {name} ({command_set.id})"
        if command_set.description:
            output += f": {command_set.description}"
        output += "\n"
        for command in command_set.commands:
            marker = "!" if command.fatal else "-"
            output += f"    {marker} {command.text}\n"
    return output


class ListCommand(BaseModel):
    """List configured command sets and their commands.

    Fatal commands are marked with '!'. Command text is shown
    redacted.
    """

    def execute(self, state: State) -> int:
        from oscmds.core.redact import redact

        config = state.config
        listing = format_command_sets(config.command_sets)
        print(redact(listing, config.redaction), end="")
        return 0
