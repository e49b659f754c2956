"""Try command - fail-fast execution of a command set."""

from __future__ import annotations

from typing import TYPE_CHECKING

from oscmds.command.base import SetCommand
from oscmds.core.errors import CommandFailed
from oscmds.core.log import logger

if TYPE_CHECKING:
    from oscmds.core.config import State


class TryCommand(SetCommand):
    """Run the commands in a set until one fails.

    Output is streamed to the command log as it is produced. The
    first failing command stops the set and its failure message is
    reported.
    """

    def execute(self, state: State) -> int:
        config = state.config
        command_set = self.command_set(config)

        try:
            with self.open_sink(config) as sink:
                self.runner(config).try_commands(sink, command_set)
        except CommandFailed as e:
            logger.error(
                "{failure_message}",
                failure_message=e.message,
                identifier=command_set.identifier,
            )
            return 1

        logger.info("Command set '{name}' completed", name=self.name)
        return 0
