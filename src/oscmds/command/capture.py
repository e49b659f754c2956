"""Inspect command - run a command set and capture its output."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING

from pydantic import Field

from oscmds.command.base import SetCommand
from oscmds.core.errors import CommandFailed
from oscmds.core.log import logger

if TYPE_CHECKING:
    from oscmds.core.config import State


class InspectCommand(SetCommand):
    """Run the commands in a set and collect what they print.

    Stops at the first failure like `try`. With --json the captured
    stdout of each command is printed as a JSON list when done.
    """

    as_json: bool = Field(
        default=False,
        alias="json",
        description="Print captured outputs as a JSON list on stdout",
    )

    model_config = {"populate_by_name": True}

    def execute(self, state: State) -> int:
        config = state.config
        command_set = self.command_set(config)

        try:
            with self.open_sink(config) as sink:
                outputs = self.runner(config).inspect_commands(
                    sink, command_set
                )
        except CommandFailed as e:
            logger.error(
                "{failure_message}",
                failure_message=e.message,
                identifier=command_set.identifier,
                completed=len(e.outputs),
            )
            if self.as_json:
                print(json.dumps(e.outputs), file=sys.stdout)
            return 1

        if self.as_json:
            print(json.dumps(outputs), file=sys.stdout)
        return 0
