"""Shared plumbing for subcommands that execute a command set."""

from __future__ import annotations

import contextlib
import sys
from collections.abc import Iterator
from typing import TYPE_CHECKING, TextIO

from pydantic import BaseModel, Field
from pydantic_settings import CliPositionalArg

from oscmds.core.commands import CommandSet
from oscmds.core.errors import UnknownCommandSet
from oscmds.core.runner import Runner

if TYPE_CHECKING:
    from oscmds.core.config import Config, State


class SetCommand(BaseModel):
    """Base for subcommands that take a command set name."""

    name: CliPositionalArg[str] = Field(
        description="Name of a command set under config.command_sets"
    )

    def command_set(self, config: Config) -> CommandSet:
        """Look up the named set and build it.

        Raises:
            UnknownCommandSet: If no set with that name is configured
        """
        if self.name not in config.command_sets:
            available = ', '.join(sorted(config.command_sets)) or "none"
            raise UnknownCommandSet(
                f"Unknown command set '{self.name}'. Available: {available}"
            )
        return CommandSet.from_config(config.command_sets[self.name])

    @contextlib.contextmanager
    def open_sink(self, config: Config) -> Iterator[TextIO]:
        """Yield the command log: config.output_log, or stdout."""
        if config.output_log is None:
            yield sys.stdout
            return

        config.output_log.parent.mkdir(parents=True, exist_ok=True)
        with open(config.output_log, "a", encoding="utf-8") as sink:
            yield sink

    def runner(self, config: Config) -> Runner:
        return Runner.from_config(config)

    def execute(self, state: State) -> int:
        """Run the subcommand and return the process exit code."""
        raise NotImplementedError
