#!/usr/bin/env python3
"""oscmds CLI - run declared OS command sets."""

import sys

from pydantic import Field
from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from oscmds.command.attempt import TryCommand
from oscmds.command.capture import InspectCommand
from oscmds.command.listing import ListCommand
from oscmds.command.run import RunCommand
from oscmds.core.config import State
from oscmds.core.errors import UnknownCommandSet
from oscmds.core.log import logger


class CliState(State):
    """Run ordered sets of OS shell commands with consistent logging.

    Command sets are declared in YAML under config.command_sets and
    run in one of three modes:
      run      best effort; only a failing fatal command stops it
      try      stop at the first failure and report its message
      inspect  like try, and also capture each command's stdout

    Configuration sources (in priority order):
    1. Command-line arguments (--config.shell /bin/sh)
    2. --include files, ./oscmds.yaml, user config, package defaults
    3. .env file
    4. Environment variables (OSCMDS_CONFIG__SHELL=/bin/sh)
    """

    run: CliSubCommand[RunCommand]
    try_: CliSubCommand[TryCommand] = Field(alias="try")
    inspect: CliSubCommand[InspectCommand]
    list: CliSubCommand[ListCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        # Closes the file sink even when a subcommand exits
        with logger:
            try:
                exit_code = subcommand.execute(self)
            except UnknownCommandSet as e:
                logger.error("{error}", error=str(e))
                exit_code = 2
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
