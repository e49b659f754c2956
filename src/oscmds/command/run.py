"""Run command - best-effort execution of a command set."""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TYPE_CHECKING

from oscmds.command.base import SetCommand
from oscmds.core.log import logger
from oscmds.core.result import RunReport

if TYPE_CHECKING:
    from oscmds.core.config import State

FATAL_EXIT_CODE = 1


def exit_on_fatal(
    report: RunReport,
    exit_hook: Callable[[int], object] = sys.exit,
) -> None:
    """End the process if a fatal command failed in this report.

    This is the only place a best-effort failure terminates the
    process; the runner itself just returns the report.

    Args:
        report: Result of Runner.run_commands()
        exit_hook: Called with the exit status; sys.exit by default
    """
    fatal = report.fatal
    if fatal is None:
        return

    logger.error(
        "Fatal error in command set '{identifier}': {failure_message}",
        identifier=report.identifier,
        failure_message=fatal.command.failure_message,
        error=fatal.error,
    )
    exit_hook(FATAL_EXIT_CODE)


class RunCommand(SetCommand):
    """Run every command in a set, continuing past non-fatal failures.

    Combined output of each command is written to the command log
    after it finishes. A failing command marked fatal stops the run
    and exits with status 1.

    A non-zero exit status counts as a failure. Older installers only
    failed when the shell could not be started; set
    config.check_exit_status to false to get that behaviour back.
    """

    def execute(
        self,
        state: State,
        exit_hook: Callable[[int], object] = sys.exit,
    ) -> int:
        config = state.config
        command_set = self.command_set(config)

        with self.open_sink(config) as sink:
            report = self.runner(config).run_commands(sink, command_set)

        for failure in report.failures:
            logger.warn(
                "Command failed: {failure_message}",
                failure_message=failure.command.failure_message,
                error=failure.error,
            )

        exit_on_fatal(report, exit_hook=exit_hook)
        return 0
