"""Shell command execution on top of invoke.

Three ways to run a command, each with a batch form that walks a
CommandSet in order:

- send_command / run_commands: capture combined output, write it to
  the sink afterwards, keep going past soft failures
- try_command / try_commands: stream output to the sink, stop at the
  first failure
- inspect_command / inspect_commands: as try, but also hand stdout
  back to the caller
"""

from __future__ import annotations

import io
from typing import TextIO

from invoke import Context, Result
from invoke.exceptions import ThreadException

from oscmds.core.commands import CommandDescriptor, CommandSet
from oscmds.core.errors import (
    CommandFailed,
    ExitStatusError,
    LaunchError,
)
from oscmds.core.log import logger, timestamp
from oscmds.core.redact import RedactionRules, redact
from oscmds.core.result import CommandOutcome, Outcome, RunReport

DEFAULT_PROMPT = "[oscmds] # "


class Runner(Context):
    """invoke.Context that runs command sets against an output sink.

    The sink is any writable text stream. Command lines are written
    to it redacted, the commands themselves always run unredacted.
    """

    # Declared on the class so invoke's DataProxy stores these as
    # real attributes instead of config keys
    shell: str = "bash"
    prompt: str = DEFAULT_PROMPT
    rules: RedactionRules | None = None
    check_exit_status: bool = True

    def __init__(
        self,
        shell: str = "bash",
        prompt: str = DEFAULT_PROMPT,
        rules: RedactionRules | None = None,
        check_exit_status: bool = True,
    ):
        """Create a runner.

        Args:
            shell: Shell used as `<shell> -c <command>`
            prompt: Prefix written before each logged command line
            rules: Redaction rules for logged command lines
            check_exit_status: If False, send_command only treats
                launch errors as failures and ignores exit codes
        """
        super().__init__()
        self.shell = shell
        self.prompt = prompt
        self.rules = rules
        self.check_exit_status = check_exit_status

    @classmethod
    def from_config(cls, config) -> Runner:
        return cls(
            shell=config.shell,
            prompt=config.prompt,
            rules=config.redaction,
            check_exit_status=config.check_exit_status,
        )

    def redacted(self, command: str) -> str:
        return redact(command, self.rules)

    def _announce(self, sink: TextIO, command: str) -> None:
        """Write the prompt and redacted command line to the sink.

        A sink that refuses the write only costs the log line; the
        command still runs.
        """
        try:
            sink.write(f"{self.prompt}{self.redacted(command)}\n")
            sink.flush()
        except (OSError, ValueError) as e:
            logger.warn(
                "Failed to log command {command}, error was: {error}",
                command=self.redacted(command),
                error=str(e),
            )

    def _write_output(self, sink: TextIO, output: str) -> None:
        try:
            sink.write(output)
            sink.flush()
        except (OSError, ValueError) as e:
            logger.error(
                "Failed to write to OS command log, error was: {error}",
                error=str(e),
            )

    def _invoke(
        self, command: str, out_stream: TextIO, err_stream: TextIO
    ) -> Result:
        """Run one command to completion, never raising on exit code.

        Raises:
            LaunchError: If the shell could not be started or its
                output could not be read
        """
        logger.spew(
            "Starting {shell} -c {command}",
            shell=self.shell,
            command=self.redacted(command),
        )
        try:
            result = self.run(
                command,
                shell=self.shell,
                hide=False,
                warn=True,
                in_stream=False,
                out_stream=out_stream,
                err_stream=err_stream,
            )
        except (OSError, ThreadException) as e:
            logger.trace(
                "{ts} - Failed to start command {command}, error was: {error}",
                ts=timestamp(),
                command=self.redacted(command),
                error=str(e),
            )
            raise LaunchError(command, str(e)) from e

        logger.spew(
            "{command} exited with status {exit_code}",
            command=self.redacted(command),
            exit_code=result.exited,
        )
        return result

    def _check_exit(self, command: str, result: Result) -> None:
        if result.exited != 0:
            logger.trace(
                "{ts} - {command} errored with exit status: {exit_code}",
                ts=timestamp(),
                command=self.redacted(command),
                exit_code=result.exited,
            )
            raise ExitStatusError(command, result.exited)

    # Best effort

    def send_command(
        self,
        sink: TextIO,
        command: str,
        failure_message: str = "",
        fatal: bool = False,
    ) -> CommandOutcome:
        """Run a command, capture its combined output, then log it.

        Never raises for command failures. The outcome is tagged
        FATAL_FAILURE or SOFT_FAILURE depending on `fatal`; deciding
        whether to end the process is left to the caller.

        Args:
            sink: Stream receiving the command line and its output
            command: Shell command to run
            failure_message: Message describing a failure
            fatal: Whether a failure should stop the batch

        Returns:
            CommandOutcome with the exit code and captured output
        """
        descriptor = CommandDescriptor(
            text=command, failure_message=failure_message, fatal=fatal
        )
        failed = Outcome.FATAL_FAILURE if fatal else Outcome.SOFT_FAILURE

        self._announce(sink, command)

        captured = io.StringIO()
        try:
            result = self._invoke(command, captured, captured)
        except LaunchError as e:
            logger.error(
                "{ts} - Failed to run OS command {command}, error was: {error}",
                ts=timestamp(),
                command=self.redacted(command),
                error=e.detail,
            )
            # Whatever the command printed before failing is still logged
            output = captured.getvalue()
            self._write_output(sink, output)
            return CommandOutcome(
                command=descriptor,
                outcome=failed,
                output=output,
                error=e.detail,
            )

        output = captured.getvalue()
        self._write_output(sink, output)

        if self.check_exit_status and result.exited != 0:
            logger.error(
                "{ts} - OS command {command} exited with status {exit_code}",
                ts=timestamp(),
                command=self.redacted(command),
                exit_code=result.exited,
            )
            return CommandOutcome(
                command=descriptor,
                outcome=failed,
                exit_code=result.exited,
                output=output,
                error=f"exited with status {result.exited}",
            )

        return CommandOutcome(
            command=descriptor,
            outcome=Outcome.OK,
            exit_code=result.exited,
            output=output,
        )

    def run_commands(
        self, sink: TextIO, command_set: CommandSet
    ) -> RunReport:
        """Send every command in order, stopping only on a fatal one.

        Returns:
            RunReport; report.fatal is set if a fatal command failed,
            in which case the commands after it were not run
        """
        report = RunReport(identifier=command_set.identifier)
        with logger.span(
            "Running command set {identifier}",
            identifier=command_set.identifier,
        ):
            for descriptor in command_set.commands:
                outcome = self.send_command(
                    sink,
                    descriptor.text,
                    descriptor.failure_message,
                    descriptor.fatal,
                )
                report.outcomes.append(outcome)
                if outcome.outcome is Outcome.FATAL_FAILURE:
                    logger.error(
                        "{ts} - Fatal command failed: {failure_message}",
                        ts=timestamp(),
                        failure_message=descriptor.failure_message,
                    )
                    break
        return report

    # Fail fast

    def try_command(
        self,
        sink: TextIO,
        command: str,
        failure_message: str = "",
        fatal: bool = False,
    ) -> None:
        """Run a command with stdout and stderr streamed to the sink.

        failure_message and fatal are accepted for symmetry with
        send_command; a failure always raises.

        Raises:
            LaunchError: If the command could not be started
            ExitStatusError: If it exited non-zero
        """
        logger.trace("Entering try_command")
        self._announce(sink, command)

        result = self._invoke(command, sink, sink)
        self._check_exit(command, result)

        logger.trace("Non-error return from try_command")

    def try_commands(self, sink: TextIO, command_set: CommandSet) -> None:
        """Try every command in order, stopping at the first failure.

        Raises:
            CommandFailed: Carrying the failing command's
                failure_message; later commands are not run
        """
        with logger.span(
            "Trying command set {identifier}",
            identifier=command_set.identifier,
        ):
            for descriptor in command_set.commands:
                try:
                    self.try_command(
                        sink,
                        descriptor.text,
                        descriptor.failure_message,
                        descriptor.fatal,
                    )
                except (LaunchError, ExitStatusError) as e:
                    self._trace_batch_failure(descriptor, e)
                    raise CommandFailed(
                        descriptor.failure_message, descriptor.text
                    ) from e

    # Inspect

    def inspect_command(
        self,
        sink: TextIO,
        command: str,
        failure_message: str = "",
        fatal: bool = False,
    ) -> str:
        """Run a command streaming to the sink and return its stdout.

        Stderr goes to the sink only.

        Raises:
            LaunchError: If the command could not be started
            ExitStatusError: If it exited non-zero
        """
        logger.trace("Inside inspect_command")
        self._announce(sink, command)

        result = self._invoke(command, sink, sink)
        self._check_exit(command, result)

        logger.trace("Non-error return from inspect_command")
        return result.stdout

    def inspect_commands(
        self, sink: TextIO, command_set: CommandSet
    ) -> list[str]:
        """Inspect every command in order and collect their stdout.

        Returns:
            One captured stdout string per command

        Raises:
            CommandFailed: At the first failure; its `outputs` holds
                what was captured before it
        """
        outputs: list[str] = []
        with logger.span(
            "Inspecting command set {identifier}",
            identifier=command_set.identifier,
        ):
            for descriptor in command_set.commands:
                logger.trace(
                    "Current cmd: {command}",
                    command=self.redacted(descriptor.text),
                )
                try:
                    out = self.inspect_command(
                        sink,
                        descriptor.text,
                        descriptor.failure_message,
                        descriptor.fatal,
                    )
                except (LaunchError, ExitStatusError) as e:
                    self._trace_batch_failure(descriptor, e)
                    raise CommandFailed(
                        descriptor.failure_message,
                        descriptor.text,
                        outputs=outputs,
                    ) from e
                outputs.append(out)
        return outputs

    def _trace_batch_failure(
        self, descriptor: CommandDescriptor, error: Exception
    ) -> None:
        logger.trace(
            "{ts} - Command {command} errored with {failure_message}. "
            "Underlying error is {error}",
            ts=timestamp(),
            command=self.redacted(descriptor.text),
            failure_message=descriptor.failure_message,
            error=str(error),
        )
