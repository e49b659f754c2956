"""Tests for best-effort execution (send_command / run_commands)."""

from unittest.mock import MagicMock, Mock

from oscmds.command.run import exit_on_fatal
from oscmds.core import runner as runner_module
from oscmds.core.commands import CommandSet
from oscmds.core.errors import LaunchError
from oscmds.core.result import Outcome
from oscmds.core.runner import Runner


def test_send_command_logs_prompt_then_output(runner, sink):
    outcome = runner.send_command(sink, "echo hello", "echo failed", False)

    assert outcome.outcome is Outcome.OK
    assert outcome.exit_code == 0
    assert outcome.output == "hello\n"
    assert sink.getvalue() == "[oscmds] # echo hello\nhello\n"


def test_send_command_combines_stdout_and_stderr(runner, sink):
    outcome = runner.send_command(
        sink, "echo to-out; echo to-err >&2", "failed", False
    )

    assert "to-out" in outcome.output
    assert "to-err" in outcome.output
    assert "to-err" in sink.getvalue()


def test_send_command_uses_configured_prompt(sink):
    runner = Runner(prompt="[installer] # ")
    runner.send_command(sink, "true")

    assert sink.getvalue().startswith("[installer] # true\n")


def test_nonzero_exit_is_soft_failure(runner, sink):
    outcome = runner.send_command(sink, "echo partial; exit 3", "broke", False)

    assert outcome.outcome is Outcome.SOFT_FAILURE
    assert outcome.exit_code == 3
    assert outcome.output == "partial\n"
    assert "partial" in sink.getvalue()


def test_nonzero_exit_on_fatal_command_is_fatal(runner, sink):
    outcome = runner.send_command(sink, "false", "broke", True)

    assert outcome.outcome is Outcome.FATAL_FAILURE
    assert outcome.exit_code == 1


def test_exit_status_ignored_when_not_checked(sink):
    """Only launch errors count when exit status checking is off."""
    runner = Runner(check_exit_status=False)
    outcome = runner.send_command(sink, "exit 7", "broke", True)

    assert outcome.outcome is Outcome.OK
    assert outcome.exit_code == 7


def test_launch_error_is_failure(sink):
    runner = Runner(shell="/nonexistent/shell")

    soft = runner.send_command(sink, "echo hi", "no shell", False)
    fatal = runner.send_command(sink, "echo hi", "no shell", True)

    assert soft.outcome is Outcome.SOFT_FAILURE
    assert soft.exit_code is None
    assert soft.error
    assert fatal.outcome is Outcome.FATAL_FAILURE


def test_refused_log_line_does_not_stop_command(runner, refusing_sink):
    outcome = runner.send_command(refusing_sink, "echo ran", "failed", False)

    assert outcome.outcome is Outcome.OK
    assert refusing_sink.getvalue() == "ran\n"


def test_run_commands_continues_past_soft_failures(runner, sink):
    command_set = CommandSet(identifier="any")
    command_set.append("false", "first failed", False)
    command_set.append("exit 4", "second failed", False)
    command_set.append("echo still-running", "third failed", False)

    report = runner.run_commands(sink, command_set)

    assert report.identifier == "any"
    assert [o.outcome for o in report.outcomes] == [
        Outcome.SOFT_FAILURE, Outcome.SOFT_FAILURE, Outcome.OK,
    ]
    assert report.fatal is None
    assert len(report.failures) == 2

    log = sink.getvalue()
    for line in ("# false", "# exit 4", "# echo still-running"):
        assert line in log
    assert "still-running\n" in log


def test_run_commands_stops_at_fatal_failure(runner, sink, tmp_path):
    first = tmp_path / "first"
    last = tmp_path / "last"
    command_set = CommandSet(identifier="any")
    command_set.append(f"touch {first}", "touch failed", False)
    command_set.append("false", "Unable to install DB", True)
    command_set.append(f"touch {last}", "touch failed", False)

    report = runner.run_commands(sink, command_set)

    assert len(report.outcomes) == 2
    assert report.fatal is report.outcomes[1]
    assert report.fatal.command.failure_message == "Unable to install DB"
    assert first.exists()
    assert not last.exists()
    assert str(last) not in sink.getvalue()


def test_exit_on_fatal_calls_hook(runner, sink):
    command_set = CommandSet(identifier="any")
    command_set.append("false", "Unable to install DB", True)
    report = runner.run_commands(sink, command_set)
    hook = Mock()

    exit_on_fatal(report, exit_hook=hook)

    hook.assert_called_once_with(1)


def test_exit_on_fatal_ignores_soft_failures(runner, sink):
    command_set = CommandSet(identifier="any")
    command_set.append("false", "not important", False)
    report = runner.run_commands(sink, command_set)
    hook = Mock()

    exit_on_fatal(report, exit_hook=hook)

    hook.assert_not_called()


class PartialOutputRunner(Runner):
    """Runner whose shell prints a line, then loses its output pipe."""

    def _invoke(self, command, out_stream, err_stream):
        out_stream.write("half-written\n")
        raise LaunchError(command, "output pipe closed")


def test_launch_error_still_logs_captured_output(sink):
    outcome = PartialOutputRunner().send_command(
        sink, "long-running-job", "job failed", False
    )

    assert outcome.outcome is Outcome.SOFT_FAILURE
    assert outcome.output == "half-written\n"
    assert outcome.error == "output pipe closed"
    assert sink.getvalue() == "[oscmds] # long-running-job\nhalf-written\n"


def test_braces_in_commands_are_not_log_templates(runner, sink, recwarn):
    command_set = CommandSet(identifier="any")
    command_set.append("echo {a} ${HOME}; exit 1", "{error} broke", True)

    report = runner.run_commands(sink, command_set)

    assert report.fatal.command.failure_message == "{error} broke"
    assert "[oscmds] # echo {a} ${HOME}; exit 1\n" in sink.getvalue()
    assert not [
        w for w in recwarn
        if w.category.__name__ == "FormattingFailedWarning"
    ]


def test_run_commands_traced_in_span(runner, sink, monkeypatch):
    log = MagicMock()
    monkeypatch.setattr(runner_module, "logger", log)
    command_set = CommandSet(identifier="linux")
    command_set.append("exit 2", "failed", False)

    runner.run_commands(sink, command_set)

    log.span.assert_called_once_with(
        "Running command set {identifier}", identifier="linux"
    )
    log.spew.assert_any_call(
        "Starting {shell} -c {command}", shell="bash", command="exit 2"
    )
    log.spew.assert_any_call(
        "{command} exited with status {exit_code}",
        command="exit 2",
        exit_code=2,
    )
