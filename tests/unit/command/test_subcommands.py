"""Tests for the run/try/inspect/list subcommands."""

import json
from unittest.mock import Mock

import pytest
import yaml

from oscmds.command import (
    InspectCommand,
    ListCommand,
    RunCommand,
    TryCommand,
)
from oscmds.core.config import (
    CommandConfig,
    CommandSetConfig,
    Config,
    State,
)
from oscmds.core.errors import UnknownCommandSet
from oscmds.core.redact import DEFAULT_MASK, RedactionRules
from oscmds.core.yaml_settings import DEFAULTS_FILE


def last_line(out: str):
    """Parse the JSON list printed last; log lines may precede it."""
    return json.loads(out.strip().splitlines()[-1])


@pytest.fixture
def output_log(tmp_path):
    return tmp_path / "logs" / "cmd-output.log"


def make_state(output_log, **command_sets) -> State:
    config = Config(
        output_log=output_log,
        redaction=RedactionRules(secrets=["hunter2"]),
        command_sets={
            name: CommandSetConfig(
                id="test:1",
                commands=[CommandConfig(**command) for command in commands],
            )
            for name, commands in command_sets.items()
        },
    )
    return State(config=config)


def test_run_writes_command_log(output_log):
    state = make_state(output_log, demo=[
        {"text": "echo hunter2", "failure_message": "echo failed"},
        {"text": "false", "failure_message": "soft failure"},
    ])

    hook = Mock()
    assert RunCommand(name="demo").execute(state, exit_hook=hook) == 0

    hook.assert_not_called()
    log = output_log.read_text()
    assert f"[oscmds] # echo {DEFAULT_MASK}\n" in log
    assert "hunter2\n" in log  # command output is not redacted
    assert "[oscmds] # false\n" in log


def test_run_fatal_failure_exits(output_log):
    state = make_state(output_log, demo=[
        {"text": "false", "failure_message": "DB install", "fatal": True},
        {"text": "echo never", "failure_message": "unreachable"},
    ])

    hook = Mock()
    RunCommand(name="demo").execute(state, exit_hook=hook)

    hook.assert_called_once_with(1)
    assert "never" not in output_log.read_text()


def test_try_success_and_failure(output_log):
    state = make_state(
        output_log,
        good=[{"text": "echo ok", "failure_message": "nope"}],
        bad=[
            {"text": "exit 9", "failure_message": "Unsupported OS"},
            {"text": "echo never", "failure_message": "unreachable"},
        ],
    )

    assert TryCommand(name="good").execute(state) == 0
    assert TryCommand(name="bad").execute(state) == 1
    assert "never" not in output_log.read_text()


def test_inspect_prints_json(output_log, capsys):
    state = make_state(output_log, versions=[
        {"text": "echo A", "failure_message": "A failed"},
        {"text": "echo B", "failure_message": "B failed"},
    ])

    assert InspectCommand(name="versions", as_json=True).execute(state) == 0

    assert last_line(capsys.readouterr().out) == ["A\n", "B\n"]


def test_inspect_failure_prints_partial_json(output_log, capsys):
    state = make_state(output_log, versions=[
        {"text": "echo A", "failure_message": "A failed"},
        {"text": "false", "failure_message": "B failed"},
    ])

    assert InspectCommand(name="versions", as_json=True).execute(state) == 1

    assert last_line(capsys.readouterr().out) == ["A\n"]


def test_unknown_command_set(output_log):
    state = make_state(output_log, demo=[{"text": "true"}])

    with pytest.raises(
        UnknownCommandSet, match="Unknown command set 'missing'"
    ):
        TryCommand(name="missing").execute(state)


def test_list_redacts_and_marks_fatal(output_log, capsys):
    state = make_state(output_log, demo=[
        {"text": "mysql -phunter2 -e 'select 1'", "fatal": True},
        {"text": "echo done"},
    ])

    assert ListCommand().execute(state) == 0

    out = capsys.readouterr().out
    assert "demo (test:1)" in out
    assert f"! mysql -p{DEFAULT_MASK} -e 'select 1'" in out
    assert "- echo done" in out
    assert "hunter2" not in out


def test_exit_status_checking_documented_as_opt_out():
    """run fails on non-zero exits by default and says how to opt out."""
    text = DEFAULTS_FILE.read_text()

    assert yaml.safe_load(text)["config"]["check_exit_status"] is True
    assert "legacy behaviour" in text
    assert "config.check_exit_status" in RunCommand.__doc__
    assert Config.model_fields["check_exit_status"].default is True
