import io
import signal
from typing import Any

import pytest

from labdb_manager.commands import (
    CommandQueue,
    ConfirmationGate,
    QueueReentryError,
    ShellCommand,
    SubprocessRunner,
)
from labdb_manager.commands.runner import normalize_exit_status
from labdb_manager.console import Color, highlight


class RecordingRunner:
    def __init__(self, exit_codes: dict[str, int] | None = None) -> None:
        self.exit_codes = exit_codes or {}
        self.commands: list[str] = []

    def run(self, command_text: str, *, quiet: bool = False) -> int:
        _ = quiet
        self.commands.append(command_text)
        return self.exit_codes.get(command_text, 0)


class ScriptedGate(ConfirmationGate):
    def __init__(self, *responses: str) -> None:
        self.responses = list(responses)
        self.prompts: list[str] = []

    def read_response(self, command_text: str) -> str:
        self.prompts.append(command_text)
        return self.responses.pop(0)


def _text(value: str):
    return lambda: value


def test_queue_runs_commands_in_enqueue_order(capsys) -> None:
    runner = RecordingRunner()
    queue = CommandQueue()
    for name in ["first", "second", "third"]:
        queue.enqueue(_text(name))

    outcome = queue.drain_and_run(runner)

    assert outcome.ok
    assert outcome.exit_code == 0
    assert runner.commands == ["first", "second", "third"]
    assert len(queue) == 0
    output = capsys.readouterr().out
    assert "--> first" in output
    assert output.index("--> first") < output.index("--> third")


def test_hard_failure_stops_queue_with_exit_status(capsys) -> None:
    runner = RecordingRunner({"second": 3})
    queue = CommandQueue()
    for name in ["first", "second", "third"]:
        queue.enqueue(_text(name))

    outcome = queue.drain_and_run(runner)

    assert outcome.status == "failed"
    assert outcome.exit_code == 3
    assert outcome.command_text == "second"
    assert runner.commands == ["first", "second"]
    assert len(queue) == 0
    assert "unresolvable error while running second" in capsys.readouterr().out


def test_soft_failure_does_not_halt_queue(capsys) -> None:
    runner = RecordingRunner({"probe": 1})
    events: list[dict[str, Any]] = []
    queue = CommandQueue(event_hook=events.append)
    queue.enqueue(_text("probe"), exit_on_fail=False)
    queue.enqueue(_text("after"))

    outcome = queue.drain_and_run(runner)

    assert outcome.ok
    assert runner.commands == ["probe", "after"]
    assert [event["event"] for event in events].count("command_exit") == 2
    assert "unresolvable" not in capsys.readouterr().out


def test_soft_failure_returns_status_to_caller() -> None:
    command = ShellCommand(_text("probe"), exit_on_fail=False)

    outcome = command.execute(RecordingRunner({"probe": 1}))

    assert outcome.status == "soft_failure"
    assert outcome.exit_code == 1
    assert not outcome.halts_queue


def test_command_renders_with_bound_arguments() -> None:
    runner = RecordingRunner()
    command = ShellCommand(lambda branch="main": f"git checkout {branch}", args=("deploy",))

    command.execute(runner)

    assert runner.commands == ["git checkout deploy"]
    assert str(command) == "git checkout main"
    assert command.kind == "shell"


def test_command_with_required_arguments_renders_without_them() -> None:
    runner = RecordingRunner()
    command = ShellCommand(lambda branch: f"git checkout {branch}", args=("deploy",))
    queued = CommandQueue().enqueue(lambda source, target: f"cp {source} {target}", "x", "y")

    assert str(command) == "<lambda>('deploy',)"
    assert str(queued) == "<lambda>('x', 'y')"

    command.execute(runner)

    assert runner.commands == ["git checkout deploy"]


def test_declined_confirmation_stops_before_command_runs() -> None:
    runner = RecordingRunner()
    gate = ScriptedGate("no")
    events: list[dict[str, Any]] = []
    queue = CommandQueue(event_hook=events.append)
    queue.enqueue(_text("first"))
    queue.enqueue(_text("risky"), confirm=True)
    queue.enqueue(_text("never"))

    outcome = queue.drain_and_run(runner, gate)

    assert outcome.status == "declined"
    assert outcome.exit_code == 0
    assert runner.commands == ["first"]
    assert gate.prompts == ["risky"]
    assert events[-1]["event"] == "command_declined"


def test_confirmed_command_runs() -> None:
    runner = RecordingRunner()
    queue = CommandQueue()
    queue.enqueue(_text("risky"), confirm=True)

    outcome = queue.drain_and_run(runner, ScriptedGate("Y"))

    assert outcome.ok
    assert runner.commands == ["risky"]


def test_confirmation_without_gate_is_declined() -> None:
    runner = RecordingRunner()
    outcome = ShellCommand(_text("risky"), confirm=True).execute(runner)

    assert outcome.status == "declined"
    assert runner.commands == []


@pytest.mark.parametrize("response", ["yes", "y", "YES", "Y", "Yes", " yes "])
def test_gate_accepts_affirmative_responses(monkeypatch, response: str) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(response + "\n"))

    assert ConfirmationGate().confirm("git branch -d staging") == "git branch -d staging"


@pytest.mark.parametrize("response", ["", "no", "n", "yess", "sure"])
def test_gate_rejects_everything_else(monkeypatch, response: str) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(response + "\n"))

    assert ConfirmationGate().confirm("bundle update") is None


def test_gate_treats_end_of_input_as_declined(monkeypatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(""))

    assert ConfirmationGate().confirm("bundle update") is None


def test_enqueue_while_draining_is_rejected() -> None:
    queue = CommandQueue()

    def reentrant() -> str:
        queue.enqueue(_text("late"))
        return "first"

    queue.enqueue(reentrant)
    with pytest.raises(QueueReentryError):
        queue.drain_and_run(RecordingRunner())
    assert len(queue) == 0


def test_event_hook_reports_each_command() -> None:
    events: list[dict[str, Any]] = []
    queue = CommandQueue(event_hook=events.append)
    queue.enqueue(_text("a"))
    queue.enqueue(_text("b"))

    queue.drain_and_run(RecordingRunner())

    names = [event["event"] for event in events]
    assert names == [
        "command_start",
        "command_exit",
        "command_start",
        "command_exit",
        "queue_drained",
    ]


def test_highlight_wraps_text_in_color_codes() -> None:
    rendered = highlight("OK", Color.GREEN)

    assert rendered == "\x1b[92mOK\x1b[0m"
    assert highlight("x", Color.RED).startswith("\x1b[91m")
    assert highlight("x", Color.YELLOW).startswith("\x1b[93m")


def test_subprocess_runner_wraps_text_in_login_shell() -> None:
    runner = SubprocessRunner(executable="/bin/bash")

    assert runner.build_argv("git status && ls") == [
        "/bin/bash",
        "--login",
        "-c",
        "git status && ls",
    ]
    assert SubprocessRunner(login=False).build_argv("ls") == ["/bin/bash", "-c", "ls"]


def test_subprocess_runner_reports_exit_status(tmp_path) -> None:
    runner = SubprocessRunner(tmp_path, login=False)

    assert runner.run("true", quiet=True) == 0
    assert runner.run("exit 4", quiet=True) == 4


def test_subprocess_runner_missing_shell_is_hard_failure(tmp_path) -> None:
    runner = SubprocessRunner(tmp_path, executable=str(tmp_path / "no-such-shell"), login=False)

    assert runner.run("true", quiet=True) == 127


def test_signal_exit_status_is_non_negative() -> None:
    assert normalize_exit_status(-signal.SIGTERM) == 128 + signal.SIGTERM
    assert normalize_exit_status(2) == 2
