from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from labdb_manager.console import print_command, print_failure

if TYPE_CHECKING:
    from labdb_manager.commands.confirm import ConfirmationGate
    from labdb_manager.commands.runner import CommandRunner

logger = logging.getLogger(__name__)

CommandStatus = Literal["success", "soft_failure", "declined", "failed"]


class LabdbManagerError(RuntimeError):
    """Base class for errors raised by the deployment manager."""


class QueueReentryError(LabdbManagerError):
    """Raised when the command queue is modified or drained while draining."""


class UnknownTaskError(LookupError):
    """Raised when a task name does not match any workflow."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown task: {name}")
        self.name = name


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    status: CommandStatus
    exit_code: int
    command_text: str

    @property
    def halts_queue(self) -> bool:
        return self.status in {"declined", "failed"}


@dataclass(frozen=True, slots=True)
class ShellCommand:
    """A deferred shell invocation that runs inside a login shell.

    ``render`` produces the command text from ``args``; it is called at
    execution time so that values such as timestamps are taken when the
    command actually runs. ``requires_sudo`` is informational only.
    """

    render: Callable[..., str]
    args: tuple[Any, ...] = ()
    requires_sudo: bool = False
    exit_on_fail: bool = True
    confirm: bool = False
    quiet: bool = False
    kind: Literal["shell"] = field(default="shell", init=False)

    def command_text(self) -> str:
        return self.render(*self.args)

    def execute(
        self,
        runner: CommandRunner,
        gate: ConfirmationGate | None = None,
    ) -> CommandOutcome:
        command_text = self.command_text()
        logger.debug("Rendered command: %s", command_text)
        if self.confirm:
            if gate is None or gate.confirm(command_text) is None:
                logger.info("Operator declined: %s", command_text)
                return CommandOutcome("declined", 0, command_text)

        if not self.quiet:
            print_command(command_text)
        exit_code = runner.run(command_text, quiet=self.quiet)
        logger.debug("Command exited with status %d: %s", exit_code, command_text)

        if exit_code > 0 and self.exit_on_fail:
            print_failure(command_text)
            return CommandOutcome("failed", exit_code, command_text)
        if exit_code > 0:
            return CommandOutcome("soft_failure", exit_code, command_text)
        return CommandOutcome("success", 0, command_text)

    def __str__(self) -> str:
        try:
            return self.render()
        except TypeError:
            name = getattr(self.render, "__name__", "command")
            return f"{name}{self.args!r}"
