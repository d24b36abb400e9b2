from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from labdb_manager.commands.base import QueueReentryError, ShellCommand
from labdb_manager.commands.confirm import ConfirmationGate
from labdb_manager.commands.runner import CommandRunner

logger = logging.getLogger(__name__)

QueueEventHook = Callable[[dict[str, Any]], None]
RunStatus = Literal["success", "declined", "failed"]


@dataclass(frozen=True, slots=True)
class RunOutcome:
    status: RunStatus
    exit_code: int = 0
    command_text: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


class CommandQueue:
    """Ordered, append-only list of shell commands drained once, in order.

    A queue belongs to a single task invocation. Draining stops at the first
    declined confirmation or hard failure; the queue is empty afterwards
    either way.
    """

    def __init__(self, event_hook: QueueEventHook | None = None) -> None:
        self._commands: list[ShellCommand] = []
        self._draining = False
        self.event_hook = event_hook

    def _emit(self, event: dict[str, Any]) -> None:
        if self.event_hook is not None:
            self.event_hook(event)

    def __len__(self) -> int:
        return len(self._commands)

    def enqueue(
        self,
        render: Callable[..., str],
        *args: Any,
        requires_sudo: bool = False,
        exit_on_fail: bool = True,
        confirm: bool = False,
    ) -> ShellCommand:
        if self._draining:
            raise QueueReentryError("Cannot enqueue commands while the queue is draining.")
        command = ShellCommand(
            render,
            args=args,
            requires_sudo=requires_sudo,
            exit_on_fail=exit_on_fail,
            confirm=confirm,
        )
        self._commands.append(command)
        return command

    def drain_and_run(
        self,
        runner: CommandRunner,
        gate: ConfirmationGate | None = None,
    ) -> RunOutcome:
        if self._draining:
            raise QueueReentryError("Command queue is already draining.")
        self._draining = True
        logger.info("Running %d queued command(s)", len(self._commands))
        try:
            for index, command in enumerate(self._commands):
                self._emit({"event": "command_start", "index": index})
                outcome = command.execute(runner, gate)
                if not outcome.halts_queue:
                    self._emit(
                        {
                            "event": "command_exit",
                            "index": index,
                            "command": outcome.command_text,
                            "exit_code": outcome.exit_code,
                        }
                    )
                    continue
                if outcome.status == "declined":
                    self._emit(
                        {
                            "event": "command_declined",
                            "index": index,
                            "command": outcome.command_text,
                        }
                    )
                    return RunOutcome("declined", 0, outcome.command_text)
                self._emit(
                    {
                        "event": "command_failed",
                        "index": index,
                        "command": outcome.command_text,
                        "exit_code": outcome.exit_code,
                    }
                )
                return RunOutcome("failed", outcome.exit_code, outcome.command_text)
            logger.info("All %d queued command(s) succeeded", len(self._commands))
            self._emit({"event": "queue_drained", "count": len(self._commands)})
            return RunOutcome("success")
        finally:
            self._commands.clear()
            self._draining = False
