from __future__ import annotations

import logging
import signal
import subprocess
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

COMMAND_NOT_RUNNABLE = 127


class CommandRunner(Protocol):
    def run(self, command_text: str, *, quiet: bool = False) -> int: ...


def normalize_exit_status(returncode: int) -> int:
    """Map a ``subprocess`` return code onto a non-negative shell status."""
    if returncode < 0:
        return 128 + abs(returncode)
    return returncode


class SubprocessRunner:
    """Runs command text through a (login) shell in the repository directory."""

    def __init__(
        self,
        cwd: Path | None = None,
        *,
        executable: str = "/bin/bash",
        login: bool = True,
    ) -> None:
        self.cwd = cwd
        self.executable = executable
        self.login = login

    def build_argv(self, command_text: str) -> list[str]:
        argv = [self.executable]
        if self.login:
            argv.append("--login")
        argv.extend(["-c", command_text])
        return argv

    def run(self, command_text: str, *, quiet: bool = False) -> int:
        argv = self.build_argv(command_text)
        try:
            proc = subprocess.run(
                argv,
                cwd=self.cwd,
                text=True,
                capture_output=quiet,
            )
        except OSError as exc:
            logger.error("Could not start %s: %s", argv[0], exc)
            return COMMAND_NOT_RUNNABLE
        if proc.returncode < 0:
            try:
                name = signal.Signals(-proc.returncode).name
            except ValueError:
                name = str(-proc.returncode)
            logger.warning("Command terminated by %s: %s", name, command_text)
        return normalize_exit_status(proc.returncode)
