from labdb_manager.commands.base import (
    CommandOutcome,
    LabdbManagerError,
    QueueReentryError,
    ShellCommand,
    UnknownTaskError,
)
from labdb_manager.commands.confirm import ConfirmationGate
from labdb_manager.commands.queue import CommandQueue, RunOutcome
from labdb_manager.commands.runner import CommandRunner, SubprocessRunner

__all__ = [
    "CommandOutcome",
    "CommandQueue",
    "CommandRunner",
    "ConfirmationGate",
    "LabdbManagerError",
    "QueueReentryError",
    "RunOutcome",
    "ShellCommand",
    "SubprocessRunner",
    "UnknownTaskError",
]
