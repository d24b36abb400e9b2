from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

import click

from labdb_manager.app_commands import ApplicationCommands
from labdb_manager.commands.base import UnknownTaskError
from labdb_manager.commands.confirm import ConfirmationGate
from labdb_manager.commands.queue import CommandQueue, QueueEventHook, RunOutcome
from labdb_manager.commands.runner import CommandRunner
from labdb_manager.config import ManagerConfig
from labdb_manager.console import print_ok
from labdb_manager.settings_files import generate_application_secret, write_hostname
from labdb_manager.state.staging import GitStaging

logger = logging.getLogger(__name__)

TASK_NAMES = (
    "update",
    "backup",
    "force_update_deps",
    "secret",
    "hostname",
    "install",
    "revert_failure",
    "restart",
    "devserver",
)

HOSTNAME_PROMPT = (
    "Please enter the full hostname of the machine.\n"
    "(i.e. the part that would appear including the https:// "
    "in a url but before any other slashes)"
)


class Workflows:
    """Named tasks that fill a command queue in a fixed order."""

    def __init__(self, config: ManagerConfig, queue: CommandQueue, runner: CommandRunner) -> None:
        self.config = config
        self.queue = queue
        self.runner = runner
        self.git = GitStaging(config.git)
        self.app = ApplicationCommands(config)

    def task(self, name: str) -> Callable[..., Any]:
        if name not in TASK_NAMES:
            raise UnknownTaskError(name)
        return getattr(self, name)

    def update(self) -> None:
        self.queue.enqueue(self.app.create_backup)
        # Probed now, not queued: a stale staging branch from an earlier run
        # has to go before a fresh one is created.
        if self.git.staging_exists(self.runner):
            logger.info("Found existing %s branch", self.config.git.staging_branch)
            self.queue.enqueue(self.git.clean_up_staging_branch, confirm=True)
        self.queue.enqueue(self.git.create_staging_branch)
        self.queue.enqueue(self.git.fetch_remote_changes)
        self.queue.enqueue(self.git.stage_changes)
        self.queue.enqueue(self.app.bundle_install)
        self.queue.enqueue(self.app.precompile_assets)
        self.queue.enqueue(self.git.merge_into_production)
        self.queue.enqueue(self.app.restart_server, requires_sudo=True)

    def backup(self) -> None:
        self.queue.enqueue(self.app.create_backup)

    def force_update_deps(self) -> None:
        self.queue.enqueue(self.app.bundle_update, confirm=True)

    def secret(self) -> None:
        path = generate_application_secret(self.config.paths.resolve(self.config.paths.secret_file))
        logger.info("Wrote application secret to %s", path)

    def hostname(self, hostname: str | None = None) -> None:
        if hostname is None:
            hostname = click.prompt(HOSTNAME_PROMPT)
        path = write_hostname(self.config.paths.resolve(self.config.paths.hostname_file), hostname)
        logger.info("Wrote hostname to %s", path)

    def install(self) -> None:
        self.queue.enqueue(self.app.create_production_db)

    def revert_failure(self) -> None:
        self.queue.enqueue(self.git.revert_merge_failure)

    def restart(self) -> None:
        self.queue.enqueue(self.app.restart_server, requires_sudo=True)

    def devserver(self) -> None:
        self.queue.enqueue(self.app.run_devserver)


def run_task(
    name: str,
    args: Sequence[Any] = (),
    *,
    config: ManagerConfig,
    runner: CommandRunner,
    gate: ConfirmationGate | None = None,
    event_hook: QueueEventHook | None = None,
) -> RunOutcome:
    """Run one task to completion and report how it ended.

    The queue lives only for this call. ``OK`` is printed when every queued
    command succeeded; the caller turns the outcome into a process exit.
    """
    queue = CommandQueue(event_hook=event_hook)
    workflows = Workflows(config, queue, runner)
    workflows.task(name)(*args)
    outcome = queue.drain_and_run(runner, gate or ConfirmationGate())
    if outcome.ok:
        print_ok()
    return outcome
