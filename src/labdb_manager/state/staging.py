from __future__ import annotations

import shlex
from collections.abc import Callable
from enum import Enum

from labdb_manager.commands.base import ShellCommand
from labdb_manager.commands.runner import CommandRunner
from labdb_manager.config import GitConfig


class StagingState(Enum):
    NO_STAGING = "no_staging"
    STAGING = "staging"
    REVERTING = "reverting"


class GitStaging:
    """Git operations that promote remote changes through a staging branch.

    The staging branch is a disposable merge buffer: remote changes are merged
    into it first so that a conflicted merge never touches the production
    branch. Branch state is never cached; it is probed from the repository on
    demand.

    Each operation returns the command text to run. None of them check the
    current state; the workflows sequence them.
    """

    def __init__(self, config: GitConfig) -> None:
        self.config = config

    @property
    def _merge_message(self) -> str:
        return shlex.quote(self.config.merge_message)

    def check_for_staging_branch(self) -> str:
        """Exit status 0 when the staging branch exists."""
        return f"git show-ref --verify --quiet refs/heads/{self.config.staging_branch}"

    def check_for_merge_in_progress(self) -> str:
        return "git rev-parse -q --verify MERGE_HEAD"

    def clean_up_staging_branch(self) -> str:
        # Must run through the confirmation gate.
        return (
            f"git checkout {self.config.production_branch} && "
            f"git branch -d {self.config.staging_branch}"
        )

    def create_staging_branch(self) -> str:
        return (
            f"git checkout {self.config.production_branch} && "
            f"git branch {self.config.staging_branch}"
        )

    def fetch_remote_changes(self) -> str:
        return (
            f"git checkout {self.config.remote_branch} && "
            f"git pull {self.config.remote_name} {self.config.remote_branch}"
        )

    def stage_changes(self) -> str:
        """Merge the downloaded branch into staging.

        This is where merge conflicts surface. The production branch is still
        untouched at that point; ``revert_merge_failure`` resets the merge and
        checks production out again.
        """
        return (
            f"git checkout {self.config.staging_branch} && "
            f"git merge -m {self._merge_message} {self.config.remote_branch}"
        )

    def merge_into_production(self) -> str:
        return (
            f"git checkout {self.config.production_branch} && "
            f"git merge -m {self._merge_message} {self.config.staging_branch}"
        )

    def revert_merge_failure(self) -> str:
        return f"git reset --merge && git checkout {self.config.production_branch}"

    def _probe(self, runner: CommandRunner, render: Callable[[], str]) -> bool:
        probe = ShellCommand(render, exit_on_fail=False, quiet=True)
        return probe.execute(runner).exit_code == 0

    def staging_exists(self, runner: CommandRunner) -> bool:
        return self._probe(runner, self.check_for_staging_branch)

    def current_state(self, runner: CommandRunner) -> StagingState:
        if self._probe(runner, self.check_for_merge_in_progress):
            return StagingState.REVERTING
        if self.staging_exists(runner):
            return StagingState.STAGING
        return StagingState.NO_STAGING
