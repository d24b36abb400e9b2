from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

from labdb_manager import __version__
from labdb_manager.commands import ConfirmationGate, SubprocessRunner
from labdb_manager.commands.runner import CommandRunner
from labdb_manager.config import ManagerConfig, load_config, save_config
from labdb_manager.settings_files import SettingsFileError
from labdb_manager.state import GitStaging
from labdb_manager.workflows import run_task


@dataclass(slots=True)
class Runtime:
    config_path: Path
    config: ManagerConfig
    runner: CommandRunner


def _resolve_config_path(config_value: str) -> Path:
    config_path = Path(config_value).expanduser()
    if not config_path.is_absolute():
        config_path = Path.cwd() / config_path
    return config_path.resolve()


def _build_runner(config: ManagerConfig) -> CommandRunner:
    return SubprocessRunner(
        config.paths.repo_root,
        executable=config.shell.executable,
        login=config.shell.login,
    )


def _load_runtime(config_value: str) -> Runtime:
    config_path = _resolve_config_path(config_value)
    config = load_config(config_path)
    return Runtime(config_path=config_path, config=config, runner=_build_runner(config))


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _run(ctx: click.Context, task_name: str, *args: Any) -> None:
    runtime = _load_runtime(ctx.obj["config"])
    try:
        outcome = run_task(
            task_name,
            args,
            config=runtime.config,
            runner=runtime.runner,
            gate=ConfirmationGate(),
        )
    except SettingsFileError as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.exit(outcome.exit_code)


@click.group()
@click.version_option(version=__version__, prog_name="labdb-manager")
@click.option("--config", "config_value", default="labdb.toml", show_default=True)
@click.option("--verbose", is_flag=True, default=False)
@click.pass_context
def cli(ctx: click.Context, config_value: str, verbose: bool) -> None:
    """Deploy and maintain a labdb installation."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config_value


@cli.command("init")
@click.pass_context
def init_command(ctx: click.Context) -> None:
    """Write the configuration file with current values."""
    runtime = _load_runtime(ctx.obj["config"])
    save_config(runtime.config_path, runtime.config)
    click.echo(f"Config: {runtime.config_path}")
    click.echo(f"Repository: {runtime.config.paths.repo_root}")
    click.echo(f"Upstream: {runtime.config.git.project_url}")


@cli.command("status")
@click.pass_context
def status_command(ctx: click.Context) -> None:
    """Show the state of the deploy staging branch."""
    runtime = _load_runtime(ctx.obj["config"])
    state = GitStaging(runtime.config.git).current_state(runtime.runner)
    click.echo(f"Staging: {state.value}")


@cli.command("update")
@click.pass_context
def update_command(ctx: click.Context) -> None:
    """Back up, merge remote changes through staging and restart."""
    _run(ctx, "update")


@cli.command("backup")
@click.pass_context
def backup_command(ctx: click.Context) -> None:
    """Dump and compress the database."""
    _run(ctx, "backup")


@cli.command("force-update-deps")
@click.pass_context
def force_update_deps_command(ctx: click.Context) -> None:
    """Run bundle update after confirmation."""
    _run(ctx, "force_update_deps")


@cli.command("secret")
@click.pass_context
def secret_command(ctx: click.Context) -> None:
    """Generate a new application secret."""
    _run(ctx, "secret")


@cli.command("hostname")
@click.argument("hostname", required=False)
@click.pass_context
def hostname_command(ctx: click.Context, hostname: str | None) -> None:
    """Record the full hostname of the machine."""
    _run(ctx, "hostname", hostname)


@cli.command("install")
@click.pass_context
def install_command(ctx: click.Context) -> None:
    """Create the production database."""
    _run(ctx, "install")


@cli.command("revert-failure")
@click.pass_context
def revert_failure_command(ctx: click.Context) -> None:
    """Abort a conflicted staging merge and return to production."""
    _run(ctx, "revert_failure")


@cli.command("restart")
@click.pass_context
def restart_command(ctx: click.Context) -> None:
    """Restart the application server."""
    _run(ctx, "restart")


@cli.command("devserver")
@click.pass_context
def devserver_command(ctx: click.Context) -> None:
    """Run the development server."""
    _run(ctx, "devserver")
