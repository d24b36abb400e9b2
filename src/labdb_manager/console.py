"""Operator-facing console output."""

from __future__ import annotations

from enum import Enum

import click

COMMAND_PREFIX = "--> "
CONFIRM_PREFIX = "--? "


class Color(Enum):
    GREEN = "bright_green"
    YELLOW = "bright_yellow"
    RED = "bright_red"


def highlight(text: str, color: Color) -> str:
    return click.style(text, fg=color.value)


def print_command(command_text: str) -> None:
    click.echo(highlight(COMMAND_PREFIX + command_text, Color.GREEN))


def confirmation_prompt(command_text: str) -> str:
    return highlight(CONFIRM_PREFIX + command_text, Color.YELLOW)


def print_failure(command_text: str) -> None:
    click.echo(
        highlight(
            f"Encountered an unresolvable error while running {command_text}.  "
            "Please resolve the problem manually and re-run",
            Color.RED,
        )
    )


def print_ok() -> None:
    click.echo(highlight("OK", Color.GREEN))
