from __future__ import annotations

import click

from labdb_manager.console import confirmation_prompt

AFFIRMATIVE_RESPONSES = frozenset({"yes", "y"})


class ConfirmationGate:
    """Asks the operator before a command runs.

    ``confirm`` returns the command text unchanged when the operator answers
    ``yes``/``y`` (any case) and ``None`` otherwise; the caller is expected to
    abort the whole run with exit status 0 on ``None``.
    """

    def read_response(self, command_text: str) -> str:
        try:
            return click.prompt(
                confirmation_prompt(command_text),
                default="",
                show_default=False,
                prompt_suffix="\n",
            )
        except click.Abort:
            return ""

    def confirm(self, command_text: str) -> str | None:
        response = self.read_response(command_text)
        if response.strip().lower() in AFFIRMATIVE_RESPONSES:
            return command_text
        return None
