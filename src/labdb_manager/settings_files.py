from __future__ import annotations

import os
import secrets
from pathlib import Path

from labdb_manager.commands.base import LabdbManagerError

SECRET_BYTES = 64


class SettingsFileError(LabdbManagerError):
    """Raised when an application settings file cannot be written."""


def write_hostname(path: Path, hostname: str) -> Path:
    value = hostname.strip()
    if not value:
        raise SettingsFileError("Hostname must not be empty.")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(value, encoding="utf-8")
    except OSError as exc:
        raise SettingsFileError(f"Could not write hostname file {path}: {exc}") from exc
    return path


def generate_application_secret(path: Path) -> Path:
    """Write a fresh 512-bit hex secret readable only by its owner."""
    secret = secrets.token_hex(SECRET_BYTES)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(secret)
        os.chmod(path, 0o600)
    except OSError as exc:
        raise SettingsFileError(f"Could not write secret file {path}: {exc}") from exc
    return path
