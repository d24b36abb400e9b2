from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class GitConfig:
    staging_branch: str = "deploy_staging"
    production_branch: str = "deploy"
    remote_branch: str = "master"
    remote_name: str = "origin"
    merge_message: str = "auto merge by manage.py"
    project_url: str = "https://github.com/cjfuller/labdb.git"


@dataclass(slots=True)
class PathsConfig:
    repo_path: str = "~/labdb"
    backup_dir: str = "~/backups"
    hostname_file: str = "config/full_hostname.txt"
    secret_file: str = "config/secret_token.txt"

    @property
    def repo_root(self) -> Path:
        return Path(self.repo_path).expanduser()

    @property
    def backup_root(self) -> Path:
        return Path(self.backup_dir).expanduser()

    def resolve(self, value: str) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.repo_root / path
        return path


@dataclass(slots=True)
class DatabaseConfig:
    name: str = "labdb"
    host: str = "localhost"
    pg_dump: str = "pg_dump"


@dataclass(slots=True)
class ServerConfig:
    supervisor_program: str = "labdb"
    devserver_command: str = "bundle exec puma --config config/puma.rb"


@dataclass(slots=True)
class ShellConfig:
    executable: str = "/bin/bash"
    login: bool = True


@dataclass(slots=True)
class ManagerConfig:
    git: GitConfig = field(default_factory=GitConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)

    @classmethod
    def default(cls) -> ManagerConfig:
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> ManagerConfig:
        return cls(
            git=GitConfig(**data.get("git", {})),
            paths=PathsConfig(**data.get("paths", {})),
            database=DatabaseConfig(**data.get("database", {})),
            server=ServerConfig(**data.get("server", {})),
            shell=ShellConfig(**data.get("shell", {})),
        )

    def to_dict(self) -> dict:
        return {
            "git": {
                "staging_branch": self.git.staging_branch,
                "production_branch": self.git.production_branch,
                "remote_branch": self.git.remote_branch,
                "remote_name": self.git.remote_name,
                "merge_message": self.git.merge_message,
                "project_url": self.git.project_url,
            },
            "paths": {
                "repo_path": self.paths.repo_path,
                "backup_dir": self.paths.backup_dir,
                "hostname_file": self.paths.hostname_file,
                "secret_file": self.paths.secret_file,
            },
            "database": {
                "name": self.database.name,
                "host": self.database.host,
                "pg_dump": self.database.pg_dump,
            },
            "server": {
                "supervisor_program": self.server.supervisor_program,
                "devserver_command": self.server.devserver_command,
            },
            "shell": {
                "executable": self.shell.executable,
                "login": self.shell.login,
            },
        }


def _toml_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return json.dumps(str(value), ensure_ascii=False)


def dumps_toml(config: ManagerConfig) -> str:
    data = config.to_dict()
    lines: list[str] = []
    section_order = ["git", "paths", "database", "server", "shell"]
    for section in section_order:
        lines.append(f"[{section}]")
        for key, value in data[section].items():
            lines.append(f"{key} = {_toml_value(value)}")
        lines.append("")
    return "\n".join(lines).strip() + "\n"


def load_config(path: Path) -> ManagerConfig:
    if not path.exists():
        return ManagerConfig.default()
    return ManagerConfig.from_dict(tomllib.loads(path.read_text(encoding="utf-8")))


def save_config(path: Path, config: ManagerConfig) -> None:
    path.write_text(dumps_toml(config), encoding="utf-8")
