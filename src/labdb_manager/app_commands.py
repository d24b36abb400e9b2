from __future__ import annotations

import shlex
import shutil
from datetime import datetime
from pathlib import Path

from labdb_manager.config import DatabaseConfig, ManagerConfig, PathsConfig, ServerConfig

BACKUP_SUFFIX = "_labdb_backup.dump"
BACKUP_TIME_FORMAT = "%Y%m%d_%H%M%S"


def backup_filename(now: datetime) -> str:
    return now.strftime(BACKUP_TIME_FORMAT) + BACKUP_SUFFIX


def resolve_pg_dump(executable: str) -> str:
    if Path(executable).is_absolute():
        return executable
    return shutil.which(executable) or executable


class ApplicationCommands:
    """Command text for the application, database and server steps."""

    def __init__(self, config: ManagerConfig) -> None:
        self.paths: PathsConfig = config.paths
        self.database: DatabaseConfig = config.database
        self.server: ServerConfig = config.server

    def bundle_install(self) -> str:
        return "bundle install"

    def bundle_update(self) -> str:
        # Must run through the confirmation gate.
        return "bundle update"

    def precompile_assets(self) -> str:
        return "bundle exec rake assets:precompile"

    def create_production_db(self) -> str:
        return "RAILS_ENV=production bundle exec rake db:setup"

    def create_backup(self, now: datetime | None = None) -> str:
        """Dump the database, compress the dump and remove the uncompressed file.

        Each step is chained with ``&&`` so a failed dump never leaves an
        archive behind for later steps, and the plain dump is only removed
        once the archive has been written.
        """
        filename = backup_filename(now or datetime.now())
        backup_dir = self.paths.backup_root
        dump_path = backup_dir / filename
        return " ".join(
            [
                shlex.quote(resolve_pg_dump(self.database.pg_dump)),
                f"-h {shlex.quote(self.database.host)} {shlex.quote(self.database.name)}",
                f"> {shlex.quote(str(dump_path))}",
                "&&",
                f"tar cjf {shlex.quote(str(dump_path))}.tar.bz2",
                f"-C {shlex.quote(str(backup_dir))} {shlex.quote(filename)}",
                "&&",
                f"rm -f {shlex.quote(str(dump_path))}",
            ]
        )

    def restart_server(self) -> str:
        return f"supervisorctl restart {self.server.supervisor_program}"

    def run_devserver(self) -> str:
        return self.server.devserver_command
