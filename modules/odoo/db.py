"""PostgreSQL helpers used by the Odoo installer."""

from __future__ import annotations

import subprocess

import config
from modules.settings import Settings
from modules.odoo.packages import apt_install
from modules.utils import log


def _add_pgdg_repo(runner) -> None:
    key = runner.run_cmd(["curl", "-fsSL", config.PGDG_KEY_URL])
    runner.run_cmd(
        ["gpg", "--batch", "--yes", "--dearmor", "-o", config.PGDG_KEYRING],
        input=key.stdout,
    )
    codename = runner.run_cmd(["lsb_release", "-cs"]).stdout.strip()
    entry = f"deb {config.PGDG_APT_URL} {codename}-pgdg main\n"
    runner.run_cmd(["tee", config.PGDG_SOURCES_LIST], input=entry)
    runner.run_cmd(["apt-get", "update", "-y"])


def install_postgresql(settings: Settings, runner) -> None:
    if settings.postgresql_16:
        log("Installing PostgreSQL 16 from the official repository")
        _add_pgdg_repo(runner)
        apt_install(runner, ["postgresql-16"])
        return
    log("Installing default PostgreSQL from the distribution repository")
    apt_install(runner, ["postgresql", "postgresql-server-dev-all"])


def create_db_role(settings: Settings, runner) -> None:
    runner.run_cmd(["sudo", "-u", "postgres", "createuser", "-s", settings.user])
    log(f"PASS: Created PostgreSQL role {settings.user}")


def role_already_exists(err: Exception) -> bool:
    if not isinstance(err, subprocess.CalledProcessError):
        return False
    return "already exists" in (err.stderr or "")
