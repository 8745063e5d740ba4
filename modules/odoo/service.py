"""Odoo config file, systemd unit and service control."""

from __future__ import annotations

from pathlib import Path

import config
from modules.settings import Settings
from modules.templates import render_odoo_conf, render_service_unit
from modules.utils import log


def write_odoo_config(settings: Settings, runner) -> Path:
    if not settings.enterprise:
        runner.run_cmd(["sudo", "-u", settings.user, "mkdir", "-p", settings.custom_addons])
    path = runner.write_file(
        Path(settings.config_file), render_odoo_conf(settings), config.CONFIG_FILE_PERMS
    )
    runner.run_cmd(["chown", f"{settings.user}:{settings.user}", str(path)])
    log(f"PASS: Wrote {path}")
    return path


def write_service_unit(settings: Settings, runner) -> Path:
    path = runner.write_file(
        Path(settings.service_file), render_service_unit(settings), config.UNIT_FILE_PERMS
    )
    runner.run_cmd(["chown", "root:", str(path)])
    runner.run_cmd(["systemctl", "daemon-reload"])
    runner.run_cmd(["systemctl", "enable", settings.service_name])
    log(f"PASS: Wrote and enabled {path}")
    return path


def start_service(settings: Settings, runner) -> None:
    runner.run_cmd(["systemctl", "start", settings.service_name])
    status = runner.run(["systemctl", "status", settings.service_name, "--no-pager"])
    log(status.output.strip())
