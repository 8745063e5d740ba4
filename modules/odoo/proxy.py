"""Create the nginx site for Odoo, open the firewall and request TLS.

SRP: nginx config files and nginx service ops, plus the ufw and certbot
steps that only make sense in front of it.
"""

from __future__ import annotations

from pathlib import Path

import config
from modules.settings import Settings
from modules.templates import render_nginx_site
from modules.utils import log


def write_site(settings: Settings, runner) -> Path:
    conf_path = runner.write_file(
        Path(settings.nginx_site_file), render_nginx_site(settings), config.SITE_FILE_PERMS
    )
    log(f"PASS: Created nginx config for {settings.website_name}")
    return conf_path


def enable_site(settings: Settings, runner, conf_path: Path) -> None:
    enabled = Path(settings.nginx_enabled_dir)
    runner.run_cmd(["mkdir", "-p", str(enabled)])
    runner.run_cmd(["ln", "-sf", str(conf_path), str(enabled / settings.website_name)])
    default = enabled / "default"
    if settings.website_name != "default":
        runner.run_cmd(["rm", "-f", str(default)])


def test_config(runner) -> None:
    runner.run_cmd(["nginx", "-t"])


def reload_nginx(runner) -> None:
    runner.run_cmd(["systemctl", "reload", "nginx"])


def configure_nginx(settings: Settings, runner) -> None:
    conf_path = write_site(settings, runner)
    enable_site(settings, runner, conf_path)
    test_config(runner)
    reload_nginx(runner)


def configure_firewall(settings: Settings, runner) -> None:
    for port in config.FIREWALL_PORTS:
        runner.run_cmd(["ufw", "allow", port])
    runner.run_cmd(["ufw", "reload"])
    status = runner.run(["ufw", "status", "verbose"])
    log(status.output.strip())


def _snapd_installed(runner) -> bool:
    return runner.run(["dpkg", "-s", "snapd"]).ok


def request_certificate(settings: Settings, runner) -> None:
    if not _snapd_installed(runner):
        runner.run_cmd(["apt-get", "update", "-y"])
        runner.run_cmd(["apt-get", "install", "-y", "snapd"])
    runner.run_cmd(["snap", "install", "core"])
    runner.run_cmd(["snap", "refresh", "core"])
    runner.run_cmd(["snap", "install", "--classic", "certbot"])
    runner.run_cmd(["ln", "-sf", "/snap/bin/certbot", "/usr/bin/certbot"])
    runner.run_cmd([
        "certbot", "--nginx", "-d", settings.website_name, "--non-interactive",
        "--agree-tos", "--email", settings.admin_email, "--redirect",
    ])
    reload_nginx(runner)
    runner.run_cmd(["systemctl", "enable", "--now", "certbot.timer"])
    log(f"PASS: Certificate issued for {settings.website_name}")
