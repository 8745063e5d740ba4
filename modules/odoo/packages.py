"""System packages, global Node tools and the wkhtmltopdf PDF renderer."""

from __future__ import annotations

import config
from modules.settings import Settings
from modules.utils import log, status_warn


def apt_install(runner, packages: list[str]) -> None:
    runner.run_cmd(["apt-get", "install", "-y", *packages])


def install_system_packages(settings: Settings, runner) -> None:
    runner.run_cmd(["apt-get", "update", "-y"])
    runner.run_cmd(["apt-get", "upgrade", "-y"])
    apt_install(runner, config.BASE_PACKAGES)
    if settings.install_nginx:
        apt_install(runner, ["nginx"])
    runner.run_cmd(["npm", "install", "-g", *config.NPM_GLOBAL_PACKAGES])
    log("PASS: System packages installed")


def install_wkhtmltopdf(settings: Settings, runner) -> None:
    apt_install(runner, config.WKHTMLTOPDF_DEPS)
    log(f"Downloading wkhtmltopdf from {config.WKHTMLTOPDF_URL}")
    runner.run_cmd(["wget", "-q", "-O", config.WKHTMLTOPDF_DEB, config.WKHTMLTOPDF_URL])
    # dpkg may stop on missing deps; apt-get -f resolves them afterwards
    runner.run(["dpkg", "-i", config.WKHTMLTOPDF_DEB])
    runner.run_cmd(["apt-get", "-f", "install", "-y"])
    runner.run(["rm", "-f", config.WKHTMLTOPDF_DEB])
    for tool in ("wkhtmltopdf", "wkhtmltoimage"):
        runner.run_cmd(["ln", "-sf", f"/usr/local/bin/{tool}", f"/usr/bin/{tool}"])
    version = runner.run(["wkhtmltopdf", "--version"])
    if not version.ok:
        status_warn("wkhtmltopdf installation may have failed")
        return
    log(f"PASS: {version.stdout.strip()}")
