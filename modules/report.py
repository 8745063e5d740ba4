"""Final human-facing summary of a provisioning run."""

from __future__ import annotations

from modules.settings import Settings
from modules.stages import NOOP, OK, SKIPPED, RunReport

MASK = "********"


def build_summary(
    settings: Settings, report: RunReport | None = None, show_secret: bool = True
) -> list[tuple[str, str]]:
    rows = [
        ("Service control", f"sudo systemctl {{start|stop|restart|status}} {settings.config_name}"),
        ("Port", str(settings.http_port)),
        ("Longpolling", str(settings.longpolling_port)),
        ("Websocket route", "/websocket"),
        ("Config file", settings.config_file),
        ("Service unit", settings.service_file),
        ("Logfile", settings.logfile),
        ("Service logs", f"sudo journalctl -u {settings.config_name}"),
        ("PostgreSQL user", settings.user),
        ("Code location", settings.home_ext),
        ("Python venv", settings.venv),
    ]
    if settings.install_nginx:
        rows.append(("Nginx config", settings.nginx_site_file))
        rows.append(("Domain", f"http://{settings.website_name}"))
    if settings.install_nginx and settings.enable_ssl:
        rows.append(("SSL", f"https://{settings.website_name}"))
    if report is not None:
        failed = report.failed
        if failed is None:
            done = len(report.names(OK)) + len(report.names(NOOP))
            rows.append(("Stages", f"{done} done, {len(report.names(SKIPPED))} skipped"))
        else:
            rows.append(("Failed stage", f"{failed.name}: {failed.detail}"))
    rows.append(("Superadmin (DB) password", settings.superadmin if show_secret else MASK))
    return rows


def format_summary(rows: list[tuple[str, str]], ok: bool = True) -> str:
    width = max(len(label) for label, _ in rows) + 2
    rule = "-" * 59
    head = "Done! Odoo is installed and up & running." if ok else "Provisioning aborted."
    lines = [rule, f" {head}"]
    for label, value in rows:
        lines.append(f" {(label + ':').ljust(width)}{value}")
    lines.append(rule)
    return "\n".join(lines)


def print_summary(settings: Settings, report: RunReport | None = None, show_secret: bool = True) -> None:
    ok = report is None or report.ok
    print(format_summary(build_summary(settings, report, show_secret), ok=ok))
