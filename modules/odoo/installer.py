"""Ordered stage table for an Odoo install and the top-level orchestration."""

from __future__ import annotations

import functools

from modules.retry import prompt_credentials
from modules.settings import Settings
from modules.stages import RunReport, Stage, run_stages
from modules.utils import log
from .db import create_db_role, install_postgresql, role_already_exists
from .packages import install_system_packages, install_wkhtmltopdf
from .proxy import configure_firewall, configure_nginx, request_certificate
from .service import start_service, write_odoo_config, write_service_unit
from .source import build_virtualenv, clone_source, create_system_user, install_enterprise


def _enterprise(settings: Settings) -> bool:
    return settings.enterprise


def _nginx(settings: Settings) -> bool:
    return settings.install_nginx


def _certificate(settings: Settings) -> bool:
    return settings.wants_certificate


def build_stages(prompt=prompt_credentials) -> list[Stage]:
    """Every stage in execution order; predicates decide what actually runs."""
    return [
        Stage("packages", install_system_packages),
        Stage("postgresql", install_postgresql),
        Stage("postgresql-role", create_db_role, benign=role_already_exists),
        Stage("wkhtmltopdf", install_wkhtmltopdf),
        Stage("system-user", create_system_user),
        Stage("odoo-source", clone_source),
        Stage("virtualenv", build_virtualenv),
        Stage("enterprise", functools.partial(install_enterprise, prompt=prompt), _enterprise),
        Stage("odoo-config", write_odoo_config),
        Stage("systemd-unit", write_service_unit),
        Stage("nginx", configure_nginx, _nginx),
        Stage("firewall", configure_firewall, requires_tool="ufw"),
        Stage("certbot", request_certificate, _certificate),
        Stage("start-service", start_service),
    ]


def stage_names() -> list[str]:
    return [stage.name for stage in build_stages()]


def find_stage(name: str) -> Stage | None:
    for stage in build_stages():
        if stage.name == name:
            return stage
    return None


def provision(settings: Settings, runner, prompt=prompt_credentials) -> RunReport:
    log(
        f"PROVISION START user={settings.user} version={settings.version} "
        f"enterprise={settings.enterprise} nginx={settings.install_nginx} "
        f"ssl={settings.enable_ssl} domain={settings.website_name}"
    )
    report = run_stages(settings, build_stages(prompt), runner)
    log(f"PROVISION END ok={report.ok}")
    return report
