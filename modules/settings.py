"""Resolve the immutable provisioning settings.

Sources, lowest to highest precedence: defaults from config.py, ODOO_*
environment variables, explicit overrides (CLI --set KEY=VALUE).
Validation happens here so a bad value aborts before any stage runs.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Callable, Mapping

import config
from modules.templates import generate_secret


class SettingsError(ValueError):
    """A configuration value is structurally invalid."""


USER_RE = re.compile(r"^[a-z_][a-z0-9_-]{0,31}$")
LABEL = r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
HOSTNAME_RE = re.compile(rf"^(?=.{{1,253}}$){LABEL}(?:\.{LABEL})*$")
CATCH_ALL_SERVER = "_"
TRUE_WORDS = {"1", "true", "yes", "on"}
FALSE_WORDS = {"0", "false", "no", "off"}

DEFAULTS: dict[str, object] = {
    "user": config.DEFAULT_USER,
    "http_port": config.DEFAULT_HTTP_PORT,
    "longpolling_port": config.DEFAULT_LONGPOLLING_PORT,
    "version": config.DEFAULT_VERSION,
    "enterprise": config.DEFAULT_ENTERPRISE,
    "install_nginx": config.DEFAULT_INSTALL_NGINX,
    "enable_ssl": config.DEFAULT_ENABLE_SSL,
    "admin_email": config.DEFAULT_ADMIN_EMAIL,
    "website_name": config.DEFAULT_WEBSITE_NAME,
    "superadmin": config.DEFAULT_SUPERADMIN,
    "generate_password": config.DEFAULT_GENERATE_PASSWORD,
    "postgresql_16": config.DEFAULT_POSTGRESQL_16,
    "auth_attempts": config.DEFAULT_AUTH_ATTEMPTS,
    "command_timeout": config.DEFAULT_COMMAND_TIMEOUT,
    "etc_dir": config.ETC_DIR,
    "var_log_dir": config.VAR_LOG_DIR,
}
BOOL_KEYS = {"enterprise", "install_nginx", "enable_ssl", "generate_password", "postgresql_16"}
INT_KEYS = {"http_port", "longpolling_port", "auth_attempts", "command_timeout"}


@dataclass(frozen=True)
class Settings:
    user: str
    http_port: int
    longpolling_port: int
    version: str
    enterprise: bool
    install_nginx: bool
    enable_ssl: bool
    admin_email: str
    website_name: str
    superadmin: str
    generate_password: bool
    postgresql_16: bool = config.DEFAULT_POSTGRESQL_16
    auth_attempts: int = config.DEFAULT_AUTH_ATTEMPTS
    command_timeout: int = config.DEFAULT_COMMAND_TIMEOUT
    etc_dir: str = config.ETC_DIR
    var_log_dir: str = config.VAR_LOG_DIR

    # ── derived paths ──
    @property
    def home(self) -> str:
        return f"/{self.user}"

    @property
    def home_ext(self) -> str:
        return f"{self.home}/{self.user}-server"

    @property
    def venv(self) -> str:
        return f"{self.home}/venv"

    @property
    def config_name(self) -> str:
        return f"{self.user}-server"

    @property
    def config_file(self) -> str:
        return f"{self.etc_dir}/{self.config_name}.conf"

    @property
    def service_name(self) -> str:
        return f"{self.config_name}.service"

    @property
    def service_file(self) -> str:
        return f"{self.etc_dir}/systemd/system/{self.service_name}"

    @property
    def nginx_site_file(self) -> str:
        return f"{self.etc_dir}/nginx/sites-available/{self.website_name}"

    @property
    def nginx_enabled_dir(self) -> str:
        return f"{self.etc_dir}/nginx/sites-enabled"

    @property
    def log_dir(self) -> str:
        return f"{self.var_log_dir}/{self.user}"

    @property
    def logfile(self) -> str:
        return f"{self.log_dir}/{self.config_name}.log"

    @property
    def enterprise_addons(self) -> str:
        return f"{self.home}/enterprise/addons"

    @property
    def custom_addons(self) -> str:
        return f"{self.home}/custom/addons"

    @property
    def addons_path(self) -> str:
        if self.enterprise:
            return f"{self.enterprise_addons},{self.home_ext}/addons"
        return f"{self.home_ext}/addons,{self.custom_addons}"

    @property
    def wants_certificate(self) -> bool:
        return (
            self.install_nginx
            and self.enable_ssl
            and self.admin_email != config.DEFAULT_ADMIN_EMAIL
            and self.website_name != CATCH_ALL_SERVER
        )


def _to_bool(key: str, value: object) -> bool:
    if isinstance(value, bool):
        return value
    word = str(value).strip().lower()
    if word in TRUE_WORDS:
        return True
    if word in FALSE_WORDS:
        return False
    raise SettingsError(f"{key}: expected a boolean, got {value!r}")


def _to_int(key: str, value: object) -> int:
    if isinstance(value, bool):
        raise SettingsError(f"{key}: expected an integer, got {value!r}")
    try:
        return int(str(value).strip())
    except ValueError:
        raise SettingsError(f"{key}: expected an integer, got {value!r}") from None


def _from_environ(environ: Mapping[str, str]) -> dict[str, str]:
    found = {}
    for key in DEFAULTS:
        env_key = f"{config.ENV_PREFIX}{key.upper()}"
        if env_key in environ:
            found[key] = environ[env_key]
    return found


def _validate(s: Settings) -> None:
    for key in ("http_port", "longpolling_port"):
        port = getattr(s, key)
        if not 1 <= port <= 65535:
            raise SettingsError(f"{key}: {port} is outside 1-65535")
    if s.http_port == s.longpolling_port:
        raise SettingsError("http_port and longpolling_port must differ")
    if not s.user:
        raise SettingsError("user: must not be empty")
    if not USER_RE.match(s.user):
        raise SettingsError(f"user: {s.user!r} is not a valid account name")
    if s.website_name != CATCH_ALL_SERVER and not HOSTNAME_RE.match(s.website_name):
        raise SettingsError(f"website_name: {s.website_name!r} is not a hostname like 'example.com'")
    if not s.version or any(c.isspace() for c in s.version):
        raise SettingsError(f"version: {s.version!r} must be non-empty without whitespace")
    if any(c.isspace() for c in s.admin_email):
        raise SettingsError(f"admin_email: {s.admin_email!r} contains whitespace")
    if not s.superadmin:
        raise SettingsError("superadmin: must not be empty")
    if s.auth_attempts < 1:
        raise SettingsError("auth_attempts: must be at least 1")
    if s.command_timeout <= 0:
        raise SettingsError("command_timeout: must be positive")


def resolve_settings(
    overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
    secret_source: Callable[[int], str] = generate_secret,
) -> Settings:
    """Build validated Settings from defaults, environment and overrides.

    When generate_password holds, the superadmin secret is drawn here from
    ``secret_source`` so later rendering stays deterministic.
    """
    if environ is None:
        environ = os.environ
    overrides = dict(overrides or {})
    unknown = sorted(set(overrides) - set(DEFAULTS))
    if unknown:
        raise SettingsError(f"unknown setting(s): {', '.join(unknown)}")

    raw: dict[str, object] = dict(DEFAULTS)
    raw.update(_from_environ(environ))
    raw.update(overrides)

    values: dict[str, object] = {}
    for key, value in raw.items():
        if key in BOOL_KEYS:
            values[key] = _to_bool(key, value)
        elif key in INT_KEYS:
            values[key] = _to_int(key, value)
        else:
            values[key] = str(value).strip()

    if values["generate_password"]:
        values["superadmin"] = secret_source(config.SECRET_LENGTH)

    settings = Settings(**values)
    _validate(settings)
    return settings
