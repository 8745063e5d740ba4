import pytest

import config
from modules.settings import SettingsError, resolve_settings


def test_defaults_resolve_with_generated_secret():
    s = resolve_settings(environ={}, secret_source=lambda n: "x" * n)
    assert s.user == "odoo"
    assert s.http_port == 8069
    assert s.longpolling_port == 8072
    assert s.superadmin == "x" * config.SECRET_LENGTH
    assert s.config_file == "/etc/odoo-server.conf"
    assert s.service_file == "/etc/systemd/system/odoo-server.service"
    assert s.home_ext == "/odoo/odoo-server"
    assert s.venv == "/odoo/venv"
    assert s.logfile == "/var/log/odoo/odoo-server.log"


def test_literal_secret_kept_when_generation_off():
    s = resolve_settings({"generate_password": "no", "superadmin": "hunter2"}, environ={})
    assert s.superadmin == "hunter2"


def test_environment_then_overrides_precedence():
    env = {"ODOO_HTTP_PORT": "9000", "ODOO_USER": "erp", "ODOO_ENTERPRISE": "yes"}
    s = resolve_settings({"user": "shop"}, environ=env)
    assert s.http_port == 9000
    assert s.user == "shop"
    assert s.enterprise is True


def test_settings_are_immutable():
    s = resolve_settings(environ={})
    with pytest.raises(Exception):
        s.user = "other"


@pytest.mark.parametrize(
    "overrides",
    [
        {"http_port": 0},
        {"http_port": 65536},
        {"longpolling_port": "abc"},
        {"http_port": 8072},
        {"user": ""},
        {"user": "Bad User"},
        {"website_name": "example .test"},
        {"website_name": ""},
        {"website_name": "evil;}server{listen"},
        {"website_name": "../../x"},
        {"website_name": "-shop.example.test"},
        {"version": ""},
        {"admin_email": "a b@example.test"},
        {"enterprise": "maybe"},
        {"auth_attempts": 0},
        {"command_timeout": -1},
        {"generate_password": False, "superadmin": ""},
        {"colour": "blue"},
    ],
)
def test_invalid_values_fail_fast(overrides):
    with pytest.raises(SettingsError):
        resolve_settings(overrides, environ={})


@pytest.mark.parametrize("name", ["_", "shop.example.test", "localhost", "erp-1.example.co.uk"])
def test_hostname_values_are_accepted(name):
    assert resolve_settings({"website_name": name}, environ={}).website_name == name


def test_addons_path_follows_enterprise_flag():
    community = resolve_settings({"enterprise": False}, environ={})
    enterprise = resolve_settings({"enterprise": True}, environ={})
    assert community.addons_path == "/odoo/odoo-server/addons,/odoo/custom/addons"
    assert enterprise.addons_path == "/odoo/enterprise/addons,/odoo/odoo-server/addons"


@pytest.mark.parametrize(
    "overrides,expected",
    [
        ({"enable_ssl": True, "admin_email": "ops@example.test", "website_name": "example.test"}, True),
        ({"enable_ssl": True, "admin_email": "odoo@example.com", "website_name": "example.test"}, False),
        ({"enable_ssl": True, "admin_email": "ops@example.test", "website_name": "_"}, False),
        ({"enable_ssl": False, "admin_email": "ops@example.test", "website_name": "example.test"}, False),
        (
            {"enable_ssl": True, "install_nginx": False, "admin_email": "ops@example.test", "website_name": "example.test"},
            False,
        ),
    ],
)
def test_certificate_requires_nginx_ssl_and_real_contact(overrides, expected):
    assert resolve_settings(overrides, environ={}).wants_certificate is expected
