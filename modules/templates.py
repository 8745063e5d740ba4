"""Render the three provisioning artifacts from Settings.

Rendering is pure: no commands, no filesystem access. Each template is
filled with str.format, so a missing key raises instead of leaking an
unresolved placeholder into the output.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from typing import TYPE_CHECKING

import config

if TYPE_CHECKING:
    from modules.settings import Settings


SECRET_ALPHABET = string.ascii_letters + string.digits


def generate_secret(length: int = config.SECRET_LENGTH) -> str:
    return "".join(secrets.choice(SECRET_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class Artifact:
    name: str
    path: str
    content: str
    mode: int


ODOO_CONF_TEMPLATE = """\
[options]
admin_passwd = {admin_passwd}
http_port = {http_port}
longpolling_port = {longpolling_port}
logfile = {logfile}
log_level = info
proxy_mode = True
addons_path = {addons_path}
"""

SERVICE_UNIT_TEMPLATE = """\
[Unit]
Description=Odoo {version}
After=network.target postgresql.service
Requires=postgresql.service

[Service]
Type=simple
User={user}
Group={user}
ExecStart={venv}/bin/python {home_ext}/odoo-bin -c {config_file}
StandardOutput=journal+console
Restart=always
RestartSec=5
SyslogIdentifier={config_name}

# Security
PrivateTmp=true
ProtectHome=true
NoNewPrivileges=true
ProtectSystem=full

[Install]
WantedBy=multi-user.target
"""

NGINX_SITE_TEMPLATE = r"""map $http_upgrade $connection_upgrade {{
    default upgrade;
    ''      close;
}}

upstream {user} {{
    server 127.0.0.1:{http_port};
}}

upstream {user}_chat {{
    server 127.0.0.1:{longpolling_port};
}}

server {{
    listen 80;
    server_name {website_name};

    # Proxy headers
    proxy_set_header X-Forwarded-Host $host;
    proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
    proxy_set_header X-Forwarded-Proto $scheme;
    proxy_set_header X-Real-IP $remote_addr;
    proxy_set_header X-Client-IP $remote_addr;

    # Security headers
    add_header X-Frame-Options "SAMEORIGIN";
    add_header X-XSS-Protection "1; mode=block";
    add_header X-Content-Type-Options nosniff;
    add_header Strict-Transport-Security "max-age=31536000; includeSubDomains" always;

    # Logs
    access_log  /var/log/nginx/{user}-access.log;
    error_log   /var/log/nginx/{user}-error.log;

    proxy_buffers       16  64k;
    proxy_buffer_size   128k;

    proxy_read_timeout 900s;
    proxy_connect_timeout 900s;
    proxy_send_timeout 900s;

    proxy_next_upstream error timeout invalid_header http_500 http_502 http_503;

    gzip on;
    gzip_min_length 1100;
    gzip_buffers 4 32k;
    gzip_types text/css text/less text/plain text/xml application/xml application/json application/javascript application/pdf image/jpeg image/png;
    gzip_vary on;

    client_header_buffer_size 4k;
    large_client_header_buffers 4 64k;
    client_max_body_size 0;

    location / {{
        proxy_pass http://{user};
        proxy_redirect off;
    }}

    location /longpolling {{
        proxy_pass http://{user}_chat;
    }}

    location /websocket {{
        proxy_pass http://{user}_chat;
        proxy_set_header Upgrade $http_upgrade;
        proxy_set_header Connection $connection_upgrade;
        proxy_set_header X-Forwarded-Host $http_host;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;
        proxy_set_header X-Real-IP $remote_addr;
    }}

    # Static files (cache 2 days)
    location ~* \.?(js|css|png|jpg|jpeg|gif|ico)$ {{
        expires 2d;
        proxy_pass http://{user};
        add_header Cache-Control "public, no-transform";
    }}

    location ~ /[a-zA-Z0-9_-]*/static/ {{
        proxy_cache_valid 200 302 60m;
        proxy_cache_valid 404 1m;
        proxy_buffering on;
        expires 864000;
        proxy_pass http://{user};
    }}
}}
"""


def render_odoo_conf(settings: Settings) -> str:
    return ODOO_CONF_TEMPLATE.format(
        admin_passwd=settings.superadmin,
        http_port=settings.http_port,
        longpolling_port=settings.longpolling_port,
        logfile=settings.logfile,
        addons_path=settings.addons_path,
    )


def render_service_unit(settings: Settings) -> str:
    return SERVICE_UNIT_TEMPLATE.format(
        version=settings.version,
        user=settings.user,
        venv=settings.venv,
        home_ext=settings.home_ext,
        config_file=settings.config_file,
        config_name=settings.config_name,
    )


def render_nginx_site(settings: Settings) -> str:
    return NGINX_SITE_TEMPLATE.format(
        user=settings.user,
        http_port=settings.http_port,
        longpolling_port=settings.longpolling_port,
        website_name=settings.website_name,
    )


def render_artifacts(settings: Settings) -> list[Artifact]:
    """All artifacts for these settings; the nginx site only with nginx."""
    artifacts = [
        Artifact("odoo-config", settings.config_file, render_odoo_conf(settings), config.CONFIG_FILE_PERMS),
        Artifact("systemd-unit", settings.service_file, render_service_unit(settings), config.UNIT_FILE_PERMS),
    ]
    if settings.install_nginx:
        artifacts.append(
            Artifact("nginx-site", settings.nginx_site_file, render_nginx_site(settings), config.SITE_FILE_PERMS)
        )
    return artifacts
