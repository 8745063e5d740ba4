"""Odoo provisioning package.

Submodules:
- packages: apt/npm packages and the wkhtmltopdf PDF renderer
- db: PostgreSQL install and role
- source: service user, source checkout, virtualenv, Enterprise addons
- service: Odoo config file, systemd unit, service control
- proxy: nginx site, firewall rules, certbot
- installer: ordered stage table and orchestration
"""

# Intentionally minimal; logic lives in submodules and __main__.
