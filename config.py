"""Shared configuration constants for auto-odoo.

Centralizes defaults, package lists and download URLs used by modules.
Runtime values are resolved in modules.settings from ODOO_* variables.
"""

DEFAULT_USER = "odoo"
DEFAULT_HTTP_PORT = 8069
DEFAULT_LONGPOLLING_PORT = 8072
DEFAULT_VERSION = "18.0"
DEFAULT_ENTERPRISE = False
DEFAULT_INSTALL_NGINX = True
DEFAULT_ENABLE_SSL = False
DEFAULT_ADMIN_EMAIL = "odoo@example.com"
DEFAULT_WEBSITE_NAME = "_"
DEFAULT_SUPERADMIN = "admin"
DEFAULT_GENERATE_PASSWORD = True
DEFAULT_POSTGRESQL_16 = True
DEFAULT_AUTH_ATTEMPTS = 3
DEFAULT_COMMAND_TIMEOUT = 3600  # seconds
ETC_DIR = "/etc"
VAR_LOG_DIR = "/var/log"

SECRET_LENGTH = 16
ENV_PREFIX = "ODOO_"

ODOO_REPO_URL = "https://github.com/odoo/odoo.git"
ENTERPRISE_REPO_HOST = "github.com"
ENTERPRISE_REPO_PATH = "odoo/enterprise"

BASE_PACKAGES = [
    "git", "python3", "python3-pip", "python3-dev", "python3-venv",
    "python3-wheel", "build-essential", "wget", "libxslt-dev", "libzip-dev",
    "libldap2-dev", "libsasl2-dev", "nodejs", "npm", "libpq-dev",
    "libjpeg-dev", "libpng-dev", "gdebi", "curl", "ca-certificates",
]
NPM_GLOBAL_PACKAGES = ["rtlcss", "less", "less-plugin-clean-css"]

PGDG_KEY_URL = "https://www.postgresql.org/media/keys/ACCC4CF8.asc"
PGDG_KEYRING = "/etc/apt/trusted.gpg.d/postgresql.gpg"
PGDG_SOURCES_LIST = "/etc/apt/sources.list.d/pgdg.list"
PGDG_APT_URL = "http://apt.postgresql.org/pub/repos/apt"

WKHTMLTOPDF_URL = (
    "https://github.com/wkhtmltopdf/packaging/releases/download/"
    "0.12.6.1-3/wkhtmltox_0.12.6.1-3.jammy_amd64.deb"
)
WKHTMLTOPDF_DEB = "/tmp/wkhtmltox.deb"
WKHTMLTOPDF_DEPS = [
    "fontconfig", "libfontconfig1", "libjpeg-turbo8", "libx11-6", "libxcb1",
    "libxext6", "libxrender1", "xfonts-75dpi", "xfonts-base",
]

ENTERPRISE_PIP_PACKAGES = [
    "psycopg2-binary", "pdfminer.six", "num2words", "ofxparse", "dbfread",
    "ebaysdk", "firebase_admin", "pyOpenSSL",
]
ENTERPRISE_NPM_PACKAGES = ["less", "less-plugin-clean-css"]

FIREWALL_PORTS = ["80/tcp", "443/tcp"]

CONFIG_FILE_PERMS = 0o640
UNIT_FILE_PERMS = 0o644
SITE_FILE_PERMS = 0o644
