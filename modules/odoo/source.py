"""Service user, Odoo source checkout, virtualenv and Enterprise addons."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

import config
from modules.retry import (
    FetchOutcome,
    classify_git_result,
    fetch_with_credentials,
    prompt_credentials,
)
from modules.settings import Settings
from modules.utils import log

GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}


def user_exists(runner, user: str) -> bool:
    return runner.run(["id", user]).ok


def as_user(settings: Settings, args: list[str]) -> list[str]:
    return ["sudo", "-H", "-u", settings.user, *args]


def create_system_user(settings: Settings, runner) -> None:
    if user_exists(runner, settings.user):
        log(f"INFO: user {settings.user} already exists")
    else:
        runner.run_cmd([
            "adduser", "--system", "--quiet", "--shell=/bin/bash",
            f"--home={settings.home}", "--gecos", "ODOO", "--group", settings.user,
        ])
        runner.run_cmd(["adduser", settings.user, "sudo"])
        log(f"PASS: Created system user {settings.user}")
    runner.run_cmd(["mkdir", "-p", settings.log_dir])
    runner.run_cmd(["chown", f"{settings.user}:{settings.user}", settings.log_dir])


def clone_argv(settings: Settings, url: str, target: str) -> list[str]:
    return [
        "git", "-c", "credential.helper=", "clone", "--depth", "1",
        "--branch", settings.version, url, target,
    ]


def clone_source(settings: Settings, runner) -> None:
    if (Path(settings.home_ext) / ".git").exists():
        log(f"INFO: checkout already present at {settings.home_ext}")
    else:
        result = runner.run(clone_argv(settings, config.ODOO_REPO_URL, settings.home_ext), env=GIT_ENV)
        outcome = classify_git_result(result)
        if outcome is FetchOutcome.ALREADY_PRESENT:
            log(f"INFO: {settings.home_ext} already exists; keeping it")
        elif outcome is not FetchOutcome.SUCCESS:
            result.check()
    runner.run_cmd(["chown", "-R", f"{settings.user}:{settings.user}", settings.home_ext])


def build_virtualenv(settings: Settings, runner) -> None:
    runner.run_cmd(as_user(settings, ["python3", "-m", "venv", settings.venv]))
    pip = f"{settings.venv}/bin/pip"
    runner.run_cmd(as_user(settings, [pip, "install", "--upgrade", "pip", "wheel", "setuptools"]))
    runner.run_cmd(as_user(settings, [pip, "install", "-r", f"{settings.home_ext}/requirements.txt"]))
    log(f"PASS: Virtualenv ready at {settings.venv}")


def enterprise_url(credentials=None) -> str:
    host = config.ENTERPRISE_REPO_HOST
    path = config.ENTERPRISE_REPO_PATH
    if credentials is None:
        return f"https://{host}/{path}"
    username, secret = credentials
    return f"https://{quote(username, safe='')}:{quote(secret, safe='')}@{host}/{path}"


def make_enterprise_fetch(settings: Settings, runner):
    def fetch(credentials) -> FetchOutcome:
        argv = clone_argv(settings, enterprise_url(credentials), settings.enterprise_addons)
        # sudo resets the environment, so the prompt guard goes through env(1)
        result = runner.run(as_user(settings, ["env", "GIT_TERMINAL_PROMPT=0", *argv]))
        return classify_git_result(result)

    return fetch


def scrub_remote(settings: Settings, runner) -> None:
    """Replace the credentialed origin URL that git stored in .git/config."""
    runner.run_cmd(as_user(settings, [
        "git", "-C", settings.enterprise_addons, "remote", "set-url", "origin", enterprise_url(),
    ]))


def install_enterprise(settings: Settings, runner, prompt=prompt_credentials) -> None:
    runner.run_cmd(["ln", "-sf", "/usr/bin/nodejs", "/usr/bin/node"])
    enterprise_dir = Path(settings.enterprise_addons)
    if (enterprise_dir / ".git").exists():
        log(f"INFO: enterprise checkout already present at {enterprise_dir}")
    else:
        # git clone refuses a non-empty target; only the parent is created
        runner.run_cmd(as_user(settings, ["mkdir", "-p", str(enterprise_dir.parent)]))
        prompts = fetch_with_credentials(
            make_enterprise_fetch(settings, runner),
            prompt=prompt,
            max_attempts=settings.auth_attempts,
        )
        if prompts:
            scrub_remote(settings, runner)
        log(f"PASS: Enterprise cloned after {prompts} credential prompt(s)")
    pip = f"{settings.venv}/bin/pip"
    runner.run_cmd(as_user(settings, [pip, "install", *config.ENTERPRISE_PIP_PACKAGES]))
    runner.run_cmd(["npm", "install", "-g", *config.ENTERPRISE_NPM_PACKAGES])
