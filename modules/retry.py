"""Bounded credential-retry loop for fetching a private repository.

The first attempt goes out without credentials. Each authentication
failure prompts for a username and secret that the next attempt uses.
"""

from __future__ import annotations

import enum
import getpass
from typing import Callable, Optional, Tuple

from modules.stages import ProvisionError
from modules.utils import CmdResult, log, status_warn


class FetchOutcome(enum.Enum):
    SUCCESS = "success"
    ALREADY_PRESENT = "already-present"
    AUTH_FAILURE = "auth-failure"
    OTHER_FAILURE = "other-failure"


class FetchError(ProvisionError):
    pass


class CredentialsExhausted(ProvisionError):
    pass


class CredentialsCancelled(ProvisionError):
    pass


Credentials = Tuple[str, str]

AUTH_MARKERS = (
    "authentication failed",
    "could not read username",
    "could not read password",
    "terminal prompts disabled",
    "invalid username or password",
    "repository not found",
)
EXISTS_MARKER = "already exists and is not an empty directory"


def classify_git_result(result: CmdResult) -> FetchOutcome:
    # git exits 128 for every fetch error; stderr is the only discriminator.
    if result.ok:
        return FetchOutcome.SUCCESS
    text = result.output.lower()
    if EXISTS_MARKER in text:
        return FetchOutcome.ALREADY_PRESENT
    if any(marker in text for marker in AUTH_MARKERS):
        return FetchOutcome.AUTH_FAILURE
    return FetchOutcome.OTHER_FAILURE


def prompt_credentials() -> Credentials:
    print("------------------------WARNING------------------------------")
    print("Your authentication with GitHub has failed! Please try again.")
    print("Cloning Odoo Enterprise requires partner access to github.com/odoo/enterprise.")
    print("TIP: Press ctrl+c to stop.")
    print("-------------------------------------------------------------")
    username = input("GitHub Username: ").strip()
    secret = getpass.getpass("GitHub Password/Token: ")
    return username, secret


def fetch_with_credentials(
    fetch: Callable[[Optional[Credentials]], FetchOutcome],
    prompt: Callable[[], Credentials] = prompt_credentials,
    max_attempts: int = 3,
) -> int:
    """Run ``fetch`` until it stops reporting an authentication failure.

    Returns the number of credential prompts performed. Raises FetchError
    on a non-auth failure, CredentialsExhausted after ``max_attempts``
    authentication failures and CredentialsCancelled when the operator
    aborts the prompt.
    """
    credentials: Optional[Credentials] = None
    prompts = 0
    attempt = 0
    while True:
        attempt += 1
        outcome = fetch(credentials)
        log(f"FETCH attempt={attempt} outcome={outcome.value}")
        if outcome in (FetchOutcome.SUCCESS, FetchOutcome.ALREADY_PRESENT):
            return prompts
        if outcome is FetchOutcome.OTHER_FAILURE:
            raise FetchError(f"fetch failed on attempt {attempt}")
        if attempt >= max_attempts:
            raise CredentialsExhausted(
                f"authentication failed {attempt} time(s); giving up"
            )
        status_warn(f"authentication failed (attempt {attempt}/{max_attempts})")
        try:
            credentials = prompt()
        except (EOFError, KeyboardInterrupt):
            raise CredentialsCancelled("credential entry cancelled") from None
        prompts += 1
