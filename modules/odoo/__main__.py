"""Run a single provisioning stage: python -m modules.odoo <stage>."""

from __future__ import annotations

import sys

from modules.settings import SettingsError, resolve_settings
from modules.stages import FAILED, run_stage
from modules.utils import ShellRunner, init_logging, status_fail
from .installer import find_stage, stage_names


def main() -> int:
    init_logging(None)
    argv = sys.argv[1:]
    if len(argv) != 1:
        status_fail(f"usage: <stage>; one of {', '.join(stage_names())}")
        return 1
    stage = find_stage(argv[0])
    if stage is None:
        status_fail(f"unknown stage {argv[0]}")
        return 1
    try:
        settings = resolve_settings()
    except SettingsError as err:
        status_fail(str(err))
        return 2
    result = run_stage(settings, stage, ShellRunner(timeout=settings.command_timeout))
    if result.status == FAILED:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
