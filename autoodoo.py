#!/usr/bin/env python3
"""CLI to provision an Odoo server from source.

Inputs: ODOO_* environment variables (optionally from a .env file) and
--set KEY=VALUE overrides.
Side effects: installs packages and PostgreSQL, clones Odoo, builds a
virtualenv, writes the Odoo config, systemd unit and nginx site, opens
the firewall, requests a certificate and starts the service.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from modules.odoo.installer import build_stages, provision
from modules.report import print_summary
from modules.settings import Settings, SettingsError, resolve_settings
from modules.stages import plan_stages
from modules.templates import render_artifacts
from modules.utils import (
    DryRunRunner,
    ShellRunner,
    init_logging,
    log,
    status_fail,
    status_pass,
    write_text_atomic,
)

# ─── CONFIG ──────────────────────────────────────────────────────────────
CMD_INSTALL = "install"
CMD_PLAN = "plan"
CMD_RENDER = "render"
EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


# ─── CLI ──────────────────────────────────────────────────────────────
def parse_overrides(pairs: list[str]) -> dict[str, str]:
    overrides = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise SettingsError(f"--set expects KEY=VALUE, got {pair!r}")
        overrides[key.strip()] = value
    return overrides


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="auto-odoo", description="Provision Odoo from source.")
    parser.add_argument("--env-file", type=Path, help="load ODOO_* variables from this .env file")
    parser.add_argument(
        "--set", dest="overrides", action="append", default=[], metavar="KEY=VALUE",
        help="override one setting (repeatable)",
    )
    sub = parser.add_subparsers(dest="command")

    install = sub.add_parser(CMD_INSTALL, help="run every provisioning stage")
    install.add_argument("--dry-run", action="store_true", help="log commands without running them")
    install.add_argument(
        "--hide-secret", action="store_true", help="mask the superadmin password in the summary"
    )

    sub.add_parser(CMD_PLAN, help="list stages and whether they would run")

    render = sub.add_parser(CMD_RENDER, help="write the generated files into a directory")
    render.add_argument("outdir", type=Path)
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    if args.env_file is not None:
        if not args.env_file.is_file():
            raise SettingsError(f"env file not found: {args.env_file}")
        load_dotenv(args.env_file, override=False)
    else:
        load_dotenv(override=False)
    return resolve_settings(parse_overrides(args.overrides), os.environ)


def cmd_install(settings: Settings, args: argparse.Namespace) -> int:
    if args.dry_run:
        runner = DryRunRunner(timeout=settings.command_timeout)
    else:
        runner = ShellRunner(timeout=settings.command_timeout)
    report = provision(settings, runner)
    print_summary(settings, report, show_secret=not args.hide_secret)
    if not report.ok:
        return EXIT_FAILED
    status_pass("odoo provisioned")
    return EXIT_OK


def cmd_plan(settings: Settings) -> int:
    for name, runs in plan_stages(settings, build_stages(), ShellRunner().which):
        print(f"{'run ' if runs else 'skip'}  {name}")
    return EXIT_OK


def cmd_render(settings: Settings, outdir: Path) -> int:
    for artifact in render_artifacts(settings):
        target = outdir / Path(artifact.path).name
        write_text_atomic(target, artifact.content, artifact.mode)
        log(f"PASS: Rendered {artifact.name} to {target}")
        print(target)
    return EXIT_OK


def main(argv: list[str]) -> int:
    init_logging(None)
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_usage(sys.stderr)
        return EXIT_USAGE
    try:
        settings = load_settings(args)
    except SettingsError as err:
        status_fail(f"invalid settings: {err}")
        return EXIT_USAGE
    if args.command == CMD_PLAN:
        return cmd_plan(settings)
    if args.command == CMD_RENDER:
        return cmd_render(settings, args.outdir)
    return cmd_install(settings, args)


def cli() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    cli()
