"""Utility helpers kept dependency-free.

- init_logging: configure console + file logging with run-id.
- status_pass/status_fail/status_skip/status_warn: concise console status
  lines (with run-id).
- CmdResult/ShellRunner/DryRunRunner: the command-execution collaborator
  every stage goes through.
- log: debug-level logger for normal status lines (file-oriented).
- write_text_atomic: replace a file in one step with a given mode.
- mask_url_credentials: hide user:secret@ in URLs before logging.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
import uuid
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Mapping, Sequence
from urllib.parse import urlsplit, urlunsplit


_RUN_ID = ""
TIMEOUT_EXIT = 124


def _gen_run_id() -> str:
    return uuid.uuid4().hex[:8]


def _log_dir() -> Path:
    override = os.environ.get("AUTOODOO_LOG_DIR")
    if override:
        return Path(override)
    # Project root = parent of 'modules'
    return Path(__file__).resolve().parent.parent / "log"


def init_logging(run_id: str | None = None) -> str:
    """Initialize logging with console + rotating file handlers.

    - Console: minimal, CRITICAL only; status lines are printed directly.
    - File: DEBUG+, rich format, written to log/auto-odoo-<rid>.log
    Returns the run-id used.
    """
    global _RUN_ID
    if _RUN_ID:
        return _RUN_ID

    rid = run_id or os.environ.get("AUTOODOO_RID") or _gen_run_id()
    _RUN_ID = rid

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    try:
        log_dir = _log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        logfile = log_dir / f"auto-odoo-{rid}.log"
    except OSError:
        logfile = Path(f"auto-odoo-{rid}.log").resolve()

    # Quiet any pre-existing console handlers
    for h in list(root.handlers):
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler):
            h.setLevel(logging.CRITICAL)

    has_file = any(
        isinstance(h, RotatingFileHandler)
        and getattr(h, "baseFilename", "").endswith(logfile.name)
        for h in root.handlers
    )
    if not has_file:
        fh = RotatingFileHandler(logfile, maxBytes=5 * 1024 * 1024, backupCount=3)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
        root.addHandler(fh)

    if not any(
        isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        for h in root.handlers
    ):
        ch = logging.StreamHandler()
        ch.setLevel(logging.CRITICAL)
        ch.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        root.addHandler(ch)

    logging.debug("Logging initialized. run_id=%s file=%s", rid, logfile)
    os.environ["AUTOODOO_RID"] = rid
    return rid


def _rid() -> str:
    return _RUN_ID or os.environ.get("AUTOODOO_RID", "--------")


def status_pass(msg: str) -> None:
    logging.info("PASS: %s", msg)
    print(f"PASS: {msg} [{_rid()}]")


def status_fail(msg: str) -> None:
    logging.error("FAIL: %s", msg)
    print(f"FAIL: {msg} [{_rid()}]", flush=True)


def status_skip(msg: str) -> None:
    logging.info("SKIP: %s", msg)
    print(f"SKIP: {msg} [{_rid()}]")


def status_warn(msg: str) -> None:
    logging.warning("WARN: %s", msg)
    print(f"WARN: {msg} [{_rid()}]", flush=True)


def log(msg: str) -> None:
    # File-oriented normal progress; stays out of console noise.
    logging.debug(msg)


def mask_url_credentials(text: str) -> str:
    parts = urlsplit(text)
    if not parts.netloc or "@" not in parts.netloc:
        return text
    host = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit(parts._replace(netloc=f"***@{host}"))


def display_cmd(args: Sequence[str]) -> str:
    return " ".join(shlex.quote(mask_url_credentials(str(a))) for a in args)


# ─── Command execution ─────────────────────────────────────────────────────
@dataclass(frozen=True)
class CmdResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return f"{self.stdout}{self.stderr}"

    def check(self) -> "CmdResult":
        if self.ok:
            return self
        raise subprocess.CalledProcessError(
            self.returncode, list(self.args), output=self.stdout, stderr=self.stderr
        )


class ShellRunner:
    """Thin wrapper over subprocess.run with capture, text and a timeout.

    ``run`` never raises for a non-zero exit; ``run_cmd`` does.
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    def run(
        self,
        args: Sequence[str],
        *,
        input: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CmdResult:
        argv = tuple(str(a) for a in args)
        shown = display_cmd(argv)
        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)
        try:
            proc = subprocess.run(
                argv,
                input=input,
                env=full_env,
                text=True,
                capture_output=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logging.error("CMD: %s\nTIMEOUT after %ss", shown, self.timeout)
            return CmdResult(argv, TIMEOUT_EXIT, "", f"timed out after {self.timeout}s")
        except FileNotFoundError as err:
            logging.error("CMD: %s\nNOT FOUND: %s", shown, err)
            return CmdResult(argv, 127, "", str(err))
        result = CmdResult(argv, proc.returncode, proc.stdout or "", proc.stderr or "")
        msg = (
            f"CMD: {shown}\nEXIT: {result.returncode}\n"
            f"STDOUT: {result.stdout.strip()}\nSTDERR: {result.stderr.strip()}"
        )
        if result.ok:
            log(msg)
        else:
            logging.error(msg)
        return result

    def run_cmd(self, args: Sequence[str], **kwargs) -> CmdResult:
        return self.run(args, **kwargs).check()

    def write_file(self, path, content: str, mode: int) -> Path:
        log(f"WRITE: {path} mode={oct(mode)}")
        return write_text_atomic(Path(path), content, mode)

    def which(self, name: str) -> str | None:
        return shutil.which(name)


class DryRunRunner(ShellRunner):
    """Logs every command and reports success without executing it."""

    def __init__(self, timeout: float | None = None):
        super().__init__(timeout)
        self.commands: list[tuple[str, ...]] = []

    def run(self, args, *, input=None, env=None) -> CmdResult:
        argv = tuple(str(a) for a in args)
        self.commands.append(argv)
        print(f"DRY: {display_cmd(argv)}")
        log(f"DRY: {display_cmd(argv)}")
        return CmdResult(argv, 0)

    def write_file(self, path, content: str, mode: int) -> Path:
        print(f"DRY: write {path} mode={oct(mode)}")
        log(f"DRY: write {path} ({len(content)} bytes)")
        return Path(path)

    def which(self, name: str) -> str | None:
        return name


# ─── Files ─────────────────────────────────────────────────────────────────
def write_text_atomic(path: Path, content: str, mode: int) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w", delete=False, dir=str(path.parent), encoding="utf-8"
    ) as tmp:
        tmp.write(content)
        tmp.flush()
        os.fsync(tmp.fileno())
        tmp_path = tmp.name
    try:
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, str(path))
    except OSError:
        Path(tmp_path).unlink(missing_ok=True)
        raise
    return path
