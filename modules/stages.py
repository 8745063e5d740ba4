"""Stage descriptors and the generic runner that executes them in order.

A stage action raises on failure: subprocess.CalledProcessError from a
checked command, ProvisionError, or OSError from a file write. The runner
stops at the first failure unless the stage declares the failure benign.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from typing import Callable, Sequence

from modules.settings import Settings
from modules.utils import display_cmd, log, status_fail, status_pass, status_skip, status_warn


class ProvisionError(Exception):
    """A stage could not complete for a reason other than a command exit."""


Predicate = Callable[[Settings], bool]
Action = Callable[[Settings, object], None]
BenignMatcher = Callable[[Exception], bool]


def always(settings: Settings) -> bool:
    return True


@dataclass(frozen=True)
class Stage:
    name: str
    action: Action
    predicate: Predicate = always
    # Makes the stage best-effort: a matching failure becomes a no-op.
    benign: BenignMatcher | None = None
    requires_tool: str | None = None

    @property
    def best_effort(self) -> bool:
        return self.benign is not None


OK = "ok"
SKIPPED = "skipped"
NOOP = "noop"
FAILED = "failed"


@dataclass
class StageResult:
    name: str
    status: str
    detail: str = ""


@dataclass
class RunReport:
    results: list[StageResult] = field(default_factory=list)

    @property
    def failed(self) -> StageResult | None:
        for result in self.results:
            if result.status == FAILED:
                return result
        return None

    @property
    def ok(self) -> bool:
        return self.failed is None

    def names(self, status: str) -> list[str]:
        return [r.name for r in self.results if r.status == status]


def describe_error(err: Exception) -> str:
    if isinstance(err, subprocess.CalledProcessError):
        cmd = err.cmd if isinstance(err.cmd, str) else display_cmd(err.cmd)
        detail = (err.stderr or err.output or "").strip().splitlines()
        tail = f": {detail[-1]}" if detail else ""
        return f"'{cmd}' exit={err.returncode}{tail}"
    return str(err) or type(err).__name__


def plan_stages(
    settings: Settings,
    stages: Sequence[Stage],
    which: Callable[[str], str | None] | None = None,
) -> list[tuple[str, bool]]:
    """Report which stages would run; with ``which``, missing tools count too."""
    plan = []
    for stage in stages:
        runs = bool(stage.predicate(settings))
        if runs and stage.requires_tool and which is not None:
            runs = bool(which(stage.requires_tool))
        plan.append((stage.name, runs))
    return plan


def run_stage(settings: Settings, stage: Stage, runner) -> StageResult:
    if not stage.predicate(settings):
        status_skip(f"{stage.name} skipped")
        return StageResult(stage.name, SKIPPED, "disabled by settings")
    if stage.requires_tool and not runner.which(stage.requires_tool):
        status_warn(f"{stage.name} skipped: {stage.requires_tool} not installed")
        return StageResult(stage.name, SKIPPED, f"{stage.requires_tool} not installed")
    log(f"STAGE START: {stage.name}")
    try:
        stage.action(settings, runner)
    except (subprocess.CalledProcessError, ProvisionError, OSError) as err:
        detail = describe_error(err)
        if stage.benign is not None and stage.benign(err):
            log(f"NOOP: {stage.name}: {detail}")
            status_pass(f"{stage.name} (already done)")
            return StageResult(stage.name, NOOP, detail)
        logging.error("Stage %s failed: %s", stage.name, detail)
        status_fail(f"{stage.name}: {detail}")
        return StageResult(stage.name, FAILED, detail)
    status_pass(stage.name)
    return StageResult(stage.name, OK)


def run_stages(settings: Settings, stages: Sequence[Stage], runner) -> RunReport:
    """Execute stages in order; abort on the first non-benign failure."""
    report = RunReport()
    for stage in stages:
        result = run_stage(settings, stage, runner)
        report.results.append(result)
        if result.status == FAILED:
            break
    return report
