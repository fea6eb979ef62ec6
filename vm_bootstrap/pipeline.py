from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from .config import BootstrapConfig
from .errors import BootstrapError, StepOrderError, UnmetDependency
from .lib.command import Runner, run_cmd
from .probe import SystemProbe

logger = logging.getLogger(__name__)


class FailurePolicy(enum.Enum):
    FATAL = "fatal"
    TOLERATE = "tolerate"


class StepOutcome(enum.Enum):
    ALREADY_SATISFIED = "already-satisfied"
    INSTALLED_PRIMARY = "installed-primary"
    INSTALLED_FALLBACK = "installed-fallback"
    SKIPPED_WARNING = "skipped-warning"
    FATAL_ERROR = "fatal-error"


@dataclass
class RunContext:
    """Everything an action may touch: config, probe, command runner."""

    config: BootstrapConfig
    probe: SystemProbe
    run: Runner = run_cmd
    dry_run: bool = False

    def cmd(self, argv: Sequence[str], **kwargs):
        kwargs.setdefault("dry_run", self.dry_run)
        return self.run(argv, **kwargs)

    def as_root(self, argv: Sequence[str]) -> List[str]:
        return ["sudo", *argv] if self.config.use_sudo else list(argv)


Precondition = Callable[[SystemProbe], bool]
Action = Callable[[RunContext], None]


@dataclass(frozen=True)
class Step:
    """A single idempotent step."""

    name: str
    precondition: Precondition
    primary: Action
    fallback: Optional[Action] = None
    policy: FailurePolicy = FailurePolicy.FATAL
    title: str = ""
    requires: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StepReport:
    name: str
    outcome: StepOutcome
    detail: str = ""


@dataclass
class RunResult:
    reports: List[StepReport] = field(default_factory=list)
    failed_step: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failed_step is None

    @property
    def status(self) -> str:
        return "success" if self.ok else f"failed-at-step({self.failed_step})"

    @property
    def outcomes(self) -> List[StepOutcome]:
        return [r.outcome for r in self.reports]


def validate_order(steps: Sequence[Step]) -> None:
    """Every name in Step.requires must appear earlier in the list."""

    seen: set[str] = set()
    for step in steps:
        if step.name in seen:
            raise StepOrderError(f"Duplicate step name: {step.name}")
        for dep in step.requires:
            if dep not in seen:
                raise StepOrderError(f"Step {step.name} requires {dep}, which does not run before it")
        seen.add(step.name)


def _select(steps: Sequence[Step], start_at: Optional[str], stop_after: Optional[str]) -> List[Step]:
    names = [s.name for s in steps]
    for label, value in (("start_at", start_at), ("stop_after", stop_after)):
        if value is not None and value not in names:
            raise ValueError(f"Unknown step for {label}: {value}")

    begin = names.index(start_at) if start_at is not None else 0
    end = names.index(stop_after) + 1 if stop_after is not None else len(steps)
    return list(steps[begin:end])


def _check(step: Step, probe: SystemProbe) -> bool:
    try:
        return bool(step.precondition(probe))
    except BootstrapError as e:
        logger.debug("Precondition for %s could not be evaluated: %s", step.name, e)
        return False


def run_step(step: Step, ctx: RunContext, *, outside: Sequence[Step] = ()) -> StepReport:
    """Run one step. `outside` are required steps not part of this run;
    their preconditions must hold before any action of `step` is taken."""

    if _check(step, ctx.probe):
        logger.info("  -> %s: already satisfied.", step.name)
        return StepReport(step.name, StepOutcome.ALREADY_SATISFIED)

    try:
        unmet = [dep.name for dep in outside if not _check(dep, ctx.probe)]
        if unmet:
            raise UnmetDependency(f"required step(s) not satisfied: {', '.join(unmet)}")
        step.primary(ctx)
        logger.info("  -> %s: installed.", step.name)
        return StepReport(step.name, StepOutcome.INSTALLED_PRIMARY)
    except UnmetDependency as e:
        error = e
    except BootstrapError as e:
        error = e
        if step.fallback is not None:
            logger.info("  -> %s: primary method failed (%s), trying fallback...", step.name, e)
            try:
                step.fallback(ctx)
                logger.info("  -> %s: installed (fallback).", step.name)
                return StepReport(step.name, StepOutcome.INSTALLED_FALLBACK, detail=str(e))
            except BootstrapError as fallback_error:
                error = fallback_error

    if step.policy is FailurePolicy.TOLERATE:
        logger.warning("  -> WARNING: %s skipped: %s", step.name, error)
        return StepReport(step.name, StepOutcome.SKIPPED_WARNING, detail=str(error))

    logger.error("  -> ERROR: %s failed: %s", step.name, error)
    return StepReport(step.name, StepOutcome.FATAL_ERROR, detail=str(error))


def run_pipeline(
    *,
    steps: Sequence[Step],
    ctx: RunContext,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> RunResult:
    """Run steps in order; stop at the first fatal failure."""

    validate_order(steps)
    selected = _select(steps, start_at, stop_after)

    by_name = {s.name: s for s in steps}
    selected_names = {s.name for s in selected}

    result = RunResult()
    total = len(selected)
    for index, step in enumerate(selected, start=1):
        logger.info("[%d/%d] %s...", index, total, step.title or step.name)
        outside = [by_name[dep] for dep in step.requires if dep not in selected_names]
        report = run_step(step, ctx, outside=outside)
        result.reports.append(report)
        if report.outcome is StepOutcome.FATAL_ERROR:
            result.failed_step = step.name
            break

    logger.debug("Run finished: %s", result.status)
    return result
