import unittest
from typing import List, Optional

from vm_bootstrap.errors import NetworkUnavailable, StepOrderError, SubprocessFailed
from vm_bootstrap.pipeline import FailurePolicy, Step, StepOutcome, run_pipeline, run_step, validate_order

from _fakes import make_ctx


class _Action:

    def __init__(self, error: Optional[Exception] = None, log: Optional[List[str]] = None, label: str = ""):
        self._error = error
        self._log = log if log is not None else []
        self._label = label
        self.calls = 0

    def __call__(self, ctx):
        self.calls += 1
        self._log.append(self._label)
        if self._error is not None:
            raise self._error


def _ok(log=None, label=""):
    return _Action(log=log, label=label)


def _fails(log=None, label=""):
    return _Action(SubprocessFailed(["installer"], 1), log=log, label=label)


class SequencerScenarios(unittest.TestCase):

    def setUp(self):
        self.ctx = make_ctx()

    def test_example_scenario(self):
        steps = [
            Step(name="A", precondition=lambda probe: False, primary=_ok()),
            Step(name="B", precondition=lambda probe: True, primary=_fails()),
            Step(name="C", precondition=lambda probe: False, primary=_fails(), fallback=_ok()),
        ]
        result = run_pipeline(steps=steps, ctx=self.ctx)
        self.assertEqual(
            result.outcomes,
            [StepOutcome.INSTALLED_PRIMARY, StepOutcome.ALREADY_SATISFIED, StepOutcome.INSTALLED_FALLBACK],
        )
        self.assertTrue(result.ok)
        self.assertEqual(result.status, "success")

    def test_satisfied_step_runs_no_action(self):
        primary = _ok()
        fallback = _ok()
        step = Step(name="A", precondition=lambda probe: True, primary=primary, fallback=fallback)
        report = run_step(step, self.ctx)
        self.assertEqual(report.outcome, StepOutcome.ALREADY_SATISFIED)
        self.assertEqual((primary.calls, fallback.calls), (0, 0))

    def test_fallback_not_used_when_primary_succeeds(self):
        fallback = _ok()
        step = Step(name="A", precondition=lambda probe: False, primary=_ok(), fallback=fallback)
        self.assertEqual(run_step(step, self.ctx).outcome, StepOutcome.INSTALLED_PRIMARY)
        self.assertEqual(fallback.calls, 0)

    def test_fatal_failure_stops_run(self):
        later = _ok()
        steps = [
            Step(name="A", precondition=lambda probe: False, primary=_ok()),
            Step(name="B", precondition=lambda probe: False, primary=_fails()),
            Step(name="C", precondition=lambda probe: False, primary=later),
        ]
        result = run_pipeline(steps=steps, ctx=self.ctx)
        self.assertFalse(result.ok)
        self.assertEqual(result.failed_step, "B")
        self.assertEqual(result.status, "failed-at-step(B)")
        self.assertEqual(result.outcomes, [StepOutcome.INSTALLED_PRIMARY, StepOutcome.FATAL_ERROR])
        self.assertEqual(later.calls, 0)

    def test_fatal_when_primary_and_fallback_fail(self):
        step = Step(name="A", precondition=lambda probe: False, primary=_fails(), fallback=_fails())
        report = run_step(step, self.ctx)
        self.assertEqual(report.outcome, StepOutcome.FATAL_ERROR)
        self.assertIn("installer", report.detail)

    def test_tolerated_failure_continues(self):
        later = _ok()
        steps = [
            Step(
                name="A",
                precondition=lambda probe: False,
                primary=_Action(NetworkUnavailable("https://example.invalid/rc", "HTTP 404")),
                policy=FailurePolicy.TOLERATE,
            ),
            Step(name="B", precondition=lambda probe: False, primary=later),
        ]
        result = run_pipeline(steps=steps, ctx=self.ctx)
        self.assertTrue(result.ok)
        self.assertEqual(result.outcomes, [StepOutcome.SKIPPED_WARNING, StepOutcome.INSTALLED_PRIMARY])
        self.assertEqual(later.calls, 1)

    def test_unexpected_exception_propagates(self):
        steps = [Step(name="A", precondition=lambda probe: False, primary=_Action(KeyError("boom")))]
        with self.assertRaises(KeyError):
            run_pipeline(steps=steps, ctx=self.ctx)

    def test_precondition_error_means_not_satisfied(self):
        def broken(probe):
            raise NetworkUnavailable("https://example.invalid", "timeout")

        primary = _ok()
        report = run_step(Step(name="A", precondition=broken, primary=primary), self.ctx)
        self.assertEqual(report.outcome, StepOutcome.INSTALLED_PRIMARY)
        self.assertEqual(primary.calls, 1)

    def test_second_run_is_all_satisfied(self):
        installed = set()

        def installer(name):
            def action(ctx):
                installed.add(name)
            return action

        def is_installed(name):
            return lambda probe: name in installed

        steps = [
            Step(name=n, precondition=is_installed(n), primary=installer(n))
            for n in ("docker", "tmux", "uv")
        ]
        first = run_pipeline(steps=steps, ctx=self.ctx)
        second = run_pipeline(steps=steps, ctx=self.ctx)
        self.assertEqual(first.outcomes, [StepOutcome.INSTALLED_PRIMARY] * 3)
        self.assertEqual(second.outcomes, [StepOutcome.ALREADY_SATISFIED] * 3)

    def test_steps_run_in_declared_order(self):
        log: List[str] = []
        steps = [
            Step(name=n, precondition=lambda probe: False, primary=_ok(log, n))
            for n in ("one", "two", "three")
        ]
        run_pipeline(steps=steps, ctx=self.ctx)
        self.assertEqual(log, ["one", "two", "three"])


class SliceScenarios(unittest.TestCase):

    def setUp(self):
        self.ctx = make_ctx()
        self.log: List[str] = []
        self.steps = [
            Step(name=n, precondition=lambda probe: False, primary=_ok(self.log, n))
            for n in ("a", "b", "c", "d")
        ]

    def test_start_at_and_stop_after(self):
        result = run_pipeline(steps=self.steps, ctx=self.ctx, start_at="b", stop_after="c")
        self.assertEqual(self.log, ["b", "c"])
        self.assertEqual([r.name for r in result.reports], ["b", "c"])

    def test_unknown_step_name(self):
        with self.assertRaises(ValueError):
            run_pipeline(steps=self.steps, ctx=self.ctx, start_at="zzz")
        self.assertEqual(self.log, [])

    def _toolchain(self, node_installed):
        claude = _ok()
        steps = [
            Step(name="nvm", precondition=lambda probe: True, primary=_ok()),
            Step(name="node", precondition=lambda probe: node_installed, primary=_ok(), requires=("nvm",)),
            Step(name="claude", precondition=lambda probe: False, primary=claude, fallback=_ok(), requires=("node",)),
        ]
        return steps, claude

    def test_start_past_unmet_requirement_is_fatal(self):
        steps, claude = self._toolchain(node_installed=False)
        result = run_pipeline(steps=steps, ctx=self.ctx, start_at="claude")
        self.assertEqual(result.outcomes, [StepOutcome.FATAL_ERROR])
        self.assertEqual(result.failed_step, "claude")
        self.assertIn("node", result.reports[0].detail)
        self.assertEqual(claude.calls, 0)

    def test_start_past_met_requirement_runs(self):
        steps, claude = self._toolchain(node_installed=True)
        result = run_pipeline(steps=steps, ctx=self.ctx, start_at="claude")
        self.assertEqual(result.outcomes, [StepOutcome.INSTALLED_PRIMARY])
        self.assertEqual(claude.calls, 1)

    def test_unmet_requirement_of_tolerated_step_is_a_warning(self):
        primary = _ok()
        steps = [
            Step(name="docker", precondition=lambda probe: False, primary=_ok()),
            Step(name="docker_group", precondition=lambda probe: False, primary=primary,
                 policy=FailurePolicy.TOLERATE, requires=("docker",)),
            Step(name="after", precondition=lambda probe: False, primary=_ok()),
        ]
        result = run_pipeline(steps=steps, ctx=self.ctx, start_at="docker_group")
        self.assertEqual(result.outcomes, [StepOutcome.SKIPPED_WARNING, StepOutcome.INSTALLED_PRIMARY])
        self.assertEqual(primary.calls, 0)


class OrderValidation(unittest.TestCase):

    def test_dependency_after_dependent_is_rejected(self):
        steps = [
            Step(name="claude", precondition=lambda probe: False, primary=_ok(), requires=("node",)),
            Step(name="node", precondition=lambda probe: False, primary=_ok()),
        ]
        with self.assertRaises(StepOrderError):
            validate_order(steps)

    def test_invalid_order_runs_nothing(self):
        primary = _ok()
        steps = [
            Step(name="claude", precondition=lambda probe: False, primary=primary, requires=("node",)),
        ]
        with self.assertRaises(StepOrderError):
            run_pipeline(steps=steps, ctx=make_ctx())
        self.assertEqual(primary.calls, 0)

    def test_duplicate_names_are_rejected(self):
        steps = [
            Step(name="a", precondition=lambda probe: True, primary=_ok()),
            Step(name="a", precondition=lambda probe: True, primary=_ok()),
        ]
        with self.assertRaises(StepOrderError):
            validate_order(steps)

    def test_valid_order(self):
        steps = [
            Step(name="nvm", precondition=lambda probe: True, primary=_ok()),
            Step(name="node", precondition=lambda probe: True, primary=_ok(), requires=("nvm",)),
            Step(name="claude", precondition=lambda probe: True, primary=_ok(), requires=("node", "nvm")),
        ]
        validate_order(steps)


if __name__ == '__main__':
    unittest.main()
