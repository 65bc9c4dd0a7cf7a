"""
Differential driver: optimized engine vs reference specification.

`check_scenario` builds two independent worlds from one scenario, runs the
same batch in both, and diffs the observations. `run_equivalence_sweep`
walks every shape from `enumerate_shapes(config)` and, per shape, the
all-zero scenario plus `config.samples_per_shape` seeded random ones.

Every mismatch becomes a `Counterexample`; nothing is dropped.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from ..core.engine import MulticallerWithSender
from ..core.reference import MulticallerWithSenderSpec
from .config import HarnessConfig, harness_config_to_dict
from .observation import Observation, diff_observations, observe
from .scenario import EngineFactory, Scenario, build_world, run_world, sample_scenario, zero_scenario
from .shapes import Shape, enumerate_shapes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Counterexample:
    scenario: Scenario
    diffs: tuple[str, ...]
    optimized: Observation
    reference: Observation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scenario": self.scenario.to_dict(),
            "diffs": list(self.diffs),
            "optimized": self.optimized.to_dict(),
            "reference": self.reference.to_dict(),
        }


class EquivalenceError(AssertionError):
    """Raised by `assert_equivalent` when the engines diverge."""

    def __init__(self, counterexample: Counterexample) -> None:
        self.counterexample = counterexample
        super().__init__(
            f"engines diverge on {counterexample.scenario.shape.label()}: "
            + "; ".join(counterexample.diffs)
        )


@dataclass
class EquivalenceReport:
    config: HarnessConfig
    shapes_checked: int = 0
    scenarios_checked: int = 0
    counterexamples: list[Counterexample] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.counterexamples

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "config": harness_config_to_dict(self.config),
            "shapes_checked": self.shapes_checked,
            "scenarios_checked": self.scenarios_checked,
            "counterexamples": [c.to_dict() for c in self.counterexamples],
        }


def compare_engines(
    scenario: Scenario,
    optimized: EngineFactory = MulticallerWithSender,
    reference: EngineFactory = MulticallerWithSenderSpec,
) -> tuple[Observation, Observation, list[str]]:
    ours_world = build_world(scenario, optimized)
    ref_world = build_world(scenario, reference)
    ours = observe(ours_world, run_world(ours_world, scenario))
    ref = observe(ref_world, run_world(ref_world, scenario))
    return ours, ref, diff_observations(ours, ref)


def check_scenario(
    scenario: Scenario,
    optimized: EngineFactory = MulticallerWithSender,
    reference: EngineFactory = MulticallerWithSenderSpec,
) -> Optional[Counterexample]:
    ours, ref, diffs = compare_engines(scenario, optimized, reference)
    if not diffs:
        return None
    return Counterexample(scenario=scenario, diffs=tuple(diffs), optimized=ours, reference=ref)


def assert_equivalent(
    scenario: Scenario,
    optimized: EngineFactory = MulticallerWithSender,
    reference: EngineFactory = MulticallerWithSenderSpec,
) -> Observation:
    """Return the (shared) observation, or raise `EquivalenceError`."""
    ours, ref, diffs = compare_engines(scenario, optimized, reference)
    if diffs:
        raise EquivalenceError(Counterexample(scenario=scenario, diffs=tuple(diffs), optimized=ours, reference=ref))
    return ours


def scenarios_for_shape(shape: Shape, config: HarnessConfig, rng: random.Random) -> Iterator[Scenario]:
    yield zero_scenario(shape)
    for _ in range(config.samples_per_shape):
        yield sample_scenario(shape, rng, config)


def run_equivalence_sweep(
    config: HarnessConfig = HarnessConfig(),
    optimized: EngineFactory = MulticallerWithSender,
    reference: EngineFactory = MulticallerWithSenderSpec,
) -> EquivalenceReport:
    rng = random.Random(config.seed)
    report = EquivalenceReport(config=config)

    for shape in enumerate_shapes(config):
        report.shapes_checked += 1
        for scenario in scenarios_for_shape(shape, config, rng):
            report.scenarios_checked += 1
            counterexample = check_scenario(scenario, optimized, reference)
            if counterexample is None:
                continue
            logger.warning(
                "counterexample on %s: %s", shape.label(), "; ".join(counterexample.diffs)
            )
            report.counterexamples.append(counterexample)
            if config.stop_on_first_counterexample:
                return report

    logger.info(
        "equivalence sweep: shapes=%d scenarios=%d counterexamples=%d",
        report.shapes_checked,
        report.scenarios_checked,
        len(report.counterexamples),
    )
    return report
