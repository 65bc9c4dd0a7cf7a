"""`batchcall.verification`: differential equivalence harness.

Drives the optimized engine and the reference specification with identical
scenarios over every small shape (batch length, aliasing topology, payload
length, per-target outcome) and reports every observable divergence.

Public API:
- `HarnessConfig`, `load_harness_config(path)`
- `enumerate_shapes(config)`, `Shape`, `TargetBehavior`, `InitiatorRole`
- `Scenario`, `build_world`, `sample_scenario`
- `check_scenario`, `assert_equivalent`, `run_equivalence_sweep`
"""

from .config import HarnessConfig, harness_config_from_dict, load_harness_config
from .differential import (
    Counterexample,
    EquivalenceError,
    EquivalenceReport,
    assert_equivalent,
    check_scenario,
    compare_engines,
    run_equivalence_sweep,
)
from .observation import Observation, diff_observations, observe
from .scenario import ENGINE_ADDRESS, INITIATOR_ADDRESS, Scenario, World, build_world, run_world, sample_scenario
from .shapes import InitiatorRole, Shape, TargetBehavior, count_shapes, enumerate_shapes
from .targets import ScriptedTarget

__all__ = [
    "HarnessConfig",
    "harness_config_from_dict",
    "load_harness_config",
    "Counterexample",
    "EquivalenceError",
    "EquivalenceReport",
    "assert_equivalent",
    "check_scenario",
    "compare_engines",
    "run_equivalence_sweep",
    "Observation",
    "diff_observations",
    "observe",
    "ENGINE_ADDRESS",
    "INITIATOR_ADDRESS",
    "Scenario",
    "World",
    "build_world",
    "run_world",
    "sample_scenario",
    "InitiatorRole",
    "Shape",
    "TargetBehavior",
    "count_shapes",
    "enumerate_shapes",
    "ScriptedTarget",
]
