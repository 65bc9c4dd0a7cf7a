"""Oracle equivalence: optimized forwarder vs reference specification.

Every shape from the default harness configuration (batch length x payload
length x aliasing topology x per-target outcome x initiator) is checked on its all-zero
scenario, then fuzzed with Hypothesis over payload bytes, forwarded values,
attached funds and the engine's residual balance. Both engines must agree on
outcome, outputs, registers, balances and per-target bookkeeping.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from batchcall.core.abi import MAX_UINT256
from batchcall.verification import (
    HarnessConfig,
    Scenario,
    Shape,
    TargetBehavior,
    assert_equivalent,
    enumerate_shapes,
    run_equivalence_sweep,
)
from batchcall.verification.scenario import zero_scenario

SHAPES = list(enumerate_shapes(HarnessConfig()))

# ---------------------------------------------------------------------------
# Hypothesis strategies
# ---------------------------------------------------------------------------


def amounts() -> st.SearchStrategy[int]:
    """Small amounts most of the time, plus the uint256 boundaries."""
    return st.one_of(
        st.integers(min_value=0, max_value=1_000),
        st.sampled_from([0, 1, MAX_UINT256 - 1, MAX_UINT256]),
        st.integers(min_value=0, max_value=MAX_UINT256),
    )


@st.composite
def scenarios(draw, shape: Shape) -> Scenario:
    n = shape.batch_length
    return Scenario(
        shape=shape,
        payloads=tuple(
            draw(st.binary(min_size=shape.payload_length, max_size=shape.payload_length)) for _ in range(n)
        ),
        values=tuple(draw(amounts()) for _ in range(n)),
        attached_funds=draw(amounts()),
        engine_prefund=draw(amounts()),
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestZeroScenarioEquivalence:
    @pytest.mark.parametrize("shape", SHAPES, ids=[s.label() for s in SHAPES])
    def test_zero_scenario(self, shape: Shape):
        obs = assert_equivalent(zero_scenario(shape))
        assert obs.unlocked and obs.sender is None
        # With zero values nothing can fail for lack of funds; only a reverting target aborts.
        assert obs.ok == (TargetBehavior.REVERT not in shape.behaviors)


class TestFuzzedEquivalence:
    @pytest.mark.parametrize("shape", SHAPES, ids=[s.label() for s in SHAPES])
    def test_fuzzed_values(self, shape: Shape):
        @given(scenario=scenarios(shape))
        @settings(max_examples=6, deadline=None)
        def check(scenario: Scenario):
            obs = assert_equivalent(scenario)
            if not obs.ok:
                # An aborted batch leaves the initiator holding its attached funds.
                assert obs.initiator_balance == scenario.attached_funds
                assert all(t.calls == 0 and t.received == 0 for t in obs.targets)
            else:
                assert len(obs.outputs) == shape.batch_length

        check()


class TestSweep:
    def test_default_sweep_finds_no_counterexample(self):
        report = run_equivalence_sweep(HarnessConfig(samples_per_shape=2, seed=11))
        assert report.ok, [c.diffs for c in report.counterexamples]
        assert report.shapes_checked == len(SHAPES)
        assert report.scenarios_checked == 3 * len(SHAPES)

    def test_longer_batches(self):
        config = HarnessConfig(
            batch_lengths=(3,), payload_lengths=(32,), include_reentrant_targets=False, samples_per_shape=1
        )
        report = run_equivalence_sweep(config)
        assert report.ok
        # Topologies for N=3 with distinct counts 3, 2, 2, 1: 2^3 + 2^2 + 2^2 + 2^1 per
        # account or zero initiator, and 2^2 + 2 + 2 + 1 with the initiator as target 0.
        assert report.shapes_checked == 18 + 18 + 9
