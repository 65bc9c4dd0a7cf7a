"""
Equivalence harness configuration.

`HarnessConfig` is a frozen dataclass; `load_harness_config` reads the same
fields from a YAML mapping, e.g.:

    batch_lengths: [0, 1, 2]
    payload_lengths: [1, 31, 32, 65]
    include_reentrant_targets: true
    initiator_roles: [account, zero, target]
    samples_per_shape: 4
    seed: 7
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..core.abi import MAX_UINT256
from .shapes import InitiatorRole


# Aliasing topologies grow as 2^(N-1) and outcome vectors as 5^distinct.
MAX_BATCH_LENGTH = 6


def _require_int(value: Any, *, name: str, lo: int = 0, hi: int | None = None) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < lo or (hi is not None and value > hi):
        raise ValueError(f"{name} out of range: {value}")
    return int(value)


def _require_int_tuple(value: Any, *, name: str, lo: int = 0, hi: int | None = None) -> tuple[int, ...]:
    if not isinstance(value, (list, tuple)) or not value:
        raise TypeError(f"{name} must be a non-empty list of ints")
    out = tuple(_require_int(v, name=f"{name}[{i}]", lo=lo, hi=hi) for i, v in enumerate(value))
    if len(set(out)) != len(out):
        raise ValueError(f"{name} must not contain duplicates")
    return out


def _require_roles(value: Any) -> tuple[InitiatorRole, ...]:
    if not isinstance(value, (list, tuple)) or not value:
        raise TypeError("initiator_roles must be a non-empty list")
    out = tuple(InitiatorRole(v) for v in value)
    if len(set(out)) != len(out):
        raise ValueError("initiator_roles must not contain duplicates")
    return out


@dataclass(frozen=True)
class HarnessConfig:
    # Shapes explored exhaustively.
    batch_lengths: tuple[int, ...] = (0, 1, 2)
    payload_lengths: tuple[int, ...] = (1, 31, 32, 65)
    # Adds the nested-aggregate target behaviors to the per-target outcome space.
    include_reentrant_targets: bool = True
    # Who submits each batch; every role is swept.
    initiator_roles: tuple[InitiatorRole, ...] = tuple(InitiatorRole)

    # Value exploration per shape: one all-zero scenario plus `samples_per_shape` random ones.
    samples_per_shape: int = 4
    small_value_bound: int = 1_000
    max_value: int = MAX_UINT256
    seed: int = 0

    stop_on_first_counterexample: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "batch_lengths",
            _require_int_tuple(self.batch_lengths, name="batch_lengths", hi=MAX_BATCH_LENGTH),
        )
        object.__setattr__(
            self,
            "payload_lengths",
            _require_int_tuple(self.payload_lengths, name="payload_lengths", hi=1 << 16),
        )
        object.__setattr__(self, "initiator_roles", _require_roles(self.initiator_roles))
        if not isinstance(self.include_reentrant_targets, bool):
            raise TypeError("include_reentrant_targets must be a bool")
        if not isinstance(self.stop_on_first_counterexample, bool):
            raise TypeError("stop_on_first_counterexample must be a bool")
        _require_int(self.samples_per_shape, name="samples_per_shape")
        _require_int(self.max_value, name="max_value", hi=MAX_UINT256)
        _require_int(self.small_value_bound, name="small_value_bound", hi=self.max_value)
        _require_int(self.seed, name="seed")


_FIELD_NAMES = frozenset(f.name for f in fields(HarnessConfig))


def harness_config_from_dict(d: Mapping[str, Any]) -> HarnessConfig:
    """Build a config from a mapping. Unknown keys are rejected."""
    if not isinstance(d, Mapping):
        raise TypeError("harness config must be a mapping")
    unknown = sorted(set(d) - _FIELD_NAMES)
    if unknown:
        raise ValueError(f"unknown harness config keys: {', '.join(map(str, unknown))}")
    return HarnessConfig(**dict(d))


def load_harness_config(path: str | Path) -> HarnessConfig:
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if obj is None:
        return HarnessConfig()
    return harness_config_from_dict(obj)


def harness_config_to_dict(config: HarnessConfig) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for f in fields(HarnessConfig):
        value = getattr(config, f.name)
        if isinstance(value, tuple):
            value = [v.value if isinstance(v, InitiatorRole) else v for v in value]
        out[f.name] = value
    return out
