"""
Concrete equivalence scenarios and the worlds they run in.

A `Scenario` is a `Shape` plus concrete values: payload bytes, forwarded
values, attached funds and the engine's residual balance before the batch.
`build_world` turns a scenario into a fresh substrate with one engine (from
the given factory), one `ScriptedTarget` per distinct target and a funded
initiator. The initiator is a fixed account or the zero address; when it is
also dispatched to, it stays a plain account and receives value like one.
Two worlds built from the same scenario share every address, so their
observations compare field by field.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Any, Callable, Dict

from ..core.batch import execute_batch
from ..core.forwarder import BatchForwarder
from ..core.substrate import Substrate
from ..core.types import BatchResult
from ..state.addresses import ZERO_ADDRESS, Address, derive_address
from .config import HarnessConfig
from .shapes import InitiatorRole, Shape
from .targets import ScriptedTarget


ENGINE_ADDRESS: Address = derive_address("batchcall:engine")
INITIATOR_ADDRESS: Address = derive_address("batchcall:initiator")

EngineFactory = Callable[[Address], BatchForwarder]


def target_address(slot: int) -> Address:
    return derive_address(f"batchcall:target:{slot}")


@dataclass(frozen=True)
class Scenario:
    shape: Shape
    payloads: tuple[bytes, ...]
    values: tuple[int, ...]
    attached_funds: int = 0
    engine_prefund: int = 0

    def __post_init__(self) -> None:
        n = self.shape.batch_length
        if len(self.payloads) != n or len(self.values) != n:
            raise ValueError(f"scenario must carry exactly {n} payloads and values")
        for i, payload in enumerate(self.payloads):
            if not isinstance(payload, bytes) or len(payload) != self.shape.payload_length:
                raise ValueError(f"payloads[{i}] must be {self.shape.payload_length} bytes")
        for i, value in enumerate(self.values):
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"values[{i}] must be a non-negative int")
        if self.attached_funds < 0 or self.engine_prefund < 0:
            raise ValueError("attached_funds and engine_prefund must be non-negative")

    @property
    def initiator(self) -> Address:
        if self.shape.initiator is InitiatorRole.ZERO:
            return ZERO_ADDRESS
        return INITIATOR_ADDRESS

    def slot_address(self, slot: int) -> Address:
        if slot == 0 and self.shape.initiator is InitiatorRole.TARGET:
            return self.initiator
        return target_address(slot)

    @property
    def targets(self) -> tuple[Address, ...]:
        return tuple(self.slot_address(slot) for slot in self.shape.target_slots())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shape": self.shape.label(),
            "initiator": self.initiator,
            "targets": list(self.targets),
            "payloads": ["0x" + p.hex() for p in self.payloads],
            "values": list(self.values),
            "attached_funds": self.attached_funds,
            "engine_prefund": self.engine_prefund,
        }


@dataclass
class World:
    substrate: Substrate
    engine: BatchForwarder
    targets: Dict[Address, ScriptedTarget]
    initiator: Address


def build_world(scenario: Scenario, engine_factory: EngineFactory) -> World:
    substrate = Substrate()
    engine = engine_factory(ENGINE_ADDRESS)
    substrate.deploy(engine)

    targets: Dict[Address, ScriptedTarget] = {}
    for slot, behavior in enumerate(scenario.shape.behaviors):
        address = scenario.slot_address(slot)
        if address == scenario.initiator:
            # The initiator stays a plain account.
            continue
        target = ScriptedTarget(address, behavior=behavior, engine=engine.address)
        substrate.deploy(target)
        targets[target.address] = target

    substrate.fund(engine.address, scenario.engine_prefund)
    substrate.fund(scenario.initiator, scenario.attached_funds)
    return World(substrate=substrate, engine=engine, targets=targets, initiator=scenario.initiator)


def run_world(world: World, scenario: Scenario) -> BatchResult:
    return execute_batch(
        world.substrate,
        world.engine.address,
        initiator=world.initiator,
        targets=scenario.targets,
        payloads=scenario.payloads,
        values=scenario.values,
        attached_funds=scenario.attached_funds,
    )


def zero_scenario(shape: Shape) -> Scenario:
    """All-zero payload bytes, values and funds."""
    n = shape.batch_length
    return Scenario(
        shape=shape,
        payloads=tuple(bytes(shape.payload_length) for _ in range(n)),
        values=(0,) * n,
    )


def draw_amount(rng: random.Random, config: HarnessConfig) -> int:
    """Boundary-biased amount in [0, config.max_value]."""
    roll = rng.random()
    if roll < 0.15:
        return 0
    if roll < 0.25:
        return min(1, config.max_value)
    if roll < 0.35:
        return config.max_value
    if roll < 0.75:
        return rng.randint(0, config.small_value_bound)
    return rng.randint(0, config.max_value)


def sample_scenario(shape: Shape, rng: random.Random, config: HarnessConfig) -> Scenario:
    n = shape.batch_length
    return Scenario(
        shape=shape,
        payloads=tuple(rng.randbytes(shape.payload_length) for _ in range(n)),
        values=tuple(draw_amount(rng, config) for _ in range(n)),
        attached_funds=draw_amount(rng, config),
        engine_prefund=draw_amount(rng, config),
    )
