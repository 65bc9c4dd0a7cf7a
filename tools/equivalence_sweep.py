#!/usr/bin/env python3
"""Exhaustive-shape equivalence sweep: optimized engine vs reference specification.

Walks every shape in the harness config (batch length x payload length x
aliasing topology x per-target outcome), runs the all-zero scenario plus N
seeded random scenarios per shape against both engines, and reports every
divergence.

Exit status: 0 when no counterexample was found, 1 otherwise, 2 on bad arguments.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from batchcall.verification import (  # noqa: E402
    HarnessConfig,
    count_shapes,
    load_harness_config,
    run_equivalence_sweep,
)

logger = logging.getLogger("equivalence_sweep")


def _parse_int_list(s: str) -> tuple[int, ...]:
    out = []
    for part in s.split(","):
        part = part.strip()
        if not part:
            continue
        out.append(int(part, 10))
    return tuple(out)


def build_config(args: argparse.Namespace) -> HarnessConfig:
    config = load_harness_config(args.config) if args.config else HarnessConfig()
    overrides = {}
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.samples is not None:
        overrides["samples_per_shape"] = args.samples
    if args.batch_lengths:
        overrides["batch_lengths"] = _parse_int_list(args.batch_lengths)
    if args.payload_lengths:
        overrides["payload_lengths"] = _parse_int_list(args.payload_lengths)
    if args.initiators:
        overrides["initiator_roles"] = tuple(p.strip() for p in args.initiators.split(",") if p.strip())
    if args.no_reentrant:
        overrides["include_reentrant_targets"] = False
    if args.fail_fast:
        overrides["stop_on_first_counterexample"] = True
    return replace(config, **overrides) if overrides else config


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Differential equivalence sweep for the batch forwarder")
    ap.add_argument("--config", type=str, default="", help="YAML harness config")
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument("--samples", type=int, default=None, help="random scenarios per shape")
    ap.add_argument("--batch-lengths", type=str, default="", help="comma-separated, e.g. 0,1,2")
    ap.add_argument("--payload-lengths", type=str, default="", help="comma-separated, e.g. 1,31,32,65")
    ap.add_argument("--no-reentrant", action="store_true", help="only succeed/revert target outcomes")
    ap.add_argument("--initiators", type=str, default="", help="comma-separated roles: account,zero,target")
    ap.add_argument("--fail-fast", action="store_true", help="stop at the first counterexample")
    ap.add_argument("--out", type=str, default="", help="write the JSON report here")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except (TypeError, ValueError, OSError) as exc:
        logger.error("invalid harness config: %s", exc)
        return 2

    logger.info("sweeping %d shapes (seed=%d, samples/shape=%d)", count_shapes(config), config.seed, config.samples_per_shape)
    report = run_equivalence_sweep(config)

    for cex in report.counterexamples:
        logger.error("COUNTEREXAMPLE %s", json.dumps(cex.scenario.to_dict(), sort_keys=True))
        for diff in cex.diffs:
            logger.error("  %s", diff)

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(report.to_dict(), indent=2, sort_keys=True) + "\n", encoding="utf-8")
        logger.info("wrote %s", out_path)

    print(
        f"shapes={report.shapes_checked} scenarios={report.scenarios_checked} "
        f"counterexamples={len(report.counterexamples)} -> {'OK' if report.ok else 'DIVERGENT'}"
    )
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
