"""Timing of recycled binary ops, mask extraction, and growth-on-write over increasing sizes."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable

from _bench_utils import host_metadata, mean, percentile, sample_ms, stddev

from atomvec import assign, binary_op, combine, extract, sequence


@dataclass(frozen=True)
class BenchCase:
    name: str
    note: str
    build_args: Callable[[int], tuple[object, ...]]
    fn: Callable[..., object]


@dataclass(frozen=True)
class BenchRow:
    name: str
    size: int
    repeats: int
    samples: int
    mean_ms: float
    p50_ms: float
    p90_ms: float
    stddev_ms: float


def _grow(v, position):
    return assign(v, [position], 0)


CASES: tuple[BenchCase, ...] = (
    BenchCase(
        name="add_recycled",
        note="size-n vector plus a length-2 vector",
        build_args=lambda n: (sequence(1, n), combine(1, 2)),
        fn=lambda a, b: binary_op("+", a, b),
    ),
    BenchCase(
        name="compare_scalar",
        note="size-n double vector compared against a scalar",
        build_args=lambda n: (sequence(0, 1, 1 / n), 0.5),
        fn=lambda a, t: binary_op(">", a, t),
    ),
    BenchCase(
        name="mask_extract",
        note="extract with an alternating recycled mask",
        build_args=lambda n: (sequence(1, n), [True, False]),
        fn=extract,
    ),
    BenchCase(
        name="exclude_one",
        note="negative-index complement of a single position",
        build_args=lambda n: (sequence(1, n), [-1]),
        fn=extract,
    ),
    BenchCase(
        name="grow_by_one",
        note="assign one position past the end of a fresh copy",
        build_args=lambda n: (sequence(1, n), n + 1),
        fn=lambda v, p: _grow(extract(v), p),
    ),
)


def run(sizes: list[int], *, repeats: int, warmup: int, samples: int, only: set[str] | None) -> list[BenchRow]:
    rows: list[BenchRow] = []
    for case in CASES:
        if only and case.name not in only:
            continue
        for size in sizes:
            args = case.build_args(size)
            timings = sample_ms(case.fn, args, repeats=repeats, warmup=warmup, samples=samples)
            rows.append(
                BenchRow(
                    name=case.name,
                    size=size,
                    repeats=repeats,
                    samples=samples,
                    mean_ms=mean(timings),
                    p50_ms=percentile(timings, 0.5),
                    p90_ms=percentile(timings, 0.9),
                    stddev_ms=stddev(timings),
                )
            )
            print(f"{case.name:<16} n={size:<8} mean={rows[-1].mean_ms:.4f} ms")
    return rows


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--sizes", type=int, nargs="+", default=[10, 1_000, 100_000])
    parser.add_argument("--repeats", type=int, default=20)
    parser.add_argument("--warmup", type=int, default=3)
    parser.add_argument("--samples", type=int, default=5)
    parser.add_argument("--only", nargs="*", default=None, help="benchmark names to run")
    parser.add_argument("--json-out", type=Path, default=None)
    args = parser.parse_args()

    rows = run(
        args.sizes,
        repeats=args.repeats,
        warmup=args.warmup,
        samples=args.samples,
        only=set(args.only) if args.only else None,
    )
    if args.json_out is not None:
        payload = {"host": host_metadata(), "rows": [asdict(row) for row in rows]}
        args.json_out.parent.mkdir(parents=True, exist_ok=True)
        args.json_out.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


if __name__ == "__main__":
    main()
