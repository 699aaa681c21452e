# ruff: noqa: B008
"""Evaluation harness for sketch accuracy across precisions and cardinalities."""

from __future__ import annotations

import json
import random
from pathlib import Path

import typer

from hll_core.sketches import HyperLogLog

DEFAULT_CARDINALITIES = [1, 100, 1_000, 10_000, 100_000]
SAFETY_MULTIPLIER = 6.0

app = typer.Typer(help="Run accuracy evaluations of the HyperLogLog estimator.")


def evaluate_point(precision: int, cardinality: int, seed: int) -> dict[str, float | int | bool]:
    rng = random.Random(f"{seed}:{precision}:{cardinality}")
    sketch = HyperLogLog.new(precision)
    for _ in range(cardinality):
        sketch.add_hash(rng.getrandbits(64))
    estimate = sketch.count()
    rel_error = abs(estimate - cardinality) / cardinality if cardinality else float(estimate)
    bound = SAFETY_MULTIPLIER * sketch.error_rate()
    return {
        "precision": precision,
        "cardinality": cardinality,
        "estimate": estimate,
        "relative_error": rel_error,
        "bound": bound,
        "within_bound": rel_error <= bound,
    }


@app.command()
def main(
    precisions: list[int] = typer.Option([10, 14], help="Precisions (P) to sweep"),
    cardinalities: list[int] = typer.Option(
        DEFAULT_CARDINALITIES, help="Distinct element counts to insert"
    ),
    seed: int = typer.Option(20251009, help="Random seed"),
    out: Path = typer.Option(Path("results/accuracy.json"), help="Output results path"),
) -> None:
    """Write one result row per (precision, cardinality) pair as JSON."""

    out.parent.mkdir(parents=True, exist_ok=True)
    results = [
        evaluate_point(precision, cardinality, seed)
        for precision in precisions
        for cardinality in cardinalities
    ]
    with out.open("w", encoding="utf-8") as fp:
        json.dump(results, fp, indent=2)
    failures = sum(1 for row in results if not row["within_bound"])
    typer.echo(f"wrote {len(results)} results to {out} ({failures} outside bound)")


if __name__ == "__main__":
    app()
