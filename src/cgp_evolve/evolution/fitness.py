"""Stock fitness evaluators.

Each factory closes over its data and returns a function that takes an
Individual and returns a cost (0 is perfect).
"""

from __future__ import annotations

import math
from typing import Callable, Sequence

import numpy as np

from cgp_evolve.core.individual import Individual

LOG_LOSS_EPS = 1e-15


def absolute_error(
    train: Sequence[Sequence[float]],
    target: Sequence[float],
) -> Callable[[Individual], float]:
    """Total absolute error of the first output over all training rows.

    Args:
        train: Input rows, each with ``num_inputs`` values.
        target: Expected first output for each row.

    Returns:
        Evaluator function.
    """
    rows = [np.asarray(row, dtype=float) for row in train]
    targets = np.asarray(target, dtype=float)
    if len(rows) != len(targets):
        raise ValueError(f"{len(rows)} training rows but {len(targets)} targets")

    def evaluate(ind: Individual) -> float:
        fitness = 0.0
        for row, expected in zip(rows, targets):
            output = ind.run(row)
            fitness += abs(expected - output[0])
        return fitness

    return evaluate


def log_loss(
    train: Sequence[Sequence[float]],
    target: Sequence[float],
) -> Callable[[Individual], float]:
    """Mean binary log loss of the first output, read as a probability.

    Outputs are clipped to ``[eps, 1 - eps]`` so that programs producing
    values outside (0, 1) get a large but finite cost.
    """
    rows = [np.asarray(row, dtype=float) for row in train]
    targets = np.asarray(target, dtype=float)
    if len(rows) != len(targets):
        raise ValueError(f"{len(rows)} training rows but {len(targets)} targets")
    if len(rows) == 0:
        raise ValueError("log_loss needs at least one training row")

    def evaluate(ind: Individual) -> float:
        total = 0.0
        for row, y in zip(rows, targets):
            p = float(np.clip(ind.run(row)[0], LOG_LOSS_EPS, 1.0 - LOG_LOSS_EPS))
            if math.isnan(p):
                return math.inf
            total += y * math.log(p) + (1.0 - y) * math.log(1.0 - p)
        return -total / len(rows)

    return evaluate


def mismatch_count(
    inputs: Sequence[float],
    expected: Sequence[float],
) -> Callable[[Individual], float]:
    """Number of outputs that differ from ``expected`` for a single input vector."""
    inputs = list(inputs)
    expected_arr = np.asarray(expected, dtype=float)

    def evaluate(ind: Individual) -> float:
        outputs = ind.run(inputs)
        return float(np.count_nonzero(outputs != expected_arr))

    return evaluate
