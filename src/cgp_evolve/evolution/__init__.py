"""Evolutionary search over CGP genotypes.

The engine runs a (1 + lambda) strategy: one parent, ``population_size - 1``
mutated offspring per generation, elitist replacement.
"""

from cgp_evolve.evolution.engine import CGP
from cgp_evolve.evolution.fitness import absolute_error, log_loss, mismatch_count

__all__ = [
    "CGP",
    "absolute_error",
    "log_loss",
    "mismatch_count",
]
