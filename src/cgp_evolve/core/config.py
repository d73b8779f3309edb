"""Run configuration shared by every individual of a CGP run."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

import numpy as np

from cgp_evolve.core.errors import ConfigurationError
from cgp_evolve.core.functions import Function

if TYPE_CHECKING:
    from cgp_evolve.core.individual import Individual


RandConstFunction = Callable[[np.random.Generator], float]
EvalFunction = Callable[["Individual"], float]


@dataclass(frozen=True)
class CGPConfig:
    """Parameters and callables of a CGP run.

    The configuration is validated once on construction and is read-only
    afterwards. Every individual keeps a reference to it.

    Attributes:
        population_size: Parent plus offspring per generation (>= 2).
        num_genes: Number of function genes in a genotype (>= 0).
        mutation_rate: Fraction of genotype slots mutated per offspring, in [0, 1].
        num_inputs: Number of program inputs (>= 1).
        num_outputs: Number of program outputs (>= 1).
        max_arity: Number of connections per gene (>= 0).
        functions: Function set; index 0 is the fallback for NaN results.
        rand_const: Draws a gene constant from the run's generator.
        evaluator: Returns the fitness of an individual; lower is better.
        rng: Pseudo-random source. A freshly seeded generator if omitted.
        n_workers: Parallel fitness evaluations per generation.
    """

    population_size: int
    num_genes: int
    mutation_rate: float
    num_inputs: int
    num_outputs: int
    max_arity: int
    functions: List[Function]
    rand_const: RandConstFunction
    evaluator: EvalFunction
    rng: Optional[np.random.Generator] = field(default=None, compare=False)
    n_workers: Optional[int] = None

    def __post_init__(self):
        """Check construction rules and fill in defaults."""
        if self.population_size < 2:
            raise ConfigurationError("Population size must be at least 2.")
        if self.num_genes < 0:
            raise ConfigurationError("num_genes can't be negative.")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ConfigurationError("Mutation rate must be between 0 and 1.")
        if self.num_inputs < 1:
            raise ConfigurationError("num_inputs must be at least 1.")
        if self.num_outputs < 1:
            raise ConfigurationError("At least one output is necessary.")
        if self.max_arity < 0:
            raise ConfigurationError("max_arity can't be negative.")
        if not self.functions:
            raise ConfigurationError("At least one function must be provided.")
        for function in self.functions:
            if not 0 <= function.arity <= self.max_arity:
                raise ConfigurationError(
                    f"Function '{function.name}' has arity {function.arity}, "
                    f"outside [0, {self.max_arity}]"
                )
        if self.rand_const is None:
            raise ConfigurationError("You must supply a rand_const function.")
        if self.evaluator is None:
            raise ConfigurationError("You must supply an evaluator function.")
        if self.n_workers is not None and self.n_workers < 1:
            raise ConfigurationError("n_workers must be at least 1.")

        # frozen dataclass: defaults are filled in through object.__setattr__
        object.__setattr__(self, "functions", list(self.functions))
        if self.rng is None:
            object.__setattr__(self, "rng", np.random.default_rng())
        if self.n_workers is None:
            workers = min(self.population_size - 1, os.cpu_count() or 1)
            object.__setattr__(self, "n_workers", max(1, workers))

    @property
    def num_positions(self) -> int:
        """Size of the logical position space (inputs followed by genes)."""
        return self.num_inputs + self.num_genes

    @property
    def genotype_size(self) -> int:
        """Number of independently mutable slots in a genotype."""
        return self.num_genes * (2 + self.max_arity) + self.num_outputs

    def to_dict(self) -> Dict[str, Any]:
        return {
            'population_size': self.population_size,
            'num_genes': self.num_genes,
            'mutation_rate': self.mutation_rate,
            'num_inputs': self.num_inputs,
            'num_outputs': self.num_outputs,
            'max_arity': self.max_arity,
            'functions': [f.name for f in self.functions],
            'n_workers': self.n_workers,
        }
