"""Quick start example for cgp_evolve.

Evolves two small programs: one reversing its three inputs, one
approximating pi from constants.
"""

import math

import numpy as np

from cgp_evolve import CGP, CGPConfig
from cgp_evolve.core.functions import ARITHMETIC_FUNCTIONS, pass_through
from cgp_evolve.evolution.fitness import absolute_error, mismatch_count
from cgp_evolve.utils.logging import setup_logger


def main():
    setup_logger()
    print("CGP - Quick Start Demo")
    print("=" * 50)

    print("\n1. Reversing three inputs with pass-through functions...")
    config = CGPConfig(
        population_size=5,
        num_genes=10,
        mutation_rate=0.01,
        num_inputs=3,
        num_outputs=3,
        max_arity=2,
        functions=[pass_through("pass1", 1, 2), pass_through("pass2", 2, 2)],
        rand_const=lambda rng: 0.0,
        evaluator=mismatch_count([1, 2, 3], [3, 2, 1]),
        rng=np.random.default_rng(42),
    )
    gp = CGP(config)
    gens, elapsed = gp.solve(1000, 0.0, report_progress=True)
    print(f"   {gens} generations, {elapsed:.2f}s, fitness={gp.parent.fitness}")
    print(f"   run([1, 2, 3]) = {gp.parent.run([1, 2, 3]).tolist()}")

    print("\n2. Approximating pi from constants...")
    train = [[0.0] for _ in range(50)]
    target = [math.pi] * 50
    config = CGPConfig(
        population_size=10,
        num_genes=30,
        mutation_rate=0.1,
        num_inputs=1,
        num_outputs=1,
        max_arity=2,
        functions=ARITHMETIC_FUNCTIONS,
        rand_const=lambda rng: rng.random(),
        evaluator=absolute_error(train, target),
        rng=np.random.default_rng(7),
    )
    gp = CGP(config)
    gens, elapsed = gp.solve(5000, 0.01, report_progress=True)
    print(f"   {gens} generations ({gp.num_evaluations} evaluations), {elapsed:.2f}s")
    print(f"   {gp.parent.expr()}")
    print(f"   value = {gp.parent.run([0.0])[0]:.6f}")

    print("\n" + "=" * 50)
    print("Quick start complete!")


if __name__ == "__main__":
    main()
