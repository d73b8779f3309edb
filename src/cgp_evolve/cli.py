"""Command-line interface for cgp_evolve."""

from __future__ import annotations

import argparse
import logging
import math
import signal
import sys
from typing import List, Optional

import numpy as np

from cgp_evolve.core.config import CGPConfig
from cgp_evolve.core.functions import (
    ARITHMETIC_FUNCTIONS,
    DEFAULT_FUNCTIONS,
    get_functions,
    max_arity,
    pass_through,
)
from cgp_evolve.evolution.engine import CGP
from cgp_evolve.evolution.fitness import absolute_error, log_loss, mismatch_count
from cgp_evolve.data.training import read_training_data
from cgp_evolve.utils.logging import setup_logger

logger = logging.getLogger("cgp_evolve.cli")


def _solve_with_interrupts(gp: CGP, args: argparse.Namespace) -> int:
    """Run ``gp.solve`` so that Ctrl+C finishes the current generation and stops."""

    def signal_handler(signum, frame):
        logger.info("[SHUTDOWN] Stop requested, finishing current generation...")
        gp.request_stop()

    previous = {
        sig: signal.signal(sig, signal_handler)
        for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        gens, elapsed = gp.solve(
            args.generations,
            fitness_threshold=args.threshold,
            report_progress=not args.quiet,
        )
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    parent = gp.parent
    logger.info(
        "Solution after %d generations (%d evaluations): fitness=%f\n%s",
        gens, gp.num_evaluations, parent.fitness, parent.expr(),
    )
    logger.info("Elapsed time: %.2fs", elapsed)
    if args.list:
        logger.info(parent.listing())
    return 0


def cmd_fit(args: argparse.Namespace) -> int:
    """Symbolic regression on a training file."""
    td = read_training_data(args.data, header=not args.no_header, sep=args.sep)
    logger.info(
        "Loaded %d rows with %d inputs from %s", len(td), td.num_inputs, args.data
    )

    if args.fitness == "logloss":
        evaluator = log_loss(td.train, td.target)
    else:
        evaluator = absolute_error(td.train, td.target)

    if args.functions:
        functions = get_functions([n.strip() for n in args.functions.split(",")])
    else:
        functions = DEFAULT_FUNCTIONS

    config = CGPConfig(
        population_size=args.population,
        num_genes=args.genes,
        mutation_rate=args.mutation_rate,
        num_inputs=td.num_inputs,
        num_outputs=1,
        max_arity=max_arity(functions),
        functions=functions,
        rand_const=lambda rng: rng.random(),
        evaluator=evaluator,
        rng=np.random.default_rng(args.seed),
        n_workers=args.workers,
    )
    return _solve_with_interrupts(CGP(config), args)


def cmd_constant(args: argparse.Namespace) -> int:
    """Evolve the constant pi from all-zero inputs."""
    num_train = 50
    train = [[0.0] for _ in range(num_train)]
    target = [math.pi] * num_train

    config = CGPConfig(
        population_size=args.population,
        num_genes=args.genes,
        mutation_rate=args.mutation_rate,
        num_inputs=1,
        num_outputs=1,
        max_arity=max_arity(ARITHMETIC_FUNCTIONS),
        functions=ARITHMETIC_FUNCTIONS,
        rand_const=lambda rng: rng.random(),
        evaluator=absolute_error(train, target),
        rng=np.random.default_rng(args.seed),
        n_workers=args.workers,
    )
    return _solve_with_interrupts(CGP(config), args)


def cmd_reverse(args: argparse.Namespace) -> int:
    """Evolve a program that reverses three inputs."""
    config = CGPConfig(
        population_size=args.population,
        num_genes=args.genes,
        mutation_rate=args.mutation_rate,
        num_inputs=3,
        num_outputs=3,
        max_arity=2,
        functions=[pass_through("pass1", 1, 2), pass_through("pass2", 2, 2)],
        rand_const=lambda rng: 0.0,
        evaluator=mismatch_count([1, 2, 3], [3, 2, 1]),
        rng=np.random.default_rng(args.seed),
        n_workers=args.workers,
    )
    return _solve_with_interrupts(CGP(config), args)


def _add_run_arguments(
    parser: argparse.ArgumentParser,
    population: int,
    genes: int,
    mutation_rate: float,
    generations: int,
    threshold: float,
) -> None:
    parser.add_argument("--population", type=int, default=population, help="Population size (parent + offspring)")
    parser.add_argument("--genes", type=int, default=genes, help="Number of function genes")
    parser.add_argument("--mutation-rate", type=float, default=mutation_rate, help="Mutation rate")
    parser.add_argument("--generations", type=int, default=generations, help="Maximum generations")
    parser.add_argument("--threshold", type=float, default=threshold, help="Stop at or below this fitness")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--workers", type=int, default=None, help="Parallel evaluation workers")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    parser.add_argument("--list", action="store_true", help="List the active genes of the solution")
    parser.add_argument("--quiet", action="store_true", help="Do not report progress")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cgp-evolve",
        description="Cartesian Genetic Programming",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    fit_parser = subparsers.add_parser("fit", help="Symbolic regression on a CSV file")
    fit_parser.add_argument("data", help="Training file; the last column is the target")
    fit_parser.add_argument("--no-header", action="store_true", help="File has no header line")
    fit_parser.add_argument("--sep", default=",", help="Column separator")
    fit_parser.add_argument("--fitness", choices=["abs", "logloss"], default="abs", help="Fitness function")
    fit_parser.add_argument(
        "--functions", default=None,
        help="Comma-separated function names, function 0 first (default: all)",
    )
    _add_run_arguments(fit_parser, 300, 100, 0.1, 10000, 0.001)

    const_parser = subparsers.add_parser("constant", help="Evolve the constant pi")
    _add_run_arguments(const_parser, 10, 30, 0.1, 5000, 1.0)

    reverse_parser = subparsers.add_parser("reverse", help="Evolve reversal of three inputs")
    _add_run_arguments(reverse_parser, 5, 10, 0.01, 1000, 0.0)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    setup_logger(args.log_file)

    commands = {
        "fit": cmd_fit,
        "constant": cmd_constant,
        "reverse": cmd_reverse,
    }

    try:
        return commands[args.command](args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
