"""Genotype representation and interpreter for Cartesian Genetic Programming."""

from cgp_evolve.core.errors import ArityMismatch, ConfigurationError
from cgp_evolve.core.functions import (
    Function,
    DEFAULT_FUNCTIONS,
    ARITHMETIC_FUNCTIONS,
    pass_through,
    max_arity,
    get_functions,
)
from cgp_evolve.core.config import CGPConfig
from cgp_evolve.core.gene import Gene
from cgp_evolve.core.individual import Individual
from cgp_evolve.core.expression import render_expression

__all__ = [
    "ArityMismatch",
    "ConfigurationError",
    "Function",
    "DEFAULT_FUNCTIONS",
    "ARITHMETIC_FUNCTIONS",
    "pass_through",
    "max_arity",
    "get_functions",
    "CGPConfig",
    "Gene",
    "Individual",
    "render_expression",
]
