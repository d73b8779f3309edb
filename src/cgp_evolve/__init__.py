"""cgp_evolve - Cartesian Genetic Programming with parallel fitness evaluation."""

__version__ = "0.1.0"

from cgp_evolve.core import (
    ArityMismatch,
    ConfigurationError,
    Function,
    DEFAULT_FUNCTIONS,
    ARITHMETIC_FUNCTIONS,
    CGPConfig,
    Gene,
    Individual,
)
from cgp_evolve.evolution import CGP

__all__ = [
    "ArityMismatch",
    "ConfigurationError",
    "Function",
    "DEFAULT_FUNCTIONS",
    "ARITHMETIC_FUNCTIONS",
    "CGPConfig",
    "Gene",
    "Individual",
    "CGP",
]
