"""Primitive functions available to evolved programs.

Every function receives a vector whose first element is the constant of
the gene being evaluated, followed by the values of the gene's connections.
Only the first ``arity`` connection slots carry data; the rest are zero.

Functions signal an undefined result by returning NaN. The evaluator then
falls back to function index 0 for that gene, so the first entry of a
function set should be a safe passthrough such as ``const``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Sequence

import numpy as np


@dataclass(frozen=True)
class Function:
    """A named primitive with a fixed number of inputs."""

    name: str
    arity: int
    eval: Callable[[np.ndarray], float]

    def __call__(self, inputs: np.ndarray) -> float:
        return self.eval(inputs)


def _div(x: np.ndarray) -> float:
    if x[2] == 0:
        return math.nan
    return x[1] / x[2]


def _log(x: np.ndarray) -> float:
    if x[1] <= 0:
        return math.nan
    return math.log(x[1])


def _exp(x: np.ndarray) -> float:
    try:
        return math.exp(x[1])
    except OverflowError:
        return math.nan


def _tan(x: np.ndarray) -> float:
    if math.isinf(x[1]):
        return math.nan
    return math.tan(x[1])


def _sin(x: np.ndarray) -> float:
    if math.isinf(x[1]):
        return math.nan
    return math.sin(x[1])


CONST = Function("const", 0, lambda x: x[0])
ADD = Function("add", 2, lambda x: x[1] + x[2])
SUB = Function("sub", 2, lambda x: x[1] - x[2])
MUL = Function("mul", 2, lambda x: x[1] * x[2])
DIV = Function("div", 2, _div)
SIN = Function("sin", 1, _sin)
TAN = Function("tan", 1, _tan)
LOG = Function("log", 1, _log)
EXP = Function("exp", 1, _exp)
IFF = Function("iff", 1, lambda x: 1.0 if x[1] > 0 else 0.0)

# const comes first: it is the fallback for genes that produce NaN
DEFAULT_FUNCTIONS: List[Function] = [CONST, ADD, SUB, MUL, DIV, SIN, TAN, LOG, EXP, IFF]
ARITHMETIC_FUNCTIONS: List[Function] = [CONST, ADD, SUB, MUL]


def pass_through(name: str, slot: int, arity: int) -> Function:
    """Create a function that returns one of its connection inputs unchanged.

    Args:
        name: Function name used in expressions.
        slot: Which connection to forward (1-based, slot 0 is the constant).
        arity: Declared arity of the function.

    Returns:
        The pass-through Function.
    """
    if not 1 <= slot <= arity:
        raise ValueError(f"slot must be in [1, {arity}], got {slot}")
    return Function(name, arity, lambda x: x[slot])


def max_arity(functions: Sequence[Function]) -> int:
    """Return the largest arity in a function set (0 for an empty set)."""
    return max((f.arity for f in functions), default=0)


def get_functions(names: Sequence[str]) -> List[Function]:
    """Look up stock functions by name, preserving the requested order."""
    by_name = {f.name: f for f in DEFAULT_FUNCTIONS}
    unknown = [n for n in names if n not in by_name]
    if unknown:
        raise ValueError(f"Unknown functions: {unknown}. Available: {list(by_name)}")
    return [by_name[n] for n in names]
