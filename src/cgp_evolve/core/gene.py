"""Function genes of a CGP genotype."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from cgp_evolve.core.config import CGPConfig


@dataclass
class Gene:
    """One node of the computation graph.

    Attributes:
        function: Index into the configured function set.
        constant: Constant passed to the function as its first input.
        connections: Logical positions feeding this node. A gene at logical
            position p only connects to positions in [0, p).
    """

    function: int
    constant: float
    connections: List[int] = field(default_factory=list)

    def copy(self) -> 'Gene':
        return Gene(self.function, self.constant, list(self.connections))

    def mutate(self, position: int, config: 'CGPConfig') -> 'Gene':
        """Return a copy with the function, the constant or one connection redrawn.

        Args:
            position: Logical position of this gene.
            config: Run configuration providing the random source.

        Returns:
            The mutated copy. This gene is left untouched.
        """
        mutant = self.copy()
        rng = config.rng

        to_mutate = int(rng.integers(2 + len(self.connections)))

        if to_mutate == 0:
            mutant.function = int(rng.integers(len(config.functions)))
        elif to_mutate == 1:
            mutant.constant = float(config.rand_const(rng))
        elif position <= 0:
            # guard only: genes sit at position >= num_inputs >= 1
            mutant.connections[to_mutate - 2] = 0
        else:
            mutant.connections[to_mutate - 2] = int(rng.integers(position))

        return mutant
