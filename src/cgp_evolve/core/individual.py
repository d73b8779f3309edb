"""Individuals: the genotype of an evolved program and its interpreter.

An individual holds ``num_genes`` function genes and ``num_outputs`` output
selectors. Logical positions ``[0, num_inputs)`` address the program inputs,
position ``num_inputs + k`` addresses gene ``k``. Connections always point to
lower positions, so the graph is acyclic and a single forward pass over the
genes evaluates it.

Only genes reachable from an output ("active" genes) are evaluated or
rendered. Reachability is resolved lazily and cached on the instance.
Mutation always builds a new instance; self-healing in ``run`` rewrites a
gene in place and drops the cache.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from cgp_evolve.core.config import CGPConfig
from cgp_evolve.core.errors import ArityMismatch
from cgp_evolve.core.expression import render_expression
from cgp_evolve.core.gene import Gene

logger = logging.getLogger(__name__)


class Individual:
    """Genetic code of an evolved program plus its fitness.

    Attributes:
        genes: Function genes, in logical order.
        outputs: Logical positions read by each program output.
        config: Shared run configuration.
        fitness: Fitness assigned by the evaluator; ``inf`` until evaluated.
    """

    def __init__(
        self,
        config: CGPConfig,
        genes: List[Gene],
        outputs: List[int],
        fitness: float = math.inf,
    ):
        self.config = config
        self.genes = genes
        self.outputs = outputs
        self.fitness = fitness
        self._active: Optional[np.ndarray] = None

    @classmethod
    def random(cls, config: CGPConfig) -> 'Individual':
        """Create a random valid program."""
        rng = config.rng
        n_inputs = config.num_inputs

        genes = []
        for k in range(config.num_genes):
            function = int(rng.integers(len(config.functions)))
            constant = float(config.rand_const(rng))
            connections = [int(rng.integers(n_inputs + k)) for _ in range(config.max_arity)]
            genes.append(Gene(function, constant, connections))

        outputs = [int(rng.integers(config.num_positions)) for _ in range(config.num_outputs)]

        return cls(config, genes, outputs)

    def copy(self) -> 'Individual':
        """Deep copy of the genotype, keeping the fitness."""
        return Individual(
            self.config,
            [g.copy() for g in self.genes],
            list(self.outputs),
            fitness=self.fitness,
        )

    def mutate(self) -> 'Individual':
        """Return a mutated copy of this individual.

        The number of point mutations is ``mutation_rate`` times the number of
        mutable slots, rounded half up, and at least one. Each mutation picks a
        slot uniformly: a gene's function, constant or one of its connections,
        or an output selector.
        """
        config = self.config
        rng = config.rng
        slots_per_gene = 2 + config.max_arity
        gene_slots = config.num_genes * slots_per_gene

        mutant = Individual(
            config,
            [g.copy() for g in self.genes],
            list(self.outputs),
        )

        num_mutations = max(1, int(math.floor(config.mutation_rate * config.genotype_size + 0.5)))

        for _ in range(num_mutations):
            to_mutate = int(rng.integers(config.genotype_size))

            if to_mutate < gene_slots:
                k = to_mutate // slots_per_gene
                mutant.genes[k] = mutant.genes[k].mutate(k + config.num_inputs, config)
            else:
                mutant.outputs[to_mutate - gene_slots] = int(rng.integers(config.num_positions))

        return mutant

    # ------------------------------------------------------------------
    # Active-gene resolution
    # ------------------------------------------------------------------

    def _determine_active_genes(self) -> np.ndarray:
        if self._active is not None:
            return self._active

        config = self.config
        n_inputs = config.num_inputs
        active = np.zeros(config.num_positions, dtype=bool)
        active[:n_inputs] = True

        # worklist instead of recursion: genotypes can be deeper than the stack
        pending = list(self.outputs)
        while pending:
            position = pending.pop()
            if active[position]:
                continue
            active[position] = True

            gene = self.genes[position - n_inputs]
            arity = config.functions[gene.function].arity
            pending.extend(gene.connections[:arity])

        self._active = active
        return active

    def active_genes(self) -> np.ndarray:
        """Boolean mask over all logical positions; True where a position
        influences at least one output. Inputs are always active."""
        return self._determine_active_genes()

    @property
    def num_active(self) -> int:
        """Number of active function genes."""
        return int(self._determine_active_genes()[self.config.num_inputs:].sum())

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def run(self, inputs: Sequence[float]) -> np.ndarray:
        """Execute the evolved program.

        Genes whose function returns NaN are switched to function 0 and
        evaluated again with the same inputs. The switch is permanent: it
        rewrites the gene of this individual. The active-gene set is resolved
        again on the next call, since function 0 may read more connections
        than the function it replaced.

        Args:
            inputs: Exactly ``num_inputs`` values.

        Returns:
            Array of ``num_outputs`` values, one per output selector.

        Raises:
            ArityMismatch: If the number of inputs is wrong.
        """
        config = self.config
        n_inputs = config.num_inputs

        if len(inputs) != n_inputs:
            raise ArityMismatch(n_inputs, len(inputs))

        active = self._determine_active_genes()
        functions = config.functions

        node_output = np.zeros(config.num_positions)
        node_output[:n_inputs] = inputs

        healed = False
        function_input = np.zeros(1 + config.max_arity)
        for k, gene in enumerate(self.genes):
            position = k + n_inputs
            if not active[position]:
                continue

            arity = functions[gene.function].arity
            function_input.fill(0.0)
            function_input[0] = gene.constant
            function_input[1:1 + arity] = node_output[gene.connections[:arity]]

            value = functions[gene.function].eval(function_input)
            if math.isnan(value):
                logger.debug(
                    "gene %d: %s returned NaN, falling back to %s",
                    position, functions[gene.function].name, functions[0].name,
                )
                gene.function = 0
                healed = True
                value = functions[0].eval(function_input)
            node_output[position] = value

        if healed:
            self._active = None

        return node_output[self.outputs]

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def expr(self) -> str:
        """Render the evolved program as one equation per output."""
        return render_expression(self)

    def listing(self) -> str:
        """List inputs, active genes and outputs line by line."""
        config = self.config
        active = self._determine_active_genes()
        lines = [f"{i}: x{i}" for i in range(config.num_inputs)]

        for k, gene in enumerate(self.genes):
            position = k + config.num_inputs
            if active[position]:
                name = config.functions[gene.function].name
                lines.append(f"{position}: {name} {gene.connections} {gene.constant:f}")

        lines.extend(f"output{i}: {conn}" for i, conn in enumerate(self.outputs))
        return '\n'.join(lines)

    def genotype(self) -> Tuple[Tuple[Tuple[int, float, Tuple[int, ...]], ...], Tuple[int, ...]]:
        """Immutable snapshot of genes and outputs, for comparisons."""
        genes = tuple((g.function, g.constant, tuple(g.connections)) for g in self.genes)
        return genes, tuple(self.outputs)

    def __repr__(self) -> str:
        return (
            f"Individual(genes={len(self.genes)}, outputs={self.outputs}, "
            f"fitness={self.fitness})"
        )
