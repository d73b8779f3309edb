"""Symbolic rendering of evolved programs.

The rendered text is meant for people reading progress output. It expands
shared subgraphs in place, so its size can grow quickly with the depth of
the active graph.
"""

from __future__ import annotations

from typing import Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    from cgp_evolve.core.individual import Individual


INFIX_OPERATORS: Dict[str, str] = {
    'add': '+',
    'sub': '-',
    'mul': '*',
    'div': '/',
}
CONSTANT_FUNCTION = 'const'


def _render_gene(name: str, constant: float, args: List[str]) -> str:
    if name == CONSTANT_FUNCTION:
        return f"{constant:f}"
    if name in INFIX_OPERATORS and args:
        return "(" + INFIX_OPERATORS[name].join(args) + ")"
    return f"{name}(" + ",".join(args) + ")"


def render_nodes(individual: 'Individual') -> List[str]:
    """Render every active logical position of an individual.

    Positions are visited in increasing order so each gene finds its
    arguments already rendered. Inactive positions stay empty strings.
    """
    config = individual.config
    n_inputs = config.num_inputs
    active = individual.active_genes()

    rendered = [f"x{i}" for i in range(n_inputs)]
    for k, gene in enumerate(individual.genes):
        if not active[k + n_inputs]:
            rendered.append("")
            continue
        function = config.functions[gene.function]
        args = [rendered[c] for c in gene.connections[:function.arity]]
        rendered.append(_render_gene(function.name, gene.constant, args))

    return rendered


def render_expression(individual: 'Individual') -> str:
    """Render one ``f<i>(x0,...)=<expr>`` equation per output, newline separated."""
    rendered = render_nodes(individual)
    signature = ",".join(f"x{i}" for i in range(individual.config.num_inputs))

    return "\n".join(
        f"f{o}({signature})={rendered[position]}"
        for o, position in enumerate(individual.outputs)
    )
