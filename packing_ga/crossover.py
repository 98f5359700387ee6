"""
Crossover operators for the packing GA.

Implements slot-wise uniform crossover between two parent packings.
"""

from typing import Tuple

from .data_models import Gene
from .randomness import RandomSource


def uniform_crossover(
    parent_a: Gene,
    parent_b: Gene,
    rng: RandomSource,
    crossover_rate: float = 0.5
) -> Tuple[Gene, str]:
    """
    Combine two parents slot by slot.

    For each of the N slots, the child inherits the square from parent A
    with probability crossover_rate, otherwise from parent B.

    Args:
        parent_a: First parent
        parent_b: Second parent
        rng: Random source
        crossover_rate: Probability of taking a slot from parent A

    Returns:
        Tuple of (child_gene, crossover_mask) where crossover_mask holds one
        "A"/"B" character per slot

    Note:
        The child is unevaluated; its fitness is undefined until evaluated.
    """
    if len(parent_a) != len(parent_b):
        raise ValueError(
            f"Parents must have the same number of squares, got {len(parent_a)} and {len(parent_b)}"
        )

    squares = []
    mask = []
    for square_a, square_b in zip(parent_a.squares, parent_b.squares):
        if rng.random() < crossover_rate:
            squares.append(square_a)
            mask.append("A")
        else:
            squares.append(square_b)
            mask.append("B")

    return Gene(squares=squares), "".join(mask)
