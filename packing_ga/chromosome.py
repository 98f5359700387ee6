"""
Chromosome initialization and fitness evaluation.

A gene is scored by summing pairwise overlap area and the area of each
square lying outside the container, each term scaled by its penalty weight.
"""

import math
from typing import List

from squarepack.config_loader import PackingConfig
from squarepack.geometry import Point, Square, overlap_area

from .data_models import Gene
from .randomness import RandomSource


def random_square(config: PackingConfig, rng: RandomSource) -> Square:
    """Square with a uniform center in [0, L]^2 and uniform rotation in [0, 2*pi)."""
    side = config.container_side
    return Square(
        Point(rng.uniform_real(0, side), rng.uniform_real(0, side)),
        rng.uniform_real(0, 2 * math.pi),
        config.square_side,
    )


def init_random_gene(config: PackingConfig, rng: RandomSource) -> Gene:
    """
    Create a gene with every square placed uniformly at random.

    Args:
        config: Packing configuration
        rng: Random source

    Returns:
        Unevaluated Gene with config.gene_size squares
    """
    return Gene(squares=[random_square(config, rng) for _ in range(config.gene_size)])


def grid_dimension(config: PackingConfig) -> int:
    return math.ceil(math.sqrt(config.gene_size))


def grid_fits(config: PackingConfig) -> bool:
    """Check whether the ceil(sqrt(N)) square grid fits in the container."""
    return grid_dimension(config) * config.square_side <= config.container_side


def init_grid_seeded_gene(config: PackingConfig, rng: RandomSource) -> Gene:
    """
    Create a gene laid out on a centered, axis-aligned grid.

    Squares fill a ceil(sqrt(N)) x ceil(sqrt(N)) grid row by row with
    spacing equal to the square side. When that grid is wider than the
    container, a random gene is returned instead.

    Args:
        config: Packing configuration
        rng: Random source (only consumed by the random fallback)

    Returns:
        Unevaluated Gene
    """
    if not grid_fits(config):
        return init_random_gene(config, rng)

    grid_dim = grid_dimension(config)
    spacing = config.square_side
    start_offset = max(0.0, (config.container_side - grid_dim * spacing) / 2.0)
    center_offset = spacing / 2.0

    squares = []
    for i in range(grid_dim):
        for j in range(grid_dim):
            if len(squares) == config.gene_size:
                break
            squares.append(Square(
                Point(start_offset + j * spacing + center_offset,
                      start_offset + i * spacing + center_offset),
                0.0,
                config.square_side,
            ))

    return Gene(squares=squares)


def compute_fitness(squares: List[Square], config: PackingConfig) -> float:
    """
    Penalty score of a packing.

    fitness = W_overlap * sum_{i<j} overlap(i, j)
            + W_bounds * sum_i (s^2 - overlap(i, container))

    Returns:
        Non-negative score, zero iff no two squares overlap and every square
        lies inside the container
    """
    container = config.container
    overlap_penalty = 0.0
    bounds_penalty = 0.0

    for i, square in enumerate(squares):
        for other in squares[i + 1:]:
            overlap_penalty += overlap_area(square, other)
        bounds_penalty += square.area - overlap_area(square, container)

    # Round-off in the polygon area must not push a valid packing below zero
    return max(0.0, config.overlap_weight * overlap_penalty +
               config.out_of_bounds_weight * bounds_penalty)


def evaluate_fitness(gene: Gene, config: PackingConfig) -> float:
    """
    Recompute and store the gene's fitness.

    Must be called whenever any square in the gene changes.

    Returns:
        The new fitness value
    """
    gene.fitness = compute_fitness(gene.squares, config)
    return gene.fitness
