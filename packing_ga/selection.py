"""
Selection operators for the packing GA.

Elitism, predation (random culling of non-elites) and tournament selection
over the surviving breeding pool.
"""

from typing import List

from .data_models import Gene
from .randomness import RandomSource


def sort_population(genes: List[Gene]) -> List[Gene]:
    """
    Order genes ascending by fitness (best first).

    The sort is stable, so ties keep their input order.

    Raises:
        StaleFitnessError: If any gene is unevaluated
    """
    return sorted(genes, key=lambda gene: gene.require_fitness())


def is_sorted(genes: List[Gene]) -> bool:
    fitness = [gene.require_fitness() for gene in genes]
    return all(a <= b for a, b in zip(fitness, fitness[1:]))


def select_elites(population: List[Gene], elite_count: int) -> List[Gene]:
    """Top elite_count genes of a sorted population, carried over unchanged."""
    return population[:elite_count]


def apply_predation(
    population: List[Gene],
    elite_count: int,
    predation_rate: float,
    rng: RandomSource
) -> List[Gene]:
    """
    Build the survivor pool: elites plus non-elites spared by predation.

    Non-elite positions are shuffled and floor(len(non_elites) * rate) of
    them are dropped, independent of fitness.

    Args:
        population: Sorted population
        elite_count: Number of leading genes that are never culled
        predation_rate: Fraction of non-elites to drop
        rng: Random source

    Returns:
        Survivor pool, elites first
    """
    survivors = select_elites(population, elite_count)

    non_elite_indices = rng.shuffle(list(range(elite_count, len(population))))
    kill_count = int(len(non_elite_indices) * predation_rate)
    spared = non_elite_indices[:len(non_elite_indices) - kill_count]

    return survivors + [population[i] for i in spared]


def tournament_selection(
    pool: List[Gene],
    tournament_size: int,
    rng: RandomSource
) -> Gene:
    """
    Pick a parent by tournament.

    Samples tournament_size contestants uniformly with replacement and keeps
    the one with the lowest fitness (the first seen wins ties).

    Raises:
        ValueError: If the pool is empty
        StaleFitnessError: If a contestant is unevaluated
    """
    if not pool:
        raise ValueError("Parent pool for tournament selection is empty")

    best = None
    best_fitness = None
    for _ in range(tournament_size):
        contestant = pool[rng.uniform_int(0, len(pool) - 1)]
        fitness = contestant.require_fitness()
        if best is None or fitness < best_fitness:
            best = contestant
            best_fitness = fitness
    return best
