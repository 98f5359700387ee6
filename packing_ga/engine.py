"""
Generational engine for the packing GA.

One call to step() advances a sorted population by one generation:
elitism, predation, disaster check, breeding, re-evaluation and sorting.
The population is owned by the caller and passed in and out explicitly.
"""

from typing import List, Optional, Tuple

from squarepack.config_loader import PackingConfig

from .chromosome import init_grid_seeded_gene, init_random_gene
from .data_models import Gene
from .parallel import ParallelEvaluator
from .randomness import RandomSource
from .selection import apply_predation, is_sorted, sort_population


class GenerationalEngine:
    """Evolves populations of packings one generation at a time."""

    def __init__(self,
                 config: PackingConfig,
                 rng: RandomSource,
                 evaluator: Optional[ParallelEvaluator] = None):
        """
        Initialize the engine

        Args:
            config: Validated packing configuration
            rng: Main random stream; worker streams are derived from it
            evaluator: Worker pool for breeding/evaluation (defaults to one
                built from config)
        """
        self.config = config
        self.rng = rng
        self.evaluator = evaluator if evaluator is not None else ParallelEvaluator(config)
        self.generation_count = 0
        self.disaster_count = 0
        self.last_mutation_rate = config.mutation_rate

    def close(self):
        self.evaluator.close()

    def initialize_population(self) -> List[Gene]:
        """
        Create the first generation.

        One grid-seeded gene plus population_size - 1 random genes, all
        evaluated and sorted best first.
        """
        population = [init_grid_seeded_gene(self.config, self.rng)]
        for _ in range(self.config.population_size - 1):
            population.append(init_random_gene(self.config, self.rng))

        self.evaluator.evaluate(population)
        return sort_population(population)

    def draw_mutation_rate(self) -> Tuple[float, bool]:
        """
        Pick this generation's mutation rate.

        Returns:
            Tuple of (rate, disaster) where disaster tells whether the
            hypermutation rate replaced the normal one
        """
        if self.rng.random() < self.config.disaster_probability:
            return self.config.disaster_hypermutation_rate, True
        return self.config.mutation_rate, False

    def _check_population(self, population: List[Gene]):
        if len(population) != self.config.population_size:
            raise ValueError(
                f"Population must have {self.config.population_size} genes, got {len(population)}"
            )
        if not is_sorted(population):
            raise ValueError("Population must be sorted ascending by fitness")

    def step(self, population: List[Gene]) -> List[Gene]:
        """
        Advance one generation.

        Args:
            population: Current generation, evaluated and sorted best first

        Returns:
            New population of the same size, evaluated and sorted. The input
            list is not modified.

        Raises:
            ValueError: If the input has the wrong size or is unsorted
            StaleFitnessError: If any input gene is unevaluated
            GenerationError: If a worker fails during breeding or evaluation
        """
        self._check_population(population)

        survivors = apply_predation(
            population, self.config.elite_count, self.config.predation_rate, self.rng
        )

        mutation_rate, disaster = self.draw_mutation_rate()

        offspring_needed = self.config.population_size - len(survivors)
        offspring = self.evaluator.breed(survivors, offspring_needed, mutation_rate, self.rng)
        self.evaluator.evaluate(offspring)

        new_population = sort_population(survivors + offspring)

        self.generation_count += 1
        self.last_mutation_rate = mutation_rate
        if disaster:
            self.disaster_count += 1

        return new_population
