"""
Data models for the packing GA.

Core data structures representing genes, published generation snapshots,
and per-generation statistics records.
"""

from dataclasses import dataclass
from typing import Optional, Any

from squarepack.geometry import Square


class StaleFitnessError(ValueError):
    """Raised when a gene without an up-to-date fitness is compared or selected."""
    pass


@dataclass
class Gene:
    """
    Represents one candidate packing (individual in GA population).

    Attributes:
        squares: Exactly N square placements, in slot order
        fitness: Penalty score (lower is better, 0 is a valid packing).
            None marks the gene as stale: its squares changed after the
            last evaluation.
    """
    squares: list[Square]
    fitness: Optional[float] = None

    def copy(self) -> "Gene":
        """
        Create a copy of this gene.

        Squares are immutable, so copying the list is enough.

        Returns:
            New Gene with its own square list and the same fitness
        """
        return Gene(squares=list(self.squares), fitness=self.fitness)

    @property
    def is_evaluated(self) -> bool:
        return self.fitness is not None

    def require_fitness(self) -> float:
        """
        Get fitness for comparison.

        Raises:
            StaleFitnessError: If the gene has not been evaluated since its
                last change
        """
        if self.fitness is None:
            raise StaleFitnessError("Gene fitness is stale; evaluate before comparing or selecting")
        return self.fitness

    def __len__(self) -> int:
        """Number of squares in the gene."""
        return len(self.squares)


@dataclass(frozen=True)
class GenerationSnapshot:
    """
    Read-only view of one generation, published to renderers and stats sinks.

    Attributes:
        generation: Generation index (0 is the initial population)
        best_squares: Squares of the best gene, as an immutable tuple
        best_fitness: Fitness of the best gene
        mean_fitness: Mean fitness over the whole population
    """
    generation: int
    best_squares: tuple[Square, ...]
    best_fitness: float
    mean_fitness: float


@dataclass
class GenerationRecord:
    """
    One row of the per-generation statistics log.

    Attributes:
        generation: Generation index
        best_fitness: Fitness of the best gene
        mean_fitness: Mean fitness over the population
    """
    generation: int
    best_fitness: float
    mean_fitness: float

    @classmethod
    def from_snapshot(cls, snapshot: GenerationSnapshot) -> "GenerationRecord":
        return cls(
            generation=snapshot.generation,
            best_fitness=snapshot.best_fitness,
            mean_fitness=snapshot.mean_fitness,
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert record to dictionary for export.

        Returns:
            Dictionary with plain values
        """
        return {
            "generation": self.generation,
            "best_fitness": self.best_fitness,
            "mean_fitness": self.mean_fitness,
        }
