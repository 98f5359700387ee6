"""
Genetic Algorithm for Square Packing

Evolves placements of N equal squares inside a square container,
minimizing overlap and out-of-bounds area.

Key Features:
- Grid-seeded plus random initial population
- Elitism, random predation and tournament selection
- Uniform crossover and per-slot mutation with disaster hypermutation
- Sharded breeding/evaluation on a fixed thread or process pool
- Snapshot publishing for concurrent readers (renderer, statistics log)

Modules:
- data_models: Core data structures (Gene, GenerationSnapshot, GenerationRecord)
- randomness: Seeded random streams for operators and workers
- chromosome: Gene initialization and fitness evaluation
- crossover: Uniform slot-wise crossover
- mutation: Nudge, teleport and rotation operators
- selection: Sorting, elitism, predation and tournament selection
- parallel: Worker pool for sharded breeding and evaluation
- engine: One-generation step of the algorithm
- orchestration: Run loop, snapshot board and end-to-end workflow
- io_utils: Packing CSV, statistics log and metadata I/O
"""

__version__ = "0.1.0"
__author__ = "Packing Optimization Team"

from .data_models import Gene, GenerationSnapshot, GenerationRecord, StaleFitnessError

__all__ = [
    "Gene",
    "GenerationSnapshot",
    "GenerationRecord",
    "StaleFitnessError",
]
