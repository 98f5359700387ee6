"""
Parallel offspring creation and fitness evaluation.

Work for one generation is split into contiguous, disjoint shards, one per
worker of a fixed pool. Each shard gets its own random stream, so results
depend only on the parent stream and the worker count, never on thread
scheduling.
"""

from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor, wait
from typing import Any, Callable, List, Optional, Tuple

from squarepack.config_loader import PackingConfig

from .chromosome import compute_fitness
from .crossover import uniform_crossover
from .data_models import Gene
from .mutation import mutate
from .randomness import RandomSource
from .selection import tournament_selection


class GenerationError(RuntimeError):
    """Raised when a worker fails; the generation step is abandoned."""
    pass


def partition_shards(count: int, workers: int) -> List[Tuple[int, int]]:
    """
    Split range(count) into contiguous (start, end) shards.

    At most `workers` shards are produced and none is empty; the last shard
    absorbs the remainder.
    """
    if count <= 0:
        return []

    workers = max(1, min(workers, count))
    chunk_size = count // workers
    shards = []
    for i in range(workers):
        start = i * chunk_size
        end = count if i == workers - 1 else start + chunk_size
        shards.append((start, end))
    return shards


def breed_shard(
    survivors: List[Gene],
    count: int,
    mutation_rate: float,
    config: PackingConfig,
    rng: RandomSource
) -> List[Gene]:
    """
    Create `count` children from the survivor pool.

    Each child comes from two tournament-selected parents, uniform
    crossover, then mutation at the generation's active rate.

    Returns:
        List of unevaluated children
    """
    offspring = []
    for _ in range(count):
        parent_a = tournament_selection(survivors, config.tournament_size, rng)
        parent_b = tournament_selection(survivors, config.tournament_size, rng)
        child, _ = uniform_crossover(parent_a, parent_b, rng)
        child, _ = mutate(child, mutation_rate, config, rng)
        offspring.append(child)
    return offspring


def evaluate_shard(genes: List[Gene], config: PackingConfig) -> List[float]:
    """Fitness values for a shard of genes, in order."""
    return [compute_fitness(gene.squares, config) for gene in genes]


class ParallelEvaluator:
    """
    Fixed worker pool for the two bulk phases of a generation.

    The pool is created on first use and reused for every later generation
    until close() is called. With a single worker, shards run inline on the
    calling thread.
    """

    def __init__(self, config: PackingConfig):
        self.config = config
        self.worker_count = config.worker_count
        self.backend = config.backend
        self._executor: Optional[Executor] = None

    def __enter__(self) -> "ParallelEvaluator":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Shut the pool down, waiting for running shards."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _get_executor(self) -> Executor:
        if self._executor is None:
            if self.backend == "process":
                self._executor = ProcessPoolExecutor(max_workers=self.worker_count)
            else:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.worker_count,
                    thread_name_prefix="packing-worker"
                )
        return self._executor

    def _run_shards(
        self,
        phase: str,
        task: Callable[..., Any],
        shard_args: List[tuple]
    ) -> List[Any]:
        """
        Run one task per shard and wait for all of them.

        Raises:
            GenerationError: If any shard raised; chained to the first failure
        """
        if self.worker_count == 1 or len(shard_args) <= 1:
            results = []
            for index, args in enumerate(shard_args):
                try:
                    results.append(task(*args))
                except Exception as e:
                    raise GenerationError(f"{phase} failed in shard {index}: {e}") from e
            return results

        executor = self._get_executor()
        futures = [executor.submit(task, *args) for args in shard_args]

        # Barrier: every shard finishes before any result is used
        wait(futures)

        results = []
        for index, future in enumerate(futures):
            error = future.exception()
            if error is not None:
                raise GenerationError(f"{phase} failed in shard {index}: {error}") from error
            results.append(future.result())
        return results

    def breed(
        self,
        survivors: List[Gene],
        count: int,
        mutation_rate: float,
        rng: RandomSource
    ) -> List[Gene]:
        """
        Create `count` unevaluated offspring from the survivor pool.

        Args:
            survivors: Breeding pool (all evaluated)
            count: Number of children to create
            mutation_rate: Active per-slot mutation rate for this generation
            rng: Parent stream; one child stream per shard is derived from it

        Returns:
            Offspring in shard order
        """
        shards = partition_shards(count, self.worker_count)
        if not shards:
            return []

        streams = rng.spawn(len(shards))
        shard_args = [
            (survivors, end - start, mutation_rate, self.config, stream)
            for (start, end), stream in zip(shards, streams)
        ]
        batches = self._run_shards("breeding", breed_shard, shard_args)
        return [child for batch in batches for child in batch]

    def evaluate(self, genes: List[Gene]) -> List[Gene]:
        """
        Recompute fitness for every gene, in place.

        Each shard only produces values for its own index range; the values
        are written back once all shards are done.

        Returns:
            The same list, now fully evaluated
        """
        shards = partition_shards(len(genes), self.worker_count)
        shard_args = [(genes[start:end], self.config) for start, end in shards]
        results = self._run_shards("evaluation", evaluate_shard, shard_args)

        for (start, end), values in zip(shards, results):
            for offset, value in enumerate(values):
                genes[start + offset].fitness = value
        return genes
