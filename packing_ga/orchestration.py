"""
Orchestration module for the packing GA.

Drives the generational loop, publishes per-generation snapshots to
readers (renderer, statistics log), and implements the end-to-end run
workflow used by the command-line entry point.
"""

import threading
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from squarepack.config_loader import (
    PackingConfig,
    create_packing_config,
    get_optimization_config,
    get_output_config,
    get_visualization_config,
    resolve_random_seed,
)
from squarepack.packing_metrics import PackingMetrics, print_packing_report

from .data_models import Gene, GenerationSnapshot
from .engine import GenerationalEngine
from .io_utils import GenerationStatsLog, prepare_output_root, save_gene_to_csv, save_metadata
from .parallel import ParallelEvaluator
from .randomness import RandomSource


def make_snapshot(population: List[Gene], generation: int) -> GenerationSnapshot:
    """
    Summarize a sorted, evaluated population.

    Args:
        population: Population with the best gene at index 0
        generation: Generation index

    Returns:
        Immutable snapshot of the best gene and fitness statistics
    """
    best = population[0]
    fitness = [gene.require_fitness() for gene in population]
    return GenerationSnapshot(
        generation=generation,
        best_squares=tuple(best.squares),
        best_fitness=best.require_fitness(),
        mean_fitness=sum(fitness) / len(fitness),
    )


class SnapshotBoard:
    """
    Latest published snapshot, safe to read from any thread.

    Snapshots are immutable; the lock only guards swapping the reference so
    readers always see one whole snapshot.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot: Optional[GenerationSnapshot] = None

    def publish(self, snapshot: GenerationSnapshot):
        with self._lock:
            self._snapshot = snapshot

    def latest(self) -> Optional[GenerationSnapshot]:
        with self._lock:
            return self._snapshot


class EvolutionRunner:
    """
    Driver for the generational loop.

    Owns the current population, advances it with the engine, and publishes
    a snapshot after every generation. The stop signal is only checked
    between generations; a generation in progress always completes.
    """

    def __init__(self,
                 config: PackingConfig,
                 rng: RandomSource,
                 board: Optional[SnapshotBoard] = None,
                 stats_log: Optional[GenerationStatsLog] = None,
                 evaluator: Optional[ParallelEvaluator] = None):
        self.config = config
        self.engine = GenerationalEngine(config, rng, evaluator)
        self.board = board if board is not None else SnapshotBoard()
        self.stats_log = stats_log if stats_log is not None else GenerationStatsLog()
        self.population: Optional[List[Gene]] = None
        self.generation = 0
        self.stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.error: Optional[BaseException] = None

    def _publish(self):
        snapshot = make_snapshot(self.population, self.generation)
        self.board.publish(snapshot)
        self.stats_log.append(snapshot)
        return snapshot

    def initialize(self) -> GenerationSnapshot:
        """Create and publish the initial population (generation 0)."""
        self.population = self.engine.initialize_population()
        self.generation = 0
        return self._publish()

    def run(self,
            generations: int,
            on_generation: Optional[Callable[[GenerationSnapshot], None]] = None) -> List[Gene]:
        """
        Run up to `generations` generations or until stop() is called.

        Args:
            generations: Maximum number of generations to run
            on_generation: Optional callback receiving each new snapshot

        Returns:
            Final population, sorted best first
        """
        if self.population is None:
            self.initialize()

        for _ in range(generations):
            if self.stop_event.is_set():
                break
            # The population is only replaced once the step fully succeeds
            self.population = self.engine.step(self.population)
            self.generation += 1
            snapshot = self._publish()
            if on_generation is not None:
                on_generation(snapshot)

        return self.population

    def _background_loop(self, generations: int):
        try:
            self.run(generations)
        except Exception as e:
            self.error = e

    def start_background(self, generations: int) -> threading.Thread:
        """
        Run the loop on a worker thread.

        Readers poll self.board for snapshots while it runs; a worker
        failure is kept in self.error.
        """
        if self._thread is not None and self._thread.is_alive():
            raise RuntimeError("Evolution is already running")

        self.stop_event.clear()
        self._thread = threading.Thread(
            target=self._background_loop, args=(generations,), name="evolution", daemon=True
        )
        self._thread.start()
        return self._thread

    def stop(self, wait: bool = True):
        """Ask the loop to stop at the next generation boundary."""
        self.stop_event.set()
        if wait and self._thread is not None:
            self._thread.join()

    def close(self):
        self.stop()
        self.engine.close()


def run_evolution(config: Dict, config_path: Optional[str] = None) -> Dict:
    """
    Run a full evolution from a parsed configuration.

    Algorithm:
        1. Build PackingConfig and RNG (optimization.random_seed)
        2. Create output directory: output.root
        3. Initialize population and run optimization.generations steps,
           printing progress every optimization.progress_every generations
        4. Write statistics log, best packing CSV, run metadata and plot
        5. Print the packing quality report

    Args:
        config: Configuration dictionary from YAML
        config_path: Source path of the configuration, recorded in metadata

    Returns:
        Dictionary with the final snapshot, metrics and written file paths
    """
    print("=" * 70)
    print("SQUARE PACKING EVOLUTION")
    print("=" * 70)

    packing_config = create_packing_config(config)
    optimization = get_optimization_config(config)
    output = get_output_config(config)
    vis_config = get_visualization_config(config)

    seed = resolve_random_seed(config)
    print(f"Random seed: {seed}")
    rng = RandomSource.from_seed(seed)

    output_root = prepare_output_root(output['root'], overwrite=output['overwrite'])
    print(f"Output directory: {output_root}\n")

    generations = optimization['generations']
    progress_every = max(1, optimization['progress_every'])

    runner = EvolutionRunner(packing_config, rng)
    start_time = time.time()

    def report_progress(snapshot: GenerationSnapshot):
        if snapshot.generation % progress_every == 0 or snapshot.generation == generations:
            print(f"  Generation {snapshot.generation}/{generations}: "
                  f"best={snapshot.best_fitness:.6f} mean={snapshot.mean_fitness:.6f}")

    try:
        initial = runner.initialize()
        print(f"Initial population: best={initial.best_fitness:.6f} mean={initial.mean_fitness:.6f}")
        print(f"Evolving {generations} generations with {packing_config.worker_count} "
              f"{packing_config.backend} worker(s)...\n")
        runner.run(generations, on_generation=report_progress)
    except KeyboardInterrupt:
        print(f"\nInterrupted at generation {runner.generation}; saving results so far")
    finally:
        runner.engine.close()

    elapsed = time.time() - start_time
    final = runner.board.latest()
    if final is None:
        raise RuntimeError("Run stopped before the initial population was evaluated")
    best_gene = Gene(squares=list(final.best_squares), fitness=final.best_fitness)

    stats_path = runner.stats_log.write(output_root / output['stats_file'], overwrite=output['overwrite'])
    best_path = save_gene_to_csv(best_gene, output_root / 'best_packing.csv', overwrite=output['overwrite'])

    metrics = PackingMetrics(packing_config).analyze_packing(best_gene.squares)

    metadata_path = save_metadata(
        {
            'config_path': str(config_path) if config_path else None,
            'random_seed': seed,
            'generations_run': runner.generation,
            'disaster_events': runner.engine.disaster_count,
            'best_fitness': final.best_fitness,
            'mean_fitness': final.mean_fitness,
            'elapsed_seconds': round(elapsed, 3),
            'config': config,
        },
        output_root / 'run_metadata.yaml',
        overwrite=output['overwrite']
    )

    plot_path = None
    if vis_config.get('save_plot', True):
        plot_path = save_run_plot(packing_config, final, runner.stats_log.records,
                                  output_root / 'best_packing.png', vis_config)

    print()
    print(print_packing_report(metrics))
    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Generations: {runner.generation} in {elapsed:.2f} seconds")
    print(f"Disaster events: {runner.engine.disaster_count}")
    print(f"Best fitness: {final.best_fitness:.6f}")
    print(f"Statistics log: {stats_path}")
    print(f"Best packing: {best_path}")
    print(f"Run metadata: {metadata_path}")
    if plot_path:
        print(f"Plot: {plot_path}")

    return {
        'snapshot': final,
        'metrics': metrics,
        'stats_path': stats_path,
        'best_path': best_path,
        'metadata_path': metadata_path,
        'plot_path': plot_path,
    }


def save_run_plot(packing_config: PackingConfig,
                  snapshot: GenerationSnapshot,
                  records,
                  save_path: Path,
                  vis_config: Dict) -> Optional[Path]:
    """Render the best packing and fitness history; failures are reported, not raised."""
    try:
        import matplotlib
        matplotlib.use('Agg')
        from squarepack.visualization import PackingVisualizer

        visualizer = PackingVisualizer(packing_config)
        visualizer.plot_run_summary(
            snapshot,
            records,
            figsize=tuple(vis_config.get('figure_size', [14, 7])),
            save_path=str(save_path),
            show=False
        )
        return save_path
    except Exception as e:
        print(f"  ✗ Plot: Failed - {e}")
        return None
