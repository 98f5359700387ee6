"""
Configuration Loading System

Loads YAML configuration files and converts them to the immutable
PackingConfig consumed by the genetic algorithm.
"""

import math
import os
import time
import yaml
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, asdict

from .geometry import Square, container_square


class ConfigurationError(Exception):
    """Raised when configuration is invalid"""
    pass


VALID_BACKENDS = ("thread", "process")


@dataclass(frozen=True)
class PackingConfig:
    """Run-wide constants; never mutated once the run starts"""
    gene_size: int = 17
    square_side: float = 1.0
    container_side: float = 5.0
    population_size: int = 150
    elitism_rate: float = 0.1
    predation_rate: float = 0.1
    mutation_rate: float = 0.05
    tournament_size: int = 5
    rotational_snap_probability: float = 0.5
    nudge_fraction: float = 0.1
    disaster_probability: float = 0.02
    disaster_hypermutation_rate: float = 0.5
    overlap_weight: float = 5.0
    out_of_bounds_weight: float = 300.0
    worker_count: int = 1
    backend: str = "thread"

    def __post_init__(self):
        issues = check_parameters(asdict(self))
        if issues:
            raise ConfigurationError("; ".join(issues))

    @property
    def elite_count(self) -> int:
        return int(self.population_size * self.elitism_rate)

    @property
    def predation_count(self) -> int:
        return int((self.population_size - self.elite_count) * self.predation_rate)

    @property
    def survivor_count(self) -> int:
        """Size of the breeding pool: elites plus non-elites spared by predation"""
        return self.population_size - self.predation_count

    @property
    def container(self) -> Square:
        return container_square(self.container_side)


def check_parameters(params: Dict[str, Any]) -> List[str]:
    """
    Check PackingConfig field values

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    for name in ("gene_size", "population_size", "tournament_size", "worker_count"):
        value = params.get(name)
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            issues.append(f"{name} must be a positive integer, got: {value}")

    for name in ("square_side", "container_side"):
        value = params.get(name)
        if not isinstance(value, (int, float)) or value <= 0:
            issues.append(f"{name} must be positive, got: {value}")

    for name in ("elitism_rate", "predation_rate", "mutation_rate",
                 "rotational_snap_probability", "nudge_fraction",
                 "disaster_probability", "disaster_hypermutation_rate"):
        value = params.get(name)
        if not isinstance(value, (int, float)) or not 0.0 <= value <= 1.0:
            issues.append(f"{name} must be within [0, 1], got: {value}")

    for name in ("overlap_weight", "out_of_bounds_weight"):
        value = params.get(name)
        if not isinstance(value, (int, float)) or value < 0:
            issues.append(f"{name} must be non-negative, got: {value}")

    if params.get("backend") not in VALID_BACKENDS:
        issues.append(f"backend must be one of {VALID_BACKENDS}, got: {params.get('backend')}")

    if issues:
        return issues

    # Survivor pool must be non-empty or tournament selection is undefined
    population_size = params["population_size"]
    elite_count = int(population_size * params["elitism_rate"])
    killed = int((population_size - elite_count) * params["predation_rate"])
    if population_size - killed <= 0:
        issues.append(
            f"Empty breeding pool: elitism_rate={params['elitism_rate']} and "
            f"predation_rate={params['predation_rate']} leave no survivors"
        )

    return issues


def load_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Load configuration from YAML file"""
    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigurationError(f"Configuration file is empty: {config_path}")
    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")
    return config


def resolve_worker_count(workers: Optional[Any]) -> int:
    """Map 'auto'/None to the available hardware parallelism"""
    if workers is None or workers == "auto":
        return os.cpu_count() or 1
    return workers


def create_packing_config(config: Dict[str, Any]) -> PackingConfig:
    """
    Build a PackingConfig from a parsed configuration dictionary

    Missing keys fall back to the PackingConfig defaults.

    Raises:
        ConfigurationError: If any value is invalid, including a
            combination of elitism and predation that leaves no breeders
    """
    packing = config.get("packing", {}) or {}
    population = config.get("population", {}) or {}
    mutation = config.get("mutation", {}) or {}
    disaster = config.get("disaster", {}) or {}
    fitness = config.get("fitness", {}) or {}
    parallel = config.get("parallel", {}) or {}

    defaults = PackingConfig()
    return PackingConfig(
        gene_size=packing.get("gene_size", defaults.gene_size),
        square_side=packing.get("square_side", defaults.square_side),
        container_side=packing.get("container_side", defaults.container_side),
        population_size=population.get("size", defaults.population_size),
        elitism_rate=population.get("elitism_rate", defaults.elitism_rate),
        predation_rate=population.get("predation_rate", defaults.predation_rate),
        tournament_size=population.get("tournament_size", defaults.tournament_size),
        mutation_rate=mutation.get("rate", defaults.mutation_rate),
        rotational_snap_probability=mutation.get(
            "rotational_snap_probability", defaults.rotational_snap_probability),
        nudge_fraction=mutation.get("nudge_fraction", defaults.nudge_fraction),
        disaster_probability=disaster.get("probability", defaults.disaster_probability),
        disaster_hypermutation_rate=disaster.get(
            "hypermutation_rate", defaults.disaster_hypermutation_rate),
        overlap_weight=fitness.get("overlap_weight", defaults.overlap_weight),
        out_of_bounds_weight=fitness.get("out_of_bounds_weight", defaults.out_of_bounds_weight),
        worker_count=resolve_worker_count(parallel.get("workers", defaults.worker_count)),
        backend=parallel.get("backend", defaults.backend),
    )


def create_packing_config_from_file(config_path: str = "config.yaml") -> PackingConfig:
    """Load a YAML file and build the PackingConfig it describes"""
    return create_packing_config(load_config(config_path))


def resolve_random_seed(config: Dict[str, Any]) -> int:
    """Read optimization.random_seed; 'random' or null draws a time-based seed"""
    optimization_config = config.get("optimization", {}) or {}
    random_seed = optimization_config.get("random_seed", 0)

    if random_seed is None or random_seed == "random":
        random_seed = int(time.time() * 1000000) % 2147483647
        print(f"Using random seed: {random_seed}")
    elif isinstance(random_seed, str) and random_seed.isdigit():
        random_seed = int(random_seed)
    elif not isinstance(random_seed, int):
        raise ConfigurationError(f"Invalid random_seed: {random_seed}")

    return random_seed


def get_optimization_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get optimization section with defaults applied"""
    optimization = dict(config.get("optimization", {}) or {})
    optimization.setdefault("generations", 500)
    optimization.setdefault("progress_every", 10)
    return optimization


def get_output_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get output section with defaults applied"""
    output = dict(config.get("output", {}) or {})
    output.setdefault("root", "output")
    output.setdefault("stats_file", "generation_data.dat")
    output.setdefault("overwrite", False)
    return output


def get_visualization_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Get visualization configuration"""
    return config.get("visualization", {}) or {}


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of issues

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    required_sections = ["packing", "population"]
    for section in required_sections:
        if section not in config:
            issues.append(f"Missing required section: {section}")

    try:
        create_packing_config(config)
    except ConfigurationError as e:
        issues.extend(str(e).split("; "))
    except (AttributeError, TypeError) as e:
        issues.append(f"Malformed configuration section: {e}")

    optimization = config.get("optimization", {}) or {}
    generations = optimization.get("generations", 1)
    if not isinstance(generations, int) or generations < 0:
        issues.append(f"optimization.generations must be a non-negative integer, got: {generations}")

    return issues


def print_config_summary(config: Dict[str, Any]):
    """Print a summary of the configuration"""
    print("=" * 50)
    print("CONFIGURATION SUMMARY")
    print("=" * 50)

    issues = validate_config(config)
    if issues:
        print(f"Validation Issues ({len(issues)}):")
        for issue in issues:
            print(f"  - {issue}")
        print("=" * 50)
        return

    packing_config = create_packing_config(config)
    print(f"Squares: {packing_config.gene_size} x side {packing_config.square_side}")
    print(f"Container side: {packing_config.container_side}")
    grid_dim = math.ceil(math.sqrt(packing_config.gene_size))
    print(f"Grid seed: {grid_dim}x{grid_dim} "
          f"({'fits' if grid_dim * packing_config.square_side <= packing_config.container_side else 'does not fit'})")

    print(f"\nPopulation: {packing_config.population_size}")
    print(f"  Elites: {packing_config.elite_count}")
    print(f"  Culled per generation: {packing_config.predation_count}")
    print(f"  Tournament size: {packing_config.tournament_size}")
    print(f"Mutation rate: {packing_config.mutation_rate} "
          f"(disaster: {packing_config.disaster_hypermutation_rate} "
          f"@ p={packing_config.disaster_probability})")
    print(f"Workers: {packing_config.worker_count} ({packing_config.backend})")

    print("\nConfiguration is valid ✓")
    print("=" * 50)
