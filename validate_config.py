#!/usr/bin/env python3
"""
Configuration Validation Tool

Validates YAML configuration files for the square packing GA and provides
detailed feedback about parameter values and potential issues.
"""

import sys
import argparse
import math
from pathlib import Path
from typing import Dict, Any

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))

from squarepack.config_loader import (
    ConfigurationError,
    VALID_BACKENDS,
    create_packing_config,
    load_config,
    validate_config
)


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = config.get(name)
    return section if isinstance(section, dict) else {}


class ConfigValidator:
    """Advanced configuration validator with detailed feedback"""

    def __init__(self):
        self.warnings = []
        self.errors = []
        self.recommendations = []

    def validate_comprehensive(self, config_path: str) -> Dict[str, Any]:
        """Perform comprehensive validation with detailed feedback"""
        try:
            config = load_config(config_path)
        except ConfigurationError as e:
            return {
                'valid': False,
                'errors': [f"Failed to load configuration: {e}"],
                'warnings': [],
                'recommendations': [],
                'summary': {}
            }

        return self.validate_dict(config)

    def validate_dict(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Validate an already parsed configuration"""
        self.warnings = []
        self.errors = []
        self.recommendations = []

        # Basic validation
        self.errors.extend(validate_config(config))

        # Advanced validation
        self._validate_packing(_section(config, 'packing'))
        self._validate_population(_section(config, 'population'))
        self._validate_mutation(_section(config, 'mutation'), _section(config, 'disaster'))
        self._validate_parallel(_section(config, 'parallel'))
        self._validate_optimization(_section(config, 'optimization'))
        self._validate_visualization(_section(config, 'visualization'))

        summary = self._generate_summary(config) if not self.errors else {}

        return {
            'valid': len(self.errors) == 0,
            'errors': self.errors,
            'warnings': self.warnings,
            'recommendations': self.recommendations,
            'summary': summary
        }

    def _validate_packing(self, packing_config: Dict[str, Any]):
        """Check that the squares can fit at all"""
        n = packing_config.get('gene_size', 17)
        s = packing_config.get('square_side', 1.0)
        L = packing_config.get('container_side', 5.0)

        if not all(isinstance(v, (int, float)) and v > 0 for v in (n, s, L)):
            return

        if n * s * s > L * L:
            self.warnings.append(
                f"Total square area ({n * s * s:g}) exceeds container area ({L * L:g}); "
                f"no valid packing exists"
            )
        elif s > L:
            self.warnings.append(f"square_side ({s}) exceeds container_side ({L})")

        grid_dim = math.ceil(math.sqrt(n))
        if grid_dim * s > L:
            self.recommendations.append(
                f"{grid_dim}x{grid_dim} grid does not fit; initial population will be fully random"
            )

        if n > 50:
            self.warnings.append(f"Large gene_size ({n}) makes fitness evaluation slow (pairwise overlaps)")

    def _validate_population(self, pop_config: Dict[str, Any]):
        """Validate population configuration"""
        size = pop_config.get('size', 150)
        tournament = pop_config.get('tournament_size', 5)

        if isinstance(size, int) and size < 10:
            self.warnings.append(f"Small population ({size}) may converge prematurely")
        if isinstance(size, int) and isinstance(tournament, int) and tournament > size:
            self.warnings.append(f"tournament_size ({tournament}) exceeds population size ({size})")

        elitism = pop_config.get('elitism_rate', 0.1)
        if isinstance(elitism, (int, float)) and elitism > 0.5:
            self.warnings.append(f"High elitism_rate ({elitism}) leaves little room for offspring")

    def _validate_mutation(self, mutation_config: Dict[str, Any], disaster_config: Dict[str, Any]):
        """Validate mutation and disaster configuration"""
        rate = mutation_config.get('rate', 0.05)
        hyper = disaster_config.get('hypermutation_rate', 0.5)
        probability = disaster_config.get('probability', 0.02)

        if isinstance(rate, (int, float)) and rate == 0:
            self.warnings.append("mutation.rate is 0; offspring only recombine existing squares")
        if (isinstance(rate, (int, float)) and isinstance(hyper, (int, float))
                and hyper < rate):
            self.warnings.append(
                f"disaster.hypermutation_rate ({hyper}) is below mutation.rate ({rate})"
            )
        if isinstance(probability, (int, float)) and probability > 0.2:
            self.warnings.append(f"Frequent disasters (probability {probability}) may prevent convergence")

    def _validate_parallel(self, parallel_config: Dict[str, Any]):
        """Validate worker configuration"""
        workers = parallel_config.get('workers', 1)
        backend = parallel_config.get('backend', 'thread')

        if backend not in VALID_BACKENDS:
            return

        if backend == 'thread' and isinstance(workers, int) and workers > 1:
            self.recommendations.append(
                "Fitness evaluation is pure Python; the 'process' backend scales better across cores"
            )
        if workers == 'auto':
            self.recommendations.append("workers: auto makes runs reproducible only on the same machine")

    def _validate_optimization(self, opt_config: Dict[str, Any]):
        """Validate optimization configuration"""
        if not opt_config:
            return  # Optional section

        generations = opt_config.get('generations', 500)
        random_seed = opt_config.get('random_seed', 0)

        if isinstance(generations, int) and 0 < generations < 50:
            self.warnings.append(f"Low generations ({generations}) may reduce packing quality")

        if isinstance(random_seed, int) and (random_seed < 0 or random_seed > 2**31):
            self.warnings.append(f"random_seed ({random_seed}) outside typical range")

    def _validate_visualization(self, vis_config: Dict[str, Any]):
        """Validate visualization configuration"""
        if not vis_config:
            return  # Optional section

        figure_size = vis_config.get('figure_size', [14, 7])

        if isinstance(figure_size, list) and len(figure_size) == 2:
            width, height = figure_size
            if width <= 0 or height <= 0:
                self.errors.append("figure_size dimensions must be positive")
            elif width > 30 or height > 30:
                self.warnings.append(f"Large figure_size {figure_size} may cause display issues")

    def _generate_summary(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Generate configuration summary"""
        packing_config = create_packing_config(config)
        opt_config = config.get('optimization', {}) or {}
        random_seed = opt_config.get('random_seed', 0)

        return {
            'packing': {
                'squares': packing_config.gene_size,
                'square_side': packing_config.square_side,
                'container_side': packing_config.container_side,
                'density': round(packing_config.gene_size * packing_config.square_side ** 2
                                 / packing_config.container_side ** 2, 3)
            },
            'population': {
                'size': packing_config.population_size,
                'elites': packing_config.elite_count,
                'culled_per_generation': packing_config.predation_count,
                'offspring_per_generation': packing_config.population_size - packing_config.survivor_count
            },
            'optimization': {
                'generations': opt_config.get('generations', 500),
                'random_seed': random_seed,
                'reproducible': random_seed is not None and random_seed != "random"
            }
        }


def main():
    """Main validation function"""
    parser = argparse.ArgumentParser(
        description="Validate YAML configuration files for the square packing GA",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        'config_file',
        nargs='?',
        default='config.yaml',
        help='Configuration file to validate (default: config.yaml)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show detailed validation information'
    )

    parser.add_argument(
        '--warnings-only', '-w',
        action='store_true',
        help='Show only warnings and errors (no recommendations)'
    )

    args = parser.parse_args()

    validator = ConfigValidator()
    result = validator.validate_comprehensive(args.config_file)

    print("=" * 60)
    print("CONFIGURATION VALIDATION REPORT")
    print("=" * 60)
    print(f"File: {args.config_file}")
    print(f"Status: {'✅ VALID' if result['valid'] else '❌ INVALID'}")
    print()

    if result['errors']:
        print("🚨 ERRORS:")
        for error in result['errors']:
            print(f"  • {error}")
        print()

    if result['warnings']:
        print("⚠️  WARNINGS:")
        for warning in result['warnings']:
            print(f"  • {warning}")
        print()

    if result['recommendations'] and not args.warnings_only:
        print("💡 RECOMMENDATIONS:")
        for rec in result['recommendations']:
            print(f"  • {rec}")
        print()

    if result['summary'] and args.verbose:
        print("📊 SUMMARY:")
        for section, data in result['summary'].items():
            print(f"  {section.title()}:")
            for key, value in data.items():
                print(f"    {key}: {value}")
        print()

    if not args.verbose and result['summary']:
        packing = result['summary']['packing']
        print(f"Squares: {packing['squares']}, Container: {packing['container_side']}, "
              f"Density: {packing['density']}")

    print("=" * 60)

    sys.exit(0 if result['valid'] else 1)


if __name__ == "__main__":
    main()
