#!/usr/bin/env python3
"""
Square Packing - Genetic Algorithm

Main entry point for evolving packings of equal squares in a square
container. Runs an evolution from a YAML configuration, or re-renders a
previously saved packing.
"""

import sys
import argparse
from pathlib import Path

# Add current directory to path for imports
sys.path.append(str(Path(__file__).parent))

from squarepack.config_loader import (
    create_packing_config,
    get_visualization_config,
    load_config,
    print_config_summary
)
from squarepack.packing_metrics import PackingMetrics, print_packing_report
from packing_ga.io_utils import load_gene_from_csv, load_generation_stats
from packing_ga.orchestration import make_snapshot, run_evolution


def apply_overrides(config, args):
    """Apply command-line overrides on top of the YAML configuration"""
    config = dict(config)

    optimization = dict(config.get('optimization', {}) or {})
    if args.generations is not None:
        optimization['generations'] = args.generations
    if args.seed is not None:
        optimization['random_seed'] = args.seed
    config['optimization'] = optimization

    output = dict(config.get('output', {}) or {})
    if args.output is not None:
        output['root'] = args.output
    if args.overwrite:
        output['overwrite'] = True
    config['output'] = output

    if args.workers is not None:
        parallel = dict(config.get('parallel', {}) or {})
        parallel['workers'] = args.workers
        config['parallel'] = parallel

    if args.no_plot:
        visualization = dict(config.get('visualization', {}) or {})
        visualization['save_plot'] = False
        config['visualization'] = visualization

    return config


def run_packing(config_path="config.yaml", args=None):
    """Load configuration, print its summary and run the evolution"""
    config = load_config(config_path)
    if args is not None:
        config = apply_overrides(config, args)

    print_config_summary(config)
    print()
    return run_evolution(config, config_path=config_path)


def plot_saved_packing(csv_path, config_path="config.yaml", stats_path=None, save_path=None):
    """Re-render a packing CSV (and optionally its statistics log)"""
    config = load_config(config_path)
    packing_config = create_packing_config(config)
    vis_config = get_visualization_config(config)

    gene = load_gene_from_csv(csv_path)
    if len(gene) != packing_config.gene_size:
        print(f"Warning: {csv_path} holds {len(gene)} squares, "
              f"configuration expects {packing_config.gene_size}")

    metrics = PackingMetrics(packing_config).analyze_packing(gene.squares)
    gene.fitness = metrics['fitness']
    print(print_packing_report(metrics))

    records = load_generation_stats(stats_path) if stats_path else []
    generation = records[-1].generation if records else 0

    if save_path:
        import matplotlib
        matplotlib.use('Agg')

    from squarepack.visualization import PackingVisualizer

    visualizer = PackingVisualizer(packing_config)
    visualizer.plot_run_summary(
        make_snapshot([gene], generation),
        records,
        figsize=tuple(vis_config.get('figure_size', [14, 7])),
        save_path=save_path,
        show=save_path is None
    )
    if save_path:
        print(f"  ✓ Plot: {save_path}")


def main():
    """Main entry point with command-line argument parsing"""
    parser = argparse.ArgumentParser(
        description="Square Packing - Genetic Algorithm",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 main.py                                   # Evolve with config.yaml (stats + CSV + plot)
  python3 main.py --generations 2000 --seed 7       # Longer, reproducible run
  python3 main.py --workers 4 --output runs/w4      # Four workers, custom output directory
  python3 main.py --summary                         # Print configuration summary only
  python3 main.py --plot output/best_packing.csv \\
      --stats output/generation_data.dat            # Re-render a saved packing
  python3 main.py --config custom.yaml              # Custom config file
        """
    )

    parser.add_argument(
        '--config', '-c',
        default='config.yaml',
        help='Configuration file path (default: config.yaml)'
    )

    parser.add_argument(
        '--generations', '-g',
        type=int,
        metavar='N',
        help='Override optimization.generations'
    )

    parser.add_argument(
        '--seed', '-s',
        type=int,
        help='Override optimization.random_seed'
    )

    parser.add_argument(
        '--workers', '-w',
        type=int,
        metavar='N',
        help='Override parallel.workers'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        metavar='DIR',
        help='Override output.root'
    )

    parser.add_argument(
        '--overwrite',
        action='store_true',
        help='Allow writing into an existing output directory'
    )

    parser.add_argument(
        '--no-plot',
        action='store_true',
        help='Skip saving the packing plot'
    )

    parser.add_argument(
        '--summary',
        action='store_true',
        help='Print the configuration summary and exit'
    )

    parser.add_argument(
        '--plot',
        type=str,
        metavar='CSV',
        help='Render a saved packing CSV instead of running'
    )

    parser.add_argument(
        '--stats',
        type=str,
        metavar='FILE',
        help='Statistics log to plot alongside --plot'
    )

    parser.add_argument(
        '--save-plot',
        type=str,
        metavar='PNG',
        help='With --plot, save to PNG instead of showing a window'
    )

    args = parser.parse_args()

    try:
        if args.summary:
            print_config_summary(apply_overrides(load_config(args.config), args))
        elif args.plot:
            plot_saved_packing(args.plot, args.config, args.stats, args.save_plot)
        else:
            run_packing(args.config, args)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
