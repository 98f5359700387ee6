"""
Packing Metrics and Reporting System

Analyzes the quality of a square packing: pairwise overlaps, container
violations, density and overall validity.
"""

from typing import Dict, List, Any

from .config_loader import PackingConfig
from .geometry import EPSILON, Square, inside_container, overlap_area


class PackingMetrics:
    """Metrics calculator for packing quality assessment"""

    def __init__(self, config: PackingConfig):
        self.config = config
        self.container = config.container

    def analyze_packing(self, squares: List[Square]) -> Dict[str, Any]:
        """
        Analysis of one packing

        Returns:
            Dictionary containing all metrics and analysis results
        """
        overlap_metrics = self._analyze_overlaps(squares)
        bounds_metrics = self._analyze_bounds(squares)

        fitness = (self.config.overlap_weight * overlap_metrics['total_overlap_area'] +
                   self.config.out_of_bounds_weight * bounds_metrics['total_outside_area'])

        square_area = sum(square.area for square in squares)
        container_area = self.container.area

        return {
            'square_count': len(squares),
            'overlap_metrics': overlap_metrics,
            'bounds_metrics': bounds_metrics,
            'density': square_area / container_area if container_area > 0 else 0.0,
            'fitness': max(0.0, fitness),
            'is_valid': (not overlap_metrics['overlapping_pairs'] and
                         not bounds_metrics['squares_outside']),
        }

    def _analyze_overlaps(self, squares: List[Square]) -> Dict[str, Any]:
        """Find every pair of squares with positive shared area"""
        pairs = []
        total = 0.0

        for i in range(len(squares)):
            for j in range(i + 1, len(squares)):
                area = overlap_area(squares[i], squares[j])
                total += area
                if area > EPSILON:
                    pairs.append((i, j, area))

        return {
            'total_overlap_area': total,
            'overlapping_pairs': pairs,
            'max_pair_overlap': max((area for _, _, area in pairs), default=0.0),
        }

    def _analyze_bounds(self, squares: List[Square]) -> Dict[str, Any]:
        """Find squares poking out of the container"""
        outside = []
        total = 0.0

        for index, square in enumerate(squares):
            if inside_container(square, self.config.container_side):
                continue
            area = square.area - overlap_area(square, self.container)
            total += area
            outside.append((index, area))

        return {
            'total_outside_area': total,
            'squares_outside': outside,
        }


def print_packing_report(metrics: Dict[str, Any]) -> str:
    """Generate a human-readable packing quality report"""
    lines = []
    lines.append("=" * 60)
    lines.append("PACKING QUALITY REPORT")
    lines.append("=" * 60)
    lines.append(f"Squares: {metrics['square_count']}")
    lines.append(f"Density: {metrics['density']:.3f}")
    lines.append(f"Fitness: {metrics['fitness']:.6f}")
    lines.append("")

    overlap = metrics['overlap_metrics']
    lines.append("OVERLAPS:")
    lines.append(f"  Total overlap area: {overlap['total_overlap_area']:.6f}")
    lines.append(f"  Overlapping pairs: {len(overlap['overlapping_pairs'])}")
    for i, j, area in overlap['overlapping_pairs']:
        lines.append(f"    squares {i} & {j}: {area:.6f}")
    lines.append("")

    bounds = metrics['bounds_metrics']
    lines.append("CONTAINER BOUNDS:")
    lines.append(f"  Area outside container: {bounds['total_outside_area']:.6f}")
    for index, area in bounds['squares_outside']:
        lines.append(f"    square {index}: {area:.6f} outside")
    lines.append("")

    if metrics['is_valid']:
        lines.append("VALIDITY: All squares inside container, no overlaps")
    else:
        lines.append("VALIDITY: Packing violates constraints")

    lines.append("=" * 60)

    return "\n".join(lines)
