"""
Square Packing - Geometry and Configuration Core

Rotated-square geometry, YAML configuration, packing quality metrics and
visualization shared by the genetic algorithm in packing_ga.
"""

__version__ = "1.0.0"
__author__ = "Packing Optimization Team"

from .geometry import Point, Square, overlap_area, polygon_area, segment_intersect
from .config_loader import (
    ConfigurationError,
    PackingConfig,
    create_packing_config,
    create_packing_config_from_file,
    load_config
)
from .packing_metrics import PackingMetrics, print_packing_report

__all__ = [
    'Point',
    'Square',
    'overlap_area',
    'polygon_area',
    'segment_intersect',
    'ConfigurationError',
    'PackingConfig',
    'create_packing_config',
    'create_packing_config_from_file',
    'load_config',
    'PackingMetrics',
    'print_packing_report'
]
