"""
Tests for packing metrics, reporting and visualization
"""

import tempfile
import unittest
import sys
from pathlib import Path

import matplotlib
matplotlib.use('Agg')

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from squarepack.config_loader import PackingConfig
from squarepack.geometry import Point, Square
from squarepack.packing_metrics import PackingMetrics, print_packing_report
from squarepack.visualization import PackingVisualizer
from packing_ga.data_models import GenerationRecord, GenerationSnapshot


class TestPackingMetrics(unittest.TestCase):
    """Test PackingMetrics analysis"""

    def setUp(self):
        self.config = PackingConfig(gene_size=3, container_side=3.0, population_size=10)
        self.metrics = PackingMetrics(self.config)

    def test_valid_packing(self):
        squares = [Square(Point(0.5, 0.5), 0.0), Square(Point(1.5, 0.5), 0.0), Square(Point(2.5, 2.5), 0.0)]
        result = self.metrics.analyze_packing(squares)

        self.assertTrue(result['is_valid'])
        self.assertAlmostEqual(result['fitness'], 0.0)
        self.assertEqual(result['overlap_metrics']['overlapping_pairs'], [])
        self.assertEqual(result['bounds_metrics']['squares_outside'], [])
        self.assertAlmostEqual(result['density'], 3.0 / 9.0)

    def test_overlap_and_outside(self):
        """Test overlap pairs and escaping squares are itemized and weighted"""
        squares = [
            Square(Point(0.5, 0.5), 0.0),
            Square(Point(1.0, 0.5), 0.0),   # half over square 0
            Square(Point(3.0, 2.5), 0.0),   # half outside the container
        ]
        result = self.metrics.analyze_packing(squares)

        self.assertFalse(result['is_valid'])
        pairs = result['overlap_metrics']['overlapping_pairs']
        self.assertEqual(len(pairs), 1)
        self.assertEqual(pairs[0][:2], (0, 1))
        self.assertAlmostEqual(pairs[0][2], 0.5)

        outside = result['bounds_metrics']['squares_outside']
        self.assertEqual([index for index, _ in outside], [2])
        self.assertAlmostEqual(outside[0][1], 0.5)

        self.assertAlmostEqual(result['fitness'], 5.0 * 0.5 + 300.0 * 0.5)

    def test_report(self):
        squares = [Square(Point(0.5, 0.5), 0.0), Square(Point(1.0, 0.5), 0.0)]
        report = print_packing_report(self.metrics.analyze_packing(squares))
        self.assertIn("PACKING QUALITY REPORT", report)
        self.assertIn("squares 0 & 1", report)
        self.assertIn("violates", report)


class TestPackingVisualizer(unittest.TestCase):
    """Test figure rendering to file"""

    def setUp(self):
        self.config = PackingConfig(gene_size=2, container_side=3.0, population_size=10)
        self.snapshot = GenerationSnapshot(
            generation=2,
            best_squares=(Square(Point(0.5, 0.5), 0.0), Square(Point(1.0, 0.6), 0.4)),
            best_fitness=1.2,
            mean_fitness=3.4,
        )
        self.records = [
            GenerationRecord(0, 4.0, 9.0),
            GenerationRecord(1, 2.0, 5.0),
            GenerationRecord(2, 1.2, 3.4),
        ]

    def test_plot_run_summary_saves_png(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "summary.png"
            PackingVisualizer(self.config).plot_run_summary(
                self.snapshot, self.records, save_path=str(path), show=False
            )
            self.assertTrue(path.exists())
            self.assertGreater(path.stat().st_size, 0)

    def test_plot_without_history(self):
        """Test a run summary with no generations after the initial one"""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "empty.png"
            PackingVisualizer(self.config).plot_run_summary(
                self.snapshot, [], figsize=(8, 4), save_path=str(path), show=False
            )
            self.assertTrue(path.exists())


if __name__ == '__main__':
    unittest.main()
