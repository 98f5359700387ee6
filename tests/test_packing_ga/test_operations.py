"""
Tests for GA operations: initialization, fitness, crossover, mutation and selection.
"""

import math
import unittest

from squarepack.config_loader import PackingConfig
from squarepack.geometry import Point, Square, inside_container
from squarepack.packing_metrics import PackingMetrics
from packing_ga.data_models import Gene, StaleFitnessError
from packing_ga.randomness import RandomSource
from packing_ga.chromosome import (
    compute_fitness,
    evaluate_fitness,
    grid_fits,
    init_grid_seeded_gene,
    init_random_gene,
)
from packing_ga.crossover import uniform_crossover
from packing_ga.mutation import (
    HALF_PI,
    clamp_center,
    mutate,
    mutate_rotation,
    nudge_center,
    teleport_center,
)
from packing_ga.selection import (
    apply_predation,
    is_sorted,
    select_elites,
    sort_population,
    tournament_selection,
)


def make_gene(fitness):
    return Gene(squares=[Square(Point(0.5, 0.5), 0.0)], fitness=fitness)


class TestRandomSource(unittest.TestCase):
    """Test seeded random streams."""

    def test_same_seed_same_draws(self):
        a = RandomSource.from_seed(5)
        b = RandomSource.from_seed(5)
        self.assertEqual([a.random() for _ in range(5)], [b.random() for _ in range(5)])

    def test_uniform_int_inclusive(self):
        rng = RandomSource.from_seed(0)
        draws = {rng.uniform_int(0, 2) for _ in range(200)}
        self.assertEqual(draws, {0, 1, 2})

    def test_shuffle_returns_copy(self):
        rng = RandomSource.from_seed(1)
        items = list(range(10))
        shuffled = rng.shuffle(items)
        self.assertEqual(items, list(range(10)))
        self.assertEqual(sorted(shuffled), items)

    def test_spawn_is_reproducible(self):
        """Test children depend only on the parent state."""
        children_a = RandomSource.from_seed(9).spawn(3)
        children_b = RandomSource.from_seed(9).spawn(3)
        self.assertEqual([c.random() for c in children_a], [c.random() for c in children_b])
        self.assertEqual(len({c.random() for c in children_a}), 3)


class TestInitialization(unittest.TestCase):
    """Test gene initialization."""

    def setUp(self):
        self.config = PackingConfig(population_size=10)

    def test_random_gene(self):
        gene = init_random_gene(self.config, RandomSource.from_seed(1))

        self.assertEqual(len(gene), 17)
        self.assertFalse(gene.is_evaluated)
        for square in gene.squares:
            self.assertTrue(0 <= square.center.x < 5.0)
            self.assertTrue(0 <= square.center.y < 5.0)
            self.assertTrue(0 <= square.theta < 2 * math.pi)
            self.assertEqual(square.side, 1.0)

    def test_grid_seeded_gene(self):
        """Test 17 unit squares on a 5x5 grid fill rows from the lower-left."""
        gene = init_grid_seeded_gene(self.config, RandomSource.from_seed(1))

        self.assertEqual(len(gene), 17)
        self.assertEqual(gene.squares[0], Square(Point(0.5, 0.5), 0.0, 1.0))
        self.assertEqual(gene.squares[4], Square(Point(4.5, 0.5), 0.0, 1.0))
        self.assertEqual(gene.squares[5], Square(Point(0.5, 1.5), 0.0, 1.0))
        self.assertEqual(gene.squares[16], Square(Point(1.5, 3.5), 0.0, 1.0))

    def test_grid_seeded_gene_is_centered(self):
        config = PackingConfig(gene_size=4, container_side=3.0, population_size=10)
        gene = init_grid_seeded_gene(config, RandomSource.from_seed(1))
        centers = [(s.center.x, s.center.y) for s in gene.squares]
        self.assertEqual(centers, [(1.0, 1.0), (2.0, 1.0), (1.0, 2.0), (2.0, 2.0)])

    def test_grid_fallback_when_grid_too_wide(self):
        """Test N=17, s=1, L=4.8 falls back to a random gene."""
        config = PackingConfig(container_side=4.8, population_size=10)
        self.assertFalse(grid_fits(config))

        seeded = init_grid_seeded_gene(config, RandomSource.from_seed(11))
        random_gene = init_random_gene(config, RandomSource.from_seed(11))

        self.assertEqual(len(seeded), 17)
        self.assertEqual(seeded.squares, random_gene.squares)


class TestFitness(unittest.TestCase):
    """Test fitness computation."""

    def setUp(self):
        self.config = PackingConfig(population_size=10)

    def test_grid_packing_is_perfect(self):
        """Test the grid seed has zero fitness and is a valid packing."""
        gene = init_grid_seeded_gene(self.config, RandomSource.from_seed(0))
        self.assertAlmostEqual(evaluate_fitness(gene, self.config), 0.0, places=9)
        self.assertTrue(PackingMetrics(self.config).analyze_packing(gene.squares)['is_valid'])

    def test_fitness_non_negative_and_zero_iff_valid(self):
        rng = RandomSource.from_seed(3)
        metrics = PackingMetrics(self.config)
        for _ in range(20):
            gene = init_random_gene(self.config, rng)
            fitness = compute_fitness(gene.squares, self.config)
            self.assertGreaterEqual(fitness, 0.0)
            self.assertEqual(fitness > 1e-9, not metrics.analyze_packing(gene.squares)['is_valid'])

    def test_weights(self):
        """Test overlap and out-of-bounds terms use their weights."""
        config = PackingConfig(gene_size=2, population_size=10)
        overlapping = [Square(Point(1.0, 1.0), 0.0), Square(Point(1.5, 1.0), 0.0)]
        self.assertAlmostEqual(compute_fitness(overlapping, config), 5.0 * 0.5)

        outside = [Square(Point(1.0, 1.0), 0.0), Square(Point(5.0, 1.0), 0.0)]
        self.assertAlmostEqual(compute_fitness(outside, config), 300.0 * 0.5)

    def test_evaluate_sets_fitness(self):
        gene = init_random_gene(self.config, RandomSource.from_seed(2))
        value = evaluate_fitness(gene, self.config)
        self.assertEqual(gene.fitness, value)
        self.assertEqual(gene.require_fitness(), value)


class TestCrossover(unittest.TestCase):
    """Test uniform crossover."""

    def setUp(self):
        self.config = PackingConfig(population_size=10)
        rng = RandomSource.from_seed(4)
        self.parent_a = init_random_gene(self.config, rng)
        self.parent_b = init_random_gene(self.config, rng)

    def test_child_slots_come_from_parents(self):
        child, mask = uniform_crossover(self.parent_a, self.parent_b, RandomSource.from_seed(5))

        self.assertEqual(len(child), 17)
        self.assertEqual(len(mask), 17)
        self.assertFalse(child.is_evaluated)
        for slot, source in enumerate(mask):
            parent = self.parent_a if source == "A" else self.parent_b
            self.assertEqual(child.squares[slot], parent.squares[slot])

    def test_crossover_rate_extremes(self):
        child, mask = uniform_crossover(self.parent_a, self.parent_b, RandomSource.from_seed(5), 1.0)
        self.assertEqual(mask, "A" * 17)
        self.assertEqual(child.squares, self.parent_a.squares)

        child, mask = uniform_crossover(self.parent_a, self.parent_b, RandomSource.from_seed(5), 0.0)
        self.assertEqual(mask, "B" * 17)

    def test_parents_unchanged(self):
        before = list(self.parent_a.squares)
        uniform_crossover(self.parent_a, self.parent_b, RandomSource.from_seed(5))
        self.assertEqual(self.parent_a.squares, before)

    def test_length_mismatch(self):
        short = Gene(squares=self.parent_b.squares[:3])
        with self.assertRaises(ValueError):
            uniform_crossover(self.parent_a, short, RandomSource.from_seed(5))


class TestMutation(unittest.TestCase):
    """Test mutation operators."""

    def setUp(self):
        self.config = PackingConfig(population_size=10)
        self.rng = RandomSource.from_seed(6)
        self.gene = init_random_gene(self.config, RandomSource.from_seed(7))
        evaluate_fitness(self.gene, self.config)

    def test_zero_rate_is_identity(self):
        """Test mutate with rate 0 keeps squares and fitness."""
        mutated, op_log = mutate(self.gene, 0.0, self.config, self.rng)

        self.assertEqual(mutated.squares, self.gene.squares)
        self.assertEqual(mutated.fitness, self.gene.fitness)
        self.assertEqual(op_log, [])

    def test_full_rate_mutates_every_slot(self):
        mutated, op_log = mutate(self.gene, 1.0, self.config, self.rng)

        self.assertEqual(len(op_log), 17)
        self.assertFalse(mutated.is_evaluated)
        self.assertTrue(self.gene.is_evaluated)
        for square in mutated.squares:
            self.assertTrue(0.0 <= square.center.x <= 5.0)
            self.assertTrue(0.0 <= square.center.y <= 5.0)

    def test_nudge_within_reach(self):
        square = Square(Point(2.5, 2.5), 0.3)
        for _ in range(50):
            nudged = nudge_center(square, self.config, self.rng)
            self.assertLessEqual(abs(nudged.center.x - 2.5), 0.5)
            self.assertLessEqual(abs(nudged.center.y - 2.5), 0.5)
            self.assertEqual(nudged.theta, 0.3)

    def test_teleport_keeps_rotation(self):
        square = Square(Point(2.5, 2.5), 0.3)
        moved = teleport_center(square, self.config, self.rng)
        self.assertEqual(moved.theta, 0.3)
        self.assertTrue(0.0 <= moved.center.x < 5.0)

    def test_rotation_snap(self):
        """Test a certain snap rounds to the nearest right angle."""
        config = PackingConfig(rotational_snap_probability=1.0, population_size=10)
        square = Square(Point(2.5, 2.5), 1.4)
        self.assertAlmostEqual(mutate_rotation(square, config, self.rng).theta, HALF_PI)

        config = PackingConfig(rotational_snap_probability=0.0, population_size=10)
        redrawn = mutate_rotation(square, config, self.rng)
        self.assertTrue(0.0 <= redrawn.theta < 2 * math.pi)
        self.assertEqual(redrawn.center, square.center)

    def test_clamp_center(self):
        clamped = clamp_center(Square(Point(-0.3, 5.4), 0.2), 5.0)
        self.assertEqual((clamped.center.x, clamped.center.y), (0.0, 5.0))
        inside = Square(Point(1.0, 1.0), 0.2)
        self.assertIs(clamp_center(inside, 5.0), inside)


class TestSelection(unittest.TestCase):
    """Test sorting, elitism, predation and tournaments."""

    def setUp(self):
        self.rng = RandomSource.from_seed(8)
        self.population = [make_gene(float(f)) for f in range(10)]

    def test_sort_population(self):
        shuffled = self.rng.shuffle(self.population)
        ordered = sort_population(shuffled)
        self.assertEqual([g.fitness for g in ordered], [float(f) for f in range(10)])
        self.assertTrue(is_sorted(ordered))

    def test_sort_is_stable(self):
        a, b = make_gene(1.0), make_gene(1.0)
        ordered = sort_population([make_gene(2.0), a, b])
        self.assertIs(ordered[0], a)
        self.assertIs(ordered[1], b)

    def test_stale_gene_rejected(self):
        with self.assertRaises(StaleFitnessError):
            sort_population(self.population + [make_gene(None)])

    def test_select_elites(self):
        elites = select_elites(self.population, 3)
        self.assertEqual([g.fitness for g in elites], [0.0, 1.0, 2.0])

    def test_predation(self):
        """Test elites always survive and floor(rate * non-elites) are culled."""
        survivors = apply_predation(self.population, 2, 0.5, self.rng)

        self.assertEqual(len(survivors), 2 + 8 - 4)
        self.assertIs(survivors[0], self.population[0])
        self.assertIs(survivors[1], self.population[1])
        self.assertEqual(len({id(g) for g in survivors}), len(survivors))

    def test_no_predation(self):
        survivors = apply_predation(self.population, 2, 0.0, self.rng)
        self.assertEqual(len(survivors), 10)

    def test_tournament_picks_fittest_contestant(self):
        winner = tournament_selection(self.population, 200, self.rng)
        self.assertEqual(winner.fitness, 0.0)

        single = tournament_selection(self.population, 1, self.rng)
        self.assertIn(single, self.population)

    def test_tournament_empty_pool(self):
        with self.assertRaises(ValueError):
            tournament_selection([], 5, self.rng)


if __name__ == '__main__':
    unittest.main()
