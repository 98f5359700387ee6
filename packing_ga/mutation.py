"""
Mutation operators for the packing GA.

Implements the three per-square operators: center nudge, center teleport,
and rotation change (snap to a right angle or redraw).
"""

from typing import List, Tuple
import math

from squarepack.config_loader import PackingConfig
from squarepack.geometry import Point, Square

from .data_models import Gene
from .randomness import RandomSource


HALF_PI = math.pi / 2.0

OPERATORS = ("nudge_center", "teleport_center", "mutate_rotation")


def clamp_center(square: Square, container_side: float) -> Square:
    """Clamp both center coordinates into [0, L]."""
    x = max(0.0, min(container_side, square.center.x))
    y = max(0.0, min(container_side, square.center.y))
    if x == square.center.x and y == square.center.y:
        return square
    return Square(Point(x, y), square.theta, square.side)


def nudge_center(square: Square, config: PackingConfig, rng: RandomSource) -> Square:
    """
    Shift the center by a bounded random offset.

    Each axis moves by a uniform amount in [-f*L, f*L] where f is the
    configured nudge fraction.
    """
    reach = config.nudge_fraction * config.container_side
    dx = rng.uniform_real(-reach, reach)
    dy = rng.uniform_real(-reach, reach)
    return Square(Point(square.center.x + dx, square.center.y + dy), square.theta, square.side)


def teleport_center(square: Square, config: PackingConfig, rng: RandomSource) -> Square:
    """Move the center to a fresh uniform point in the container."""
    side = config.container_side
    return Square(
        Point(rng.uniform_real(0, side), rng.uniform_real(0, side)),
        square.theta,
        square.side,
    )


def mutate_rotation(square: Square, config: PackingConfig, rng: RandomSource) -> Square:
    """
    Change the rotation of a square.

    With the rotational snap probability the angle is rounded to the
    nearest multiple of pi/2; otherwise a fresh angle is drawn from [0, 2*pi).
    """
    if rng.random() < config.rotational_snap_probability:
        theta = round(square.theta / HALF_PI) * HALF_PI
    else:
        theta = rng.uniform_real(0, 2 * math.pi)
    return Square(square.center, theta, square.side)


def mutate(
    gene: Gene,
    rate: float,
    config: PackingConfig,
    rng: RandomSource
) -> Tuple[Gene, List[str]]:
    """
    Apply per-slot mutation.

    Each slot mutates independently with probability `rate`; a mutating slot
    gets exactly one operator chosen uniformly from OPERATORS. Centers are
    clamped into the container afterwards.

    Args:
        gene: Gene to mutate (left untouched)
        rate: Per-slot mutation probability
        config: Packing configuration
        rng: Random source

    Returns:
        Tuple of (mutated_gene, operation_log). If no slot mutated the
        returned gene keeps the input fitness; otherwise it is unevaluated.
    """
    squares = list(gene.squares)
    op_log = []

    for slot, square in enumerate(squares):
        if rng.random() >= rate:
            continue

        op_name = OPERATORS[rng.uniform_int(0, len(OPERATORS) - 1)]
        if op_name == "nudge_center":
            mutated = nudge_center(square, config, rng)
        elif op_name == "teleport_center":
            mutated = teleport_center(square, config, rng)
        else:
            mutated = mutate_rotation(square, config, rng)

        squares[slot] = clamp_center(mutated, config.container_side)
        op_log.append(f"{op_name}(slot={slot})")

    if not op_log:
        return Gene(squares=squares, fitness=gene.fitness), op_log

    return Gene(squares=squares), op_log

