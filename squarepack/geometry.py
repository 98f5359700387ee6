"""
Square Geometry Kernel

Exact overlap computation between arbitrarily rotated squares: vertex
generation, point containment, segment intersection, overlap polygon
construction and shoelace area.
"""

import math
from typing import List, Optional
from dataclasses import dataclass


EPSILON = 1e-9


def snap_zero(value: float) -> float:
    """Collapse values within EPSILON of zero (and -0.0) to 0.0"""
    return 0.0 if abs(value) < EPSILON else value


@dataclass(frozen=True)
class Point:
    """A point in the container plane"""
    x: float
    y: float

    def __iter__(self):
        """Allow unpacking as tuple"""
        yield self.x
        yield self.y


@dataclass(frozen=True)
class Square:
    """Square placement: center, rotation (radians) and side length"""
    center: Point
    theta: float
    side: float = 1.0

    @property
    def area(self) -> float:
        return self.side * self.side

    def vertices(self) -> List[Point]:
        """
        Corners of the square in counter-clockwise order

        The half-extent corner offsets are rotated by theta and translated
        by the center.
        """
        half = self.side / 2.0
        cos_t = math.cos(self.theta)
        sin_t = math.sin(self.theta)
        corners = [(-half, -half), (half, -half), (half, half), (-half, half)]

        vertices = []
        for cx, cy in corners:
            x_rot = snap_zero(cx * cos_t - cy * sin_t)
            y_rot = snap_zero(cx * sin_t + cy * cos_t)
            vertices.append(Point(self.center.x + x_rot, self.center.y + y_rot))
        return vertices

    def edges(self) -> List[tuple]:
        """Consecutive vertex pairs, closing back to the first vertex"""
        vertices = self.vertices()
        return [(vertices[i], vertices[(i + 1) % 4]) for i in range(4)]


def container_square(side: float) -> Square:
    """Axis-aligned container of the given side anchored at the origin"""
    return Square(Point(side / 2.0, side / 2.0), 0.0, side)


def point_in_square(p: Point, square: Square) -> bool:
    """Check containment by moving p into the square's unrotated frame"""
    dx = p.x - square.center.x
    dy = p.y - square.center.y
    cos_t = math.cos(-square.theta)
    sin_t = math.sin(-square.theta)
    local_x = dx * cos_t - dy * sin_t
    local_y = dx * sin_t + dy * cos_t
    half = square.side / 2.0
    return abs(local_x) <= half + EPSILON and abs(local_y) <= half + EPSILON


def _between(a: float, b: float, c: float) -> bool:
    return min(a, b) - EPSILON <= c <= max(a, b) + EPSILON


def segment_intersect(p1: Point, p2: Point, q1: Point, q2: Point) -> Optional[Point]:
    """
    Intersection point of segments p1-p2 and q1-q2

    Both supporting lines are written as A*x + B*y = C. Parallel or
    degenerate pairs have a near-zero determinant and yield None.

    Returns:
        The intersection point, or None if the segments do not meet
    """
    a1 = p2.y - p1.y
    b1 = p1.x - p2.x
    c1 = a1 * p1.x + b1 * p1.y
    a2 = q2.y - q1.y
    b2 = q1.x - q2.x
    c2 = a2 * q1.x + b2 * q1.y

    det = a1 * b2 - a2 * b1
    if abs(det) < EPSILON:
        return None

    x = (b2 * c1 - b1 * c2) / det
    y = (a1 * c2 - a2 * c1) / det

    if (_between(p1.x, p2.x, x) and _between(p1.y, p2.y, y) and
            _between(q1.x, q2.x, x) and _between(q1.y, q2.y, y)):
        return Point(snap_zero(x), snap_zero(y))
    return None


def overlap_polygon(sq1: Square, sq2: Square) -> List[Point]:
    """
    Candidate vertices of the intersection region of two squares

    Collects every edge/edge crossing plus the vertices of each square that
    lie inside the other. Points come back unordered and may repeat.
    """
    points = []
    for p1, p2 in sq1.edges():
        for q1, q2 in sq2.edges():
            hit = segment_intersect(p1, p2, q1, q2)
            if hit is not None:
                points.append(hit)

    points.extend(v for v in sq1.vertices() if point_in_square(v, sq2))
    points.extend(v for v in sq2.vertices() if point_in_square(v, sq1))
    return points


def polygon_area(points: List[Point]) -> float:
    """
    Area of the convex polygon spanned by the given points

    Points are ordered by angle around their centroid before applying the
    shoelace formula. Fewer than three points means no overlap.
    """
    n = len(points)
    if n < 3:
        return 0.0

    cx = sum(p.x for p in points) / n
    cy = sum(p.y for p in points) / n
    ordered = sorted(points, key=lambda p: math.atan2(p.y - cy, p.x - cx))

    total = 0.0
    for i in range(n):
        a = ordered[i]
        b = ordered[(i + 1) % n]
        total += a.x * b.y - b.x * a.y
    return snap_zero(abs(total) / 2.0)


def contains(inner: Square, outer: Square) -> bool:
    """True iff every vertex of inner lies inside outer"""
    return all(point_in_square(v, outer) for v in inner.vertices())


def overlap_area(sq1: Square, sq2: Square) -> float:
    """
    Area shared by two squares

    Full containment is answered directly with the contained square's area,
    which skips polygon construction on the hottest path of fitness
    evaluation.
    """
    if contains(sq2, sq1):
        return sq2.area
    if contains(sq1, sq2):
        return sq1.area
    return polygon_area(overlap_polygon(sq1, sq2))


def inside_container(square: Square, container_side: float) -> bool:
    """Check that all vertices lie within [0, L] x [0, L]"""
    for v in square.vertices():
        if not (_between(0.0, container_side, v.x) and _between(0.0, container_side, v.y)):
            return False
    return True
