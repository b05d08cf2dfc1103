# -*- coding: utf-8 -*-
"""Geometry helpers."""

from __future__ import annotations

import math
from typing import NamedTuple, Tuple


class Point2(NamedTuple):
    x: float
    y: float

    def distance_to(self, other: Tuple[float, float]) -> float:
        return math.hypot(other[0] - self.x, other[1] - self.y)


def radians(d: float) -> float:
    return d * math.pi / 180.0


def cap_degrees(d: float) -> float:
    """Wrap angle to [0, 360)."""
    d = math.fmod(d, 360.0)
    if d < 0.0:
        d += 360.0
    # fmod of a tiny negative value can round back up to 360
    if d >= 360.0:
        d -= 360.0
    return d


def degrees(r: float) -> float:
    """Radians to degrees, wrapped to [0, 360)."""
    return cap_degrees(r * 180.0 / math.pi)


def angle_difference(a: float, b: float) -> float:
    """Smallest absolute difference between two angles in degrees."""
    diff = cap_degrees(a - b)
    return min(diff, 360.0 - diff)


def distance(p1: Tuple[float, float], p2: Tuple[float, float]) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def triangle_angle(a: float, b: float, c: float) -> float:
    """Angle opposite side ``a`` of the triangle with sides a, b, c (radians).

    Law of cosines. Raises ValueError when b or c is zero or when the three
    lengths cannot close a triangle.
    """
    if b == 0.0 or c == 0.0:
        raise ValueError("adjacent side of zero length")
    cos_a = (b * b + c * c - a * a) / (2.0 * b * c)
    if not -1.0 <= cos_a <= 1.0:
        raise ValueError(f"acos argument {cos_a!r} outside [-1, 1]")
    return math.acos(cos_a)


def scene_to_mechanism(sx: float, sy: float, origin: Tuple[float, float] = (0.0, 0.0)) -> Point2:
    """Map a scene position (y down) to the solver frame.

    The solver frame has its origin at the left motor pivot and positive y
    pointing into the workspace.
    """
    return Point2(float(sx) - origin[0], origin[1] - float(sy))


def mechanism_to_scene(x: float, y: float, origin: Tuple[float, float] = (0.0, 0.0)) -> Tuple[float, float]:
    return float(x) + origin[0], origin[1] - float(y)
