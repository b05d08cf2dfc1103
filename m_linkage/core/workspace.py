# -*- coding: utf-8 -*-
"""Headless workspace sampling for the reachable-area overlay."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional, Tuple

import numpy as np

from .geometry import triangle_angle
from .solver import KinematicsSolver

logger = logging.getLogger(__name__)


@dataclass
class SweepSettings:
    start: float = 0.0
    end: float = 360.0
    step: float = 0.5

    def angle_grid(self) -> np.ndarray:
        if self.step <= 0.0:
            raise ValueError("step must be positive")
        if self.end <= self.start:
            raise ValueError("end must be greater than start")
        return np.arange(self.start, self.end, self.step, dtype=float)


@dataclass
class WorkspaceSample:
    points: np.ndarray
    angles: np.ndarray
    attempts: int
    stopped: bool = False

    @property
    def count(self) -> int:
        return int(self.points.shape[0])


class Envelope(NamedTuple):
    """Axis-aligned ellipse drawn around the workspace."""

    cx: float
    cy: float
    rx: float
    ry: float

    def contains(self, point: Tuple[float, float]) -> bool:
        if self.rx <= 0.0 or self.ry <= 0.0:
            return False
        u = (point[0] - self.cx) / self.rx
        v = (point[1] - self.cy) / self.ry
        return u * u + v * v <= 1.0


def envelope(span: float, active_length: float, passive_length: float) -> Envelope:
    """Ellipse spanning the baseboard whose height comes from an isosceles trapezoid.

    The trapezoid has the baseboard as one base and the active arms as legs;
    its diagonal ``p`` satisfies p^2 = 2*span*passive_length + active_length^2.
    """
    p = math.sqrt(span * passive_length * 2.0 + active_length * active_length)
    try:
        theta = triangle_angle(p, span, active_length)
    except ValueError:
        return Envelope(span / 2.0, 0.0, span / 2.0, 0.0)
    height = abs(active_length * math.sin(theta))
    return Envelope(span / 2.0, 0.0, span / 2.0, height)


def sweep_reachable(
    solver: KinematicsSolver,
    settings: Optional[SweepSettings] = None,
    progress: Optional[Callable[[int, int], None]] = None,
    should_stop: Optional[Callable[[], bool]] = None,
) -> WorkspaceSample:
    """Run ``solve_forward`` over every angle pair and keep the valid effectors.

    ``solver`` only supplies the mechanism; the sweep solves on a private
    copy so the caller's pose is left alone. ``progress(done_rows, rows)`` is
    called after each value of angle a.
    """
    settings = settings or SweepSettings()
    grid = settings.angle_grid()
    probe = KinematicsSolver(solver.span, solver.active_length, solver.passive_length, solver.arm_length_tolerance)

    points = []
    angles = []
    attempts = 0
    stopped = False
    rows = int(grid.size)
    for i, a in enumerate(grid):
        if should_stop is not None and should_stop():
            stopped = True
            break
        for b in grid:
            attempts += 1
            res = probe.solve_forward(float(a), float(b))
            if not res:
                continue
            points.append(res.pose.end_effector)
            angles.append((res.pose.angle_a, res.pose.angle_b))
        if progress is not None:
            progress(i + 1, rows)

    logger.info("workspace sweep: %d of %d angle pairs reachable", len(points), attempts)
    return WorkspaceSample(
        points=np.asarray(points, dtype=float).reshape(-1, 2),
        angles=np.asarray(angles, dtype=float).reshape(-1, 2),
        attempts=attempts,
        stopped=stopped,
    )


def rasterize(
    points: np.ndarray,
    x_range: Tuple[float, float],
    y_range: Tuple[float, float],
    resolution: float = 1.0,
) -> np.ndarray:
    """Occupancy grid (uint8, 0/1) of ``points``.

    Row 0 is the highest y so the array reads like an image of the workspace.
    Points outside the ranges are dropped.
    """
    if resolution <= 0.0:
        raise ValueError("resolution must be positive")
    x0, x1 = float(x_range[0]), float(x_range[1])
    y0, y1 = float(y_range[0]), float(y_range[1])
    if x1 <= x0 or y1 <= y0:
        raise ValueError("empty raster range")
    width = int(math.floor((x1 - x0) / resolution)) + 1
    height = int(math.floor((y1 - y0) / resolution)) + 1
    grid = np.zeros((height, width), dtype=np.uint8)

    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    if pts.size == 0:
        return grid
    cols = np.floor((pts[:, 0] - x0) / resolution).astype(int)
    rows = np.floor((y1 - pts[:, 1]) / resolution).astype(int)
    inside = (cols >= 0) & (cols < width) & (rows >= 0) & (rows < height)
    grid[rows[inside], cols[inside]] = 1
    return grid
