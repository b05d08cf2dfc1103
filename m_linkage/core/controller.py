# -*- coding: utf-8 -*-
"""LinkageController: glue between the solver, the scene and the window."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Tuple

from PyQt6.QtCore import QPointF
from PyQt6.QtWidgets import QGraphicsScene

from .geometry import mechanism_to_scene, scene_to_mechanism
from .parameters import ConfigError, MechanismConfig, ResolvedMechanism, load_config
from .solver import KinematicsSolver, SolveResult
from .sweep_worker import ReachableSweepWorker
from .workspace import SweepSettings, WorkspaceSample, envelope, rasterize
from ..ui.items import ArmItem, BaseboardItem, CircleItem, EnvelopeItem, ReachableItem
from ..utils.constants import EFFECTOR_RADIUS, PIVOT_RADIUS

if TYPE_CHECKING:
    from ..ui.main_window import MainWindow

logger = logging.getLogger(__name__)


class LinkageController:
    def __init__(self, scene: QGraphicsScene, win: Optional["MainWindow"] = None,
                 config: Optional[MechanismConfig] = None):
        self.scene = scene
        self.win = win
        self.panel = None
        # Scene position of the left motor pivot.
        self.origin: Tuple[float, float] = (0.0, 0.0)
        self.sweep_settings = SweepSettings()
        self.raster_resolution = 1.0
        self._worker: Optional[ReachableSweepWorker] = None
        self.last_result: Optional[SolveResult] = None

        self.baseboard = BaseboardItem()
        self.arm_a = ArmItem(active=True)
        self.arm_b = ArmItem(active=True)
        self.passive_a = ArmItem(active=False)
        self.passive_b = ArmItem(active=False)
        self.pivot_a = CircleItem(PIVOT_RADIUS)
        self.pivot_b = CircleItem(PIVOT_RADIUS)
        self.effector = CircleItem(EFFECTOR_RADIUS, highlight=True)
        self.envelope_item = EnvelopeItem()
        self.reachable_item = ReachableItem()
        for it in (
            self.reachable_item, self.envelope_item, self.baseboard,
            self.arm_a, self.arm_b, self.passive_a, self.passive_b,
            self.pivot_a, self.pivot_b, self.effector,
        ):
            self.scene.addItem(it)

        self.config = config or MechanismConfig()
        self.mechanism: ResolvedMechanism = self.config.resolve()
        self.solver = KinematicsSolver.from_config(self.mechanism)
        self._reset_pose()

    # ---- mechanism ----

    def _reset_pose(self):
        """Start from the effector at the middle of the baseboard."""
        self.stop_reachable_sweep()
        self.reachable_item.clear()
        res = self.solver.solve_inverse((self.solver.span / 2.0, 0.0))
        if not res:
            logger.warning("default pose unavailable for %r: %s", self.solver, res.error)
        self.last_result = res
        self.update_graphics()

    def load_config(self, path: str) -> bool:
        try:
            config = load_config(path)
            mechanism = config.resolve()
            solver = KinematicsSolver.from_config(mechanism)
        except (OSError, ConfigError, ValueError) as exc:
            logger.error("could not load mechanism %s: %s", path, exc)
            self.show_message(f"Could not load {path}: {exc}")
            return False
        self.config = config
        self.mechanism = mechanism
        self.solver = solver
        self._reset_pose()
        logger.info("loaded mechanism %s: %r", path, solver)
        return True

    # ---- input ----

    def to_mechanism(self, scene_pos: QPointF):
        return scene_to_mechanism(scene_pos.x(), scene_pos.y(), self.origin)

    def to_scene(self, point) -> QPointF:
        sx, sy = mechanism_to_scene(point[0], point[1], self.origin)
        return QPointF(sx, sy)

    def sync_to_point(self, scene_pos: QPointF) -> SolveResult:
        """Move the effector under the pointer; a failed solve leaves the drawing as is."""
        target = self.to_mechanism(scene_pos)
        res = self.solver.solve_inverse(target)
        self._after_solve(res)
        return res

    def sync_forward(self, angle_a: float, angle_b: float) -> SolveResult:
        res = self.solver.solve_forward(angle_a, angle_b)
        self._after_solve(res)
        return res

    def _after_solve(self, res: SolveResult):
        self.last_result = res
        if res:
            self.update_graphics()
        self.update_status()

    # ---- drawing ----

    def _xy(self, point) -> Tuple[float, float]:
        return mechanism_to_scene(point[0], point[1], self.origin)

    def update_graphics(self):
        span = self.solver.span
        a = self._xy((0.0, 0.0))
        e = self._xy((span, 0.0))
        self.baseboard.update_position(a, e)
        self.pivot_a.update_position(a)
        self.pivot_b.update_position(e)

        env = envelope(span, self.solver.active_length, self.solver.passive_length)
        left, top = self._xy((env.cx - env.rx, env.cy + env.ry))
        self.envelope_item.update_rect(left, top, 2 * env.rx, 2 * env.ry)

        pose = self.solver.pose
        for it in (self.arm_a, self.arm_b, self.passive_a, self.passive_b, self.effector):
            it.setVisible(pose is not None)
        if pose is not None:
            b = self._xy(pose.joint_a)
            d = self._xy(pose.joint_b)
            c = self._xy(pose.end_effector)
            self.arm_a.update_position(a, b)
            self.arm_b.update_position(e, d)
            self.passive_a.update_position(b, c)
            self.passive_b.update_position(d, c)
            self.effector.update_position(c)
        if self.panel is not None:
            self.panel.refresh()

    def show_message(self, text: str):
        if self.win is not None:
            self.win.statusBar().showMessage(text)

    def update_status(self):
        res = self.last_result
        pose = self.solver.pose
        if res is not None and not res.ok:
            self.show_message(f"Rejected ({type(res.error).__name__}): {res.error}")
        elif pose is not None:
            x, y = pose.end_effector
            self.show_message(
                f"a={pose.angle_a:.2f}°  b={pose.angle_b:.2f}°  effector=({x:.2f}, {y:.2f})"
            )
        else:
            self.show_message("No pose")

    # ---- reachable workspace ----

    def start_reachable_sweep(self):
        if self._worker is not None and self._worker.isRunning():
            return
        self._worker = ReachableSweepWorker(self.solver, self.sweep_settings)
        self._worker.progress.connect(self._on_sweep_progress)
        self._worker.completed.connect(self._on_sweep_done)
        self._worker.failed.connect(self._on_sweep_failed)
        self._worker.start()
        self.show_message("Sampling reachable workspace...")

    def stop_reachable_sweep(self):
        if self._worker is not None and self._worker.isRunning():
            self._worker.stop()
            self._worker.wait()
        self._worker = None

    def _on_sweep_progress(self, info: dict):
        self.show_message(f"Sampling reachable workspace... {info['done']}/{info['total']}")

    def _on_sweep_failed(self, msg: str):
        self.show_message(f"Workspace sweep failed: {msg}")

    def _on_sweep_done(self, sample: WorkspaceSample):
        if sample.count == 0:
            self.reachable_item.clear()
            self.show_message("No reachable positions found")
            return
        span = self.solver.span
        reach = self.solver.active_length + self.solver.passive_length
        res = self.raster_resolution
        grid = rasterize(sample.points, (0.0, span), (-reach, reach), res)
        left, top = self._xy((0.0, reach))
        self.reachable_item.set_grid(grid, left, top, res)
        self.show_message(f"{sample.count} of {sample.attempts} angle pairs reachable")
