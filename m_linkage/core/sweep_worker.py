# -*- coding: utf-8 -*-
"""Background worker for the reachable-workspace sweep."""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QThread, pyqtSignal

from .solver import KinematicsSolver
from .workspace import SweepSettings, sweep_reachable

logger = logging.getLogger(__name__)


class ReachableSweepWorker(QThread):
    progress = pyqtSignal(dict)
    completed = pyqtSignal(object)
    failed = pyqtSignal(str)

    def __init__(self, solver: KinematicsSolver, settings: Optional[SweepSettings] = None):
        super().__init__()
        # sweep_reachable solves on its own copy; the GUI solver is only read here
        self.solver = solver
        self.settings = settings or SweepSettings()
        self._stop = False

    def stop(self) -> None:
        self._stop = True

    def _emit_progress(self, done: int, total: int) -> None:
        self.progress.emit({"done": done, "total": total})

    def run(self) -> None:
        try:
            sample = sweep_reachable(
                self.solver,
                self.settings,
                progress=self._emit_progress,
                should_stop=lambda: self._stop,
            )
        except Exception as exc:
            logger.exception("workspace sweep failed")
            self.failed.emit(str(exc).splitlines()[0] if str(exc) else type(exc).__name__)
            return
        self.completed.emit(sample)
