# -*- coding: utf-8 -*-
"""Main window + menus."""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import QMainWindow, QGraphicsScene, QDockWidget, QStatusBar, QFileDialog

from ..core.controller import LinkageController
from ..core.parameters import MechanismConfig
from .panel import MechanismPanel
from .view import MechanismView


class MainWindow(QMainWindow):
    def __init__(self, config: Optional[MechanismConfig] = None):
        super().__init__()
        self.setWindowTitle("M-Linkage")
        self.resize(1200, 800)
        self.setStatusBar(QStatusBar())
        self.scene = QGraphicsScene(-2000, -2000, 4000, 4000)
        self.ctrl = LinkageController(self.scene, self, config)
        self.view = MechanismView(self.scene, self.ctrl)
        self.setCentralWidget(self.view)
        self.dock = QDockWidget("Mechanism", self)
        self.panel = MechanismPanel(self.ctrl)
        self.dock.setWidget(self.panel)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.dock)
        self._build_menus()
        self.ctrl.update_status()
        self.view.reset_view()

    def _build_menus(self):
        mb = self.menuBar()
        m_file = mb.addMenu("&File")
        self.act_open = QAction("Open mechanism...", self)
        self.act_open.setShortcut(QKeySequence.StandardKey.Open)
        self.act_open.triggered.connect(self.file_open)
        m_file.addAction(self.act_open)
        m_file.addSeparator()
        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)
        m_file.addAction(self.act_exit)

        m_view = mb.addMenu("&View")
        self.act_fit = QAction("Fit all", self)
        self.act_fit.triggered.connect(self.view.fit_all)
        m_view.addAction(self.act_fit)
        self.act_reset = QAction("Reset view", self)
        self.act_reset.triggered.connect(self.view.reset_view)
        m_view.addAction(self.act_reset)
        m_view.addSeparator()
        self.act_reachable = QAction("Sample reachable workspace", self)
        self.act_reachable.triggered.connect(self.ctrl.start_reachable_sweep)
        m_view.addAction(self.act_reachable)
        self.act_envelope = QAction("Show envelope", self)
        self.act_envelope.setCheckable(True)
        self.act_envelope.setChecked(True)
        self.act_envelope.toggled.connect(self.ctrl.envelope_item.setVisible)
        m_view.addAction(self.act_envelope)

    def file_open(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open mechanism", "", "Mechanism (*.json);;All files (*)")
        if not path:
            return
        if self.ctrl.load_config(path):
            self.view.reset_view()

    def closeEvent(self, e):
        self.ctrl.stop_reachable_sweep()
        super().closeEvent(e)
