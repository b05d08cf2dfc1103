# -*- coding: utf-8 -*-
"""Right-side panel: motor angle input and the current pose."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PyQt6.QtCore import QSignalBlocker
from PyQt6.QtWidgets import (
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

if TYPE_CHECKING:
    from ..core.controller import LinkageController


def _angle_spin() -> QDoubleSpinBox:
    spin = QDoubleSpinBox()
    spin.setRange(-360.0, 720.0)
    spin.setDecimals(3)
    spin.setSingleStep(1.0)
    spin.setSuffix(" °")
    return spin


class MechanismPanel(QWidget):
    def __init__(self, ctrl: LinkageController):
        super().__init__()
        self.ctrl = ctrl
        self.ctrl.panel = self
        self.precision = 3
        layout = QVBoxLayout(self)

        mech_box = QGroupBox("Mechanism")
        mech_form = QFormLayout(mech_box)
        self.lbl_span = QLabel()
        self.lbl_active = QLabel()
        self.lbl_passive = QLabel()
        mech_form.addRow("Span", self.lbl_span)
        mech_form.addRow("Active arm", self.lbl_active)
        mech_form.addRow("Passive arm", self.lbl_passive)
        layout.addWidget(mech_box)

        fwd_box = QGroupBox("Motor angles")
        fwd_form = QFormLayout(fwd_box)
        self.spin_a = _angle_spin()
        self.spin_b = _angle_spin()
        fwd_form.addRow("Angle A", self.spin_a)
        fwd_form.addRow("Angle B", self.spin_b)
        self.btn_forward = QPushButton("Solve forward")
        self.btn_forward.clicked.connect(self._solve_forward)
        fwd_form.addRow(self.btn_forward)
        layout.addWidget(fwd_box)

        pose_box = QGroupBox("Pose")
        pose_form = QFormLayout(pose_box)
        self.lbl_effector = QLabel()
        self.lbl_gamma = QLabel()
        self.lbl_delta = QLabel()
        self.lbl_end = QLabel()
        self.lbl_last = QLabel()
        self.lbl_last.setWordWrap(True)
        pose_form.addRow("Effector", self.lbl_effector)
        pose_form.addRow("Gamma", self.lbl_gamma)
        pose_form.addRow("Delta", self.lbl_delta)
        pose_form.addRow("End angle", self.lbl_end)
        pose_form.addRow("Last solve", self.lbl_last)
        layout.addWidget(pose_box)
        layout.addStretch(1)
        self.refresh()

    def _solve_forward(self):
        self.ctrl.sync_forward(self.spin_a.value(), self.spin_b.value())
        self.refresh()

    def _fmt(self, v: float) -> str:
        return f"{v:.{self.precision}f}"

    def refresh(self):
        s = self.ctrl.solver
        self.lbl_span.setText(self._fmt(s.span))
        self.lbl_active.setText(self._fmt(s.active_length))
        self.lbl_passive.setText(self._fmt(s.passive_length))

        pose = s.pose
        if pose is None:
            for lbl in (self.lbl_effector, self.lbl_gamma, self.lbl_delta, self.lbl_end):
                lbl.setText("-")
        else:
            with QSignalBlocker(self.spin_a), QSignalBlocker(self.spin_b):
                self.spin_a.setValue(pose.angle_a)
                self.spin_b.setValue(pose.angle_b)
            x, y = pose.end_effector
            self.lbl_effector.setText(f"({self._fmt(x)}, {self._fmt(y)})")
            self.lbl_gamma.setText(self._fmt(pose.gamma) + " °")
            self.lbl_delta.setText(self._fmt(pose.delta) + " °")
            self.lbl_end.setText(self._fmt(pose.end_angle) + " °")

        res = self.ctrl.last_result
        if res is None:
            self.lbl_last.setText("-")
        elif res.ok:
            self.lbl_last.setText("ok")
        else:
            self.lbl_last.setText(f"{type(res.error).__name__}: {res.error}")
