# -*- coding: utf-8 -*-
"""Graphics view interaction (pan/zoom/drag the end effector)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PyQt6.QtCore import Qt, QPointF, QRectF
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QGraphicsView, QGraphicsScene

from ..utils.qt_safe import safe_event

if TYPE_CHECKING:
    from ..core.controller import LinkageController


class MechanismView(QGraphicsView):
    def __init__(self, scene: QGraphicsScene, ctrl: "LinkageController"):
        super().__init__(scene)
        self.ctrl = ctrl
        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.NoContextMenu)

        self._lmb_down = False
        self._rmb_pan = False
        self._rmb_start = QPointF()

    def wheelEvent(self, e):
        f = 1.25 if e.angleDelta().y() > 0 else 0.8
        self.scale(f, f)

    def _sync(self, e):
        self.ctrl.sync_to_point(self.mapToScene(e.position().toPoint()))

    @safe_event
    def mousePressEvent(self, e):
        if e.button() == Qt.MouseButton.LeftButton:
            self._lmb_down = True
            self._sync(e)
            e.accept(); return
        if e.button() == Qt.MouseButton.RightButton:
            self._rmb_pan = True
            self._rmb_start = e.position().toPoint()
            self.setCursor(Qt.CursorShape.ClosedHandCursor)
            e.accept(); return
        super().mousePressEvent(e)

    @safe_event
    def mouseMoveEvent(self, e):
        if self._rmb_pan:
            dx = e.position().toPoint().x() - self._rmb_start.x()
            dy = e.position().toPoint().y() - self._rmb_start.y()
            self.horizontalScrollBar().setValue(self.horizontalScrollBar().value() - dx)
            self.verticalScrollBar().setValue(self.verticalScrollBar().value() - dy)
            self._rmb_start = e.position().toPoint()
            e.accept(); return
        if self._lmb_down:
            self._sync(e)
            e.accept(); return
        super().mouseMoveEvent(e)

    @safe_event
    def mouseReleaseEvent(self, e):
        if e.button() == Qt.MouseButton.RightButton and self._rmb_pan:
            self._rmb_pan = False
            self.setCursor(Qt.CursorShape.ArrowCursor)
            self.ctrl.update_status()
            e.accept(); return
        if e.button() == Qt.MouseButton.LeftButton and self._lmb_down:
            self._lmb_down = False
            self._sync(e)
            e.accept(); return
        super().mouseReleaseEvent(e)

    def reset_view(self):
        self.resetTransform()
        self.centerOn(self.ctrl.to_scene((self.ctrl.solver.span / 2.0, 0.0)))

    def fit_all(self):
        rect = self.scene().itemsBoundingRect()
        if rect.isNull():
            return
        pad = 40
        r = QRectF(rect.left() - pad, rect.top() - pad, rect.width() + 2 * pad, rect.height() + 2 * pad)
        self.fitInView(r, Qt.AspectRatioMode.KeepAspectRatio)
