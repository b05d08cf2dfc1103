# -*- coding: utf-8 -*-
"""Graphics items used in the QGraphicsScene.

Items only read state: the controller pushes scene coordinates into them after
each committed pose.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from PyQt6.QtCore import Qt, QRectF
from PyQt6.QtGui import QPen, QBrush, QImage, QPixmap
from PyQt6.QtWidgets import (
    QGraphicsEllipseItem,
    QGraphicsLineItem,
    QGraphicsPixmapItem,
)

from ..utils.constants import DARK, ENVELOPE, HILITE, LINE_WIDTH, REACHABLE


def _passive(item):
    # Drawing only; drags are handled by the view.
    item.setAcceptedMouseButtons(Qt.MouseButton.NoButton)
    item.setAcceptHoverEvents(False)
    return item


class BaseboardItem(QGraphicsLineItem):
    def __init__(self):
        super().__init__()
        _passive(self)
        pen = QPen(DARK, LINE_WIDTH)
        pen.setDashPattern([10.0 / LINE_WIDTH, 4.0 / LINE_WIDTH])
        self.setPen(pen)
        self.setZValue(0)

    def update_position(self, p1: Tuple[float, float], p2: Tuple[float, float]):
        self.setLine(p1[0], p1[1], p2[0], p2[1])


class ArmItem(QGraphicsLineItem):
    def __init__(self, active: bool):
        super().__init__()
        _passive(self)
        self.active = active
        self.setPen(QPen(DARK, LINE_WIDTH * (1.5 if active else 1.0)))
        self.setZValue(5)

    def update_position(self, p1: Tuple[float, float], p2: Tuple[float, float]):
        self.setLine(p1[0], p1[1], p2[0], p2[1])


class CircleItem(QGraphicsEllipseItem):
    """Motor pivot or end effector marker."""

    def __init__(self, radius: float, highlight: bool = False):
        super().__init__(-radius, -radius, 2 * radius, 2 * radius)
        _passive(self)
        self.radius = radius
        self.setPen(QPen(HILITE if highlight else DARK, LINE_WIDTH))
        self.setBrush(QBrush(Qt.BrushStyle.NoBrush))
        self.setZValue(10 if highlight else 2)

    def update_position(self, center: Tuple[float, float]):
        self.setPos(center[0], center[1])


class EnvelopeItem(QGraphicsEllipseItem):
    def __init__(self):
        super().__init__()
        _passive(self)
        pen = QPen(ENVELOPE, 1.6)
        pen.setCosmetic(True)
        self.setPen(pen)
        self.setBrush(QBrush(Qt.BrushStyle.NoBrush))
        self.setZValue(-5)

    def update_rect(self, left: float, top: float, width: float, height: float):
        self.setRect(QRectF(left, top, width, height))


class ReachableItem(QGraphicsPixmapItem):
    """Raster of every effector position the sweep found valid."""

    def __init__(self):
        super().__init__()
        _passive(self)
        self.setZValue(-10)
        self.setVisible(False)
        self._image = None

    def set_grid(self, grid: np.ndarray, left: float, top: float, resolution: float):
        h, w = grid.shape
        rgba = np.zeros((h, w, 4), dtype=np.uint8)
        rgba[grid > 0] = (REACHABLE.red(), REACHABLE.green(), REACHABLE.blue(), REACHABLE.alpha())
        buf = rgba.tobytes()
        image = QImage(buf, w, h, 4 * w, QImage.Format.Format_RGBA8888)
        # QImage does not own buf
        self._image = image.copy()
        self.setPixmap(QPixmap.fromImage(self._image))
        self.setScale(resolution)
        self.setPos(left, top)
        self.setVisible(True)

    def clear(self):
        self._image = None
        self.setPixmap(QPixmap())
        self.setVisible(False)
