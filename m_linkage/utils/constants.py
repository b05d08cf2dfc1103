# -*- coding: utf-8 -*-
"""UI constants and colors."""

from PyQt6.QtGui import QColor

DARK = QColor(40, 40, 40)
HILITE = QColor(0, 120, 255)
REACHABLE = QColor(128, 128, 128, 110)
ENVELOPE = QColor(0, 120, 215, 140)

PIVOT_RADIUS = 40.0
EFFECTOR_RADIUS = 20.0
LINE_WIDTH = 2.0
