# -*- coding: utf-8 -*-
"""Application entry point."""

from __future__ import annotations

import logging
import sys
from typing import List, Optional

from PyQt6.QtWidgets import QApplication

from .core.parameters import ConfigError, load_config
from .ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None):
    argv = list(sys.argv if argv is None else argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = None
    if len(argv) > 1:
        try:
            config = load_config(argv[1])
            config.resolve()
        except (OSError, ConfigError) as exc:
            logger.error("could not load mechanism %s: %s", argv[1], exc)
            sys.exit(2)
    app = QApplication(argv)
    w = MainWindow(config)
    w.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
