"""Entry point: ``python -m signly [file.pdf]``."""

from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from signly.config import configure_logging, load_settings
from signly.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def main() -> int:
    settings = load_settings()
    configure_logging(settings.log_level)

    app = QApplication(sys.argv)
    app.setApplicationName("Signly")
    window = MainWindow(settings)
    window.show()

    if len(sys.argv) > 1:
        window.load_file(sys.argv[1])

    logger.debug("Starting event loop")
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
