"""Allow running Cronos as a module: python -m cronos."""

import sys

from loguru import logger
from PyQt6.QtWidgets import QApplication

from .database.db import APP_SUPPORT_DIR, init_db
from .log import setup_logger
from .settings import load_settings


def main() -> None:
    settings = load_settings()
    setup_logger(settings.log_level, APP_SUPPORT_DIR / "logs" / "cronos.log")
    init_db()
    logger.info("Cronos ready")

    app = QApplication(sys.argv)
    app.setApplicationName("Cronos")
    app.setOrganizationName("Cronos")

    from .app import CronosApp, _make_icon
    app.setWindowIcon(_make_icon())

    window = CronosApp()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
