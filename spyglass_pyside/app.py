"""QApplication setup and entry point."""

import sys

from PySide6.QtWidgets import QApplication

from .main_window import MainWindow
from .utils.config import AppConfig, config_dir
from .utils.filesystem_index import FilesystemIndexService
from .utils.telemetry import configure_telemetry, log_exception, log_info


def main():
    configure_telemetry(log_dir=config_dir() / "logs")
    log_info("starting spyglass_pyside app")

    app = QApplication(sys.argv)
    app.setApplicationName("Spyglass")
    app.setApplicationVersion("0.1.0")
    app.setStyle("Fusion")

    config = AppConfig.load()
    log_info("configuration loaded", path=str(config.config_file))

    service = FilesystemIndexService(config_dir() / "index.json")

    try:
        window = MainWindow(config, service)
    except Exception:
        log_exception("main window creation failed")
        raise

    window.show()
    window.start()
    log_info("main window shown")
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
