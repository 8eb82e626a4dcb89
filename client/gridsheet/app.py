from PySide6 import QtWidgets
import sys

from .logger import logger
from .settings import AppSettings
from .sheet_session import SheetSession
from .spreadsheet_widget import SpreadsheetWidget


class GridSheetApp(QtWidgets.QMainWindow):
    """Main application window."""

    def __init__(self, app_settings=None, parent=None):
        try:
            super().__init__(parent)

            # Initialize app settings
            self.app_settings = app_settings if app_settings is not None else AppSettings()
            self.session = SheetSession(app_settings=self.app_settings)

            self.setWindowTitle("SpreadSheet")
            self.setMinimumSize(800, 500)

            self._build_ui()

        except Exception as e:
            logger.error("=" * 60)
            logger.error(f"CRITICAL ERROR in __init__: {e}", exc_info=True)
            logger.error("=" * 60)
            raise

    def _build_ui(self):
        central = QtWidgets.QWidget()
        layout = QtWidgets.QVBoxLayout(central)
        layout.setContentsMargins(10, 10, 10, 10)

        title = QtWidgets.QLabel("SpreadSheet")
        title.setStyleSheet("font-size: 18px; font-weight: bold;")
        layout.addWidget(title)

        self.spreadsheet = SpreadsheetWidget(session=self.session, app_settings=self.app_settings)
        layout.addWidget(self.spreadsheet, 1)

        self.setCentralWidget(central)

    def closeEvent(self, event):
        """Commit any pending edit before the window closes."""
        self.session.blur()
        logger.info(f"Closing with {len(self.session.store)} populated cells")
        super().closeEvent(event)


def main(argv=None):
    """Launch the spreadsheet window."""
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication(sys.argv if argv is None else argv)

    window = GridSheetApp()
    window.resize(1200, 800)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
