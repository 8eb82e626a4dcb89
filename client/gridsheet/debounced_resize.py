"""Debounced viewport-size signal for a watched widget."""

import logging

from PySide6 import QtCore

from .viewport import ViewportSize

logger = logging.getLogger(__name__)


class DebouncedResizeWatcher(QtCore.QObject):
    """Emits the watched widget's size once resizing has settled.

    Every resize restarts a single-shot timer; only the last size in a burst
    of resize events is reported.
    """

    viewportSizeChanged = QtCore.Signal(int, int)  # width, height

    def __init__(self, widget, delay_ms=100, parent=None):
        """Initialize the watcher.

        Args:
            widget: The QWidget whose size is reported
            delay_ms: Quiet period after the last resize before emitting
            parent: Parent QObject
        """
        super().__init__(parent)
        self._widget = widget

        # Debounce timer for resize events
        self.resize_timer = QtCore.QTimer(self)
        self.resize_timer.setSingleShot(True)
        self.resize_timer.setInterval(delay_ms)
        self.resize_timer.timeout.connect(self._emit_size)

        widget.installEventFilter(self)

    def current_size(self) -> ViewportSize:
        return ViewportSize(self._widget.width(), self._widget.height())

    def eventFilter(self, obj, event):
        """Restart the debounce timer on every resize of the watched widget."""
        if obj is self._widget and event.type() == QtCore.QEvent.Resize:
            self.resize_timer.start()
        return super().eventFilter(obj, event)

    def _emit_size(self):
        size = self.current_size()
        logger.debug(f"Viewport resized to {size.width}x{size.height}")
        self.viewportSizeChanged.emit(size.width, size.height)
