"""
Spreadsheet Widget
A virtualized spreadsheet grid with a formula bar, backed by a SheetSession.

QTableView only asks the model for the cells it paints, so a 10,000 x 10,000
sheet costs per-frame work proportional to the visible cells.
"""

from PySide6 import QtWidgets, QtCore, QtGui
from PySide6.QtCore import Qt

from .logger import logger
from .debounced_resize import DebouncedResizeWatcher
from .sheet_session import AdvanceDirection, EditSurface, SheetSession
from .sheet_utils import column_label
from .viewport import ViewportSize

SELECTION_COLOR = "#4472C4"


class SpreadsheetModel(QtCore.QAbstractTableModel):
    """Table model exposing a SheetSession to Qt views."""

    def __init__(self, session, parent=None):
        """Initialize the spreadsheet model.

        Args:
            session: SheetSession that owns the cell data
            parent: Parent object
        """
        super().__init__(parent)
        self.session = session

    def rowCount(self, parent=QtCore.QModelIndex()):
        """Return the number of rows."""
        if parent.isValid():
            return 0
        return self.session.row_count

    def columnCount(self, parent=QtCore.QModelIndex()):
        """Return the number of columns."""
        if parent.isValid():
            return 0
        return self.session.col_count

    def data(self, index, role=Qt.DisplayRole):
        """Return data for the given index and role."""
        if not index.isValid():
            return None

        row, col = index.row(), index.column()

        if role == Qt.DisplayRole:
            # Evaluated value for formulas, literal text otherwise
            return self.session.display_text(row, col)
        elif role == Qt.EditRole:
            # When editing, show the formula
            return self.session.store.raw_text(row, col)
        elif role == Qt.TextAlignmentRole:
            return Qt.AlignCenter

        return None

    def setData(self, index, value, role=Qt.EditRole):
        """Write a value into a cell; the current selection is not moved."""
        if not index.isValid() or role != Qt.EditRole:
            return False

        text = str(value) if value is not None else ""
        changed = self.session.write_cell(index.row(), index.column(), text)
        if changed:
            self.refresh_window()
        return True

    def flags(self, index):
        """Return item flags for the given index."""
        if not index.isValid():
            return Qt.NoItemFlags

        return Qt.ItemIsEnabled | Qt.ItemIsSelectable | Qt.ItemIsEditable

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        """Return header data."""
        if role == Qt.DisplayRole:
            if orientation == Qt.Horizontal:
                # Column headers: A, B, C, ..., Z, AA, AB, ...
                return column_label(section)
            else:
                # Row headers: 1, 2, 3, ...
                return str(section + 1)
        return None

    def refresh_window(self):
        """Signal that every visible cell may have a new value.

        Any write can change formulas anywhere on screen, but only the
        current viewport window needs repainting.
        """
        window = self.session.window
        if window.is_empty:
            return
        top_left = self.index(window.first_row, window.first_col)
        bottom_right = self.index(window.last_row, window.last_col)
        self.dataChanged.emit(top_left, bottom_right, [Qt.DisplayRole, Qt.EditRole])


class CellEditorDelegate(QtWidgets.QStyledItemDelegate):
    """In-grid line editor that routes Enter/Tab/focus-out to the widget."""

    def __init__(self, parent_widget, parent=None):
        super().__init__(parent)
        self.parent_widget = parent_widget

    def createEditor(self, parent, option, index):
        editor = QtWidgets.QLineEdit(parent)
        editor.setFrame(False)
        editor.setAlignment(Qt.AlignCenter)
        editor.textEdited.connect(self.parent_widget._on_editor_text_edited)
        return editor

    def setEditorData(self, editor, index):
        editor.setText(self.parent_widget.session.edit_buffer)

    def setModelData(self, editor, model, index):
        # The session commits the edit buffer itself
        pass

    def eventFilter(self, editor, event):
        """Handle Enter/Tab and focus loss on the in-grid editor."""
        if event.type() == QtCore.QEvent.KeyPress:
            if event.key() in (Qt.Key_Return, Qt.Key_Enter):
                self.parent_widget._confirm_from_grid(editor, AdvanceDirection.DOWN)
                return True
            elif event.key() == Qt.Key_Tab:
                self.parent_widget._confirm_from_grid(editor, AdvanceDirection.RIGHT)
                return True
        elif event.type() == QtCore.QEvent.FocusOut:
            self.parent_widget._on_editor_blur()

        return super().eventFilter(editor, event)


class SpreadsheetTableView(QtWidgets.QTableView):
    """Table view with fixed-size cells and a blue border on the current cell."""

    def __init__(self, cell_width=80, cell_height=24, parent=None):
        super().__init__(parent)

        # Scroll bars report pixels, which the viewport windowing expects
        self.setHorizontalScrollMode(QtWidgets.QAbstractItemView.ScrollPerPixel)
        self.setVerticalScrollMode(QtWidgets.QAbstractItemView.ScrollPerPixel)

        for header, size in (
            (self.horizontalHeader(), cell_width),
            (self.verticalHeader(), cell_height),
        ):
            header.setSectionResizeMode(QtWidgets.QHeaderView.Fixed)
            header.setDefaultSectionSize(size)
            header.setMinimumSectionSize(1)

        self.setSelectionBehavior(QtWidgets.QAbstractItemView.SelectItems)
        self.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        # Editing is opened explicitly by the widget
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.setShowGrid(True)
        self.setGridStyle(Qt.SolidLine)
        self.setFocusPolicy(Qt.StrongFocus)

    def paintEvent(self, event):
        """Paint the table and add a blue border around the current cell."""
        super().paintEvent(event)

        current = self.currentIndex()
        if not current.isValid():
            return

        rect = self.visualRect(current)
        if rect.isEmpty():
            return

        painter = QtGui.QPainter(self.viewport())
        painter.setPen(QtGui.QPen(QtGui.QColor(SELECTION_COLOR), 2))
        painter.setBrush(Qt.NoBrush)
        painter.drawRect(rect.adjusted(1, 1, -1, -1))
        painter.end()


class SpreadsheetWidget(QtWidgets.QWidget):
    """Spreadsheet grid with a formula bar and current-cell label."""

    def __init__(self, session=None, app_settings=None, parent=None):
        """Initialize the spreadsheet widget.

        Args:
            session: SheetSession to display. Created from app_settings if None.
            app_settings: AppSettings for grid extent, cell size and debounce delay
            parent: Parent widget
        """
        super().__init__(parent)
        self.app_settings = app_settings
        self.session = session if session is not None else SheetSession(app_settings=app_settings)

        # Guards against feeding our own view updates back into the session
        self._syncing = False

        # Create layout
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(5)

        # Create custom table view FIRST (before toolbar)
        self.table_view = SpreadsheetTableView(self.session.cell_width, self.session.cell_height)

        # Create model
        self.model = SpreadsheetModel(self.session, self)
        self.table_view.setModel(self.model)

        self.cell_delegate = CellEditorDelegate(self, self.table_view)
        self.table_view.setItemDelegate(self.cell_delegate)

        # Create toolbar (after table_view exists)
        self._create_toolbar()
        layout.addWidget(self.toolbar)

        # Add table view
        layout.addWidget(self.table_view)

        self.table_view.clicked.connect(self._on_cell_clicked)
        self.table_view.selectionModel().currentChanged.connect(self._on_current_changed)
        self.table_view.horizontalScrollBar().valueChanged.connect(self._update_window)
        self.table_view.verticalScrollBar().valueChanged.connect(self._update_window)

        delay_ms = app_settings.get_resize_debounce_ms() if app_settings else 100
        self.resize_watcher = DebouncedResizeWatcher(self.table_view.viewport(), delay_ms, self)
        self.resize_watcher.viewportSizeChanged.connect(self._on_viewport_resized)
        self.session.set_viewport_size(self.resize_watcher.current_size())
        self._update_window()

        logger.info(
            f"SpreadsheetWidget initialized with {self.session.row_count} rows "
            f"and {self.session.col_count} columns"
        )

    def _create_toolbar(self):
        """Create the toolbar with the current-cell label and formula bar."""
        self.toolbar = QtWidgets.QWidget()
        toolbar_layout = QtWidgets.QHBoxLayout(self.toolbar)
        toolbar_layout.setContentsMargins(5, 5, 5, 5)
        toolbar_layout.setSpacing(8)

        self.address_label = QtWidgets.QLabel("")
        toolbar_layout.addWidget(self.address_label)

        # Formula bar label
        formula_label = QtWidgets.QLabel("fx")
        formula_label.setStyleSheet("font-weight: bold; padding: 2px;")
        toolbar_layout.addWidget(formula_label)

        # Formula bar
        self.formula_bar = QtWidgets.QLineEdit()
        self.formula_bar.setPlaceholderText("=A1+B2")
        self.formula_bar.textEdited.connect(self._on_formula_bar_edited)
        self.formula_bar.returnPressed.connect(self._on_formula_bar_enter)
        self.formula_bar.installEventFilter(self)
        toolbar_layout.addWidget(self.formula_bar, 1)

    def eventFilter(self, obj, event):
        """Treat Tab in the formula bar as confirm-and-advance-right."""
        if obj is self.formula_bar and event.type() == QtCore.QEvent.KeyPress:
            if event.key() == Qt.Key_Tab:
                self._confirm_from_formula_bar(AdvanceDirection.RIGHT)
                return True
        return super().eventFilter(obj, event)

    # -- view <-> session ----------------------------------------------------

    def _sync_from_session(self):
        """Push the session's selection, buffer and window into the view."""
        self._syncing = True
        try:
            selected = self.session.selected
            if selected is not None:
                index = self.model.index(*selected)
                self.table_view.setCurrentIndex(index)
                self.table_view.scrollTo(index)
            self.formula_bar.setText(self.session.edit_buffer)
            address = self.session.current_address
            self.address_label.setText(f"Current cell: {address}" if address else "")
        finally:
            self._syncing = False

        self.model.refresh_window()
        self.table_view.viewport().update()

        if self.session.editing and self.session.selected is not None:
            self.table_view.edit(self.model.index(*self.session.selected))

    def _update_window(self, *args):
        window = self.session.window_for_scroll(
            self.table_view.horizontalScrollBar().value(),
            self.table_view.verticalScrollBar().value(),
        )
        logger.debug(f"Visible window rows {window.first_row}-{window.last_row}, cols {window.first_col}-{window.last_col}")

    def _on_viewport_resized(self, width, height):
        self.session.set_viewport_size(ViewportSize(width, height))
        self._update_window()

    def _on_cell_clicked(self, index):
        if not index.isValid():
            return
        self.session.click_cell(index.row(), index.column())
        self._sync_from_session()

    def _on_current_changed(self, current, previous):
        """Keyboard navigation selects the new cell without editing it."""
        if self._syncing or not current.isValid():
            return
        if self.session.selected == (current.row(), current.column()):
            return
        self.session.select(current.row(), current.column())
        self._sync_from_session()

    def _on_editor_text_edited(self, text):
        # The formula bar mirrors the in-grid editor
        self.session.set_buffer(text)
        self.formula_bar.setText(text)

    def _on_formula_bar_edited(self, text):
        self.session.set_buffer(text)

    def _confirm_from_grid(self, editor, direction):
        """Enter/Tab in the in-grid editor: commit, advance, keep editing."""
        self._syncing = True
        try:
            self.session.confirm(EditSurface.GRID, direction)
            self.cell_delegate.closeEditor.emit(editor, QtWidgets.QAbstractItemDelegate.NoHint)
        finally:
            self._syncing = False
        self._sync_from_session()

    def _confirm_from_formula_bar(self, direction):
        if self.session.confirm(EditSurface.FORMULA_BAR, direction) is None:
            return
        self._sync_from_session()

    def _on_formula_bar_enter(self):
        """Handle Enter key in formula bar."""
        self._confirm_from_formula_bar(AdvanceDirection.DOWN)

    def _on_editor_blur(self):
        if self._syncing:
            return
        self.session.blur()
        self.model.refresh_window()

    # -- public API ------------------------------------------------------------

    def get_cell_value(self, row, col):
        """Get the displayed value of a cell."""
        return self.session.display_value(row, col)

    def select_cell(self, row, col):
        """Select a cell without opening the editor."""
        self.session.select(row, col)
        self._sync_from_session()

    def set_cell_value(self, row, col, value):
        """Set the content of a cell (literal or '=' formula)."""
        self.model.setData(self.model.index(row, col), value, Qt.EditRole)
        self._sync_from_session()
