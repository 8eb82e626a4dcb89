"""Application settings manager for persistent storage."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class AppSettings:
    """Manages grid settings with persistent JSON storage."""

    CIRCULAR_MODE_ERROR = "error"
    CIRCULAR_MODE_ZERO = "zero"
    CIRCULAR_MODES = (CIRCULAR_MODE_ERROR, CIRCULAR_MODE_ZERO)

    DEFAULTS = {
        "row_count": 10000,
        "column_count": 10000,
        "cell_width": 80,
        "cell_height": 24,
        "overscan": 0,
        "resize_debounce_ms": 100,
        "circular_reference_mode": CIRCULAR_MODE_ERROR,
    }

    def __init__(self, settings_file=None):
        """Initialize settings manager.

        Args:
            settings_file: Path to settings file. If None, uses default location.
        """
        if settings_file is None:
            # Use user's home directory for settings
            settings_dir = Path.home() / ".gridsheet"
            settings_dir.mkdir(exist_ok=True)
            settings_file = settings_dir / "settings.json"

        self.settings_file = Path(settings_file)
        self.settings = {}
        self._load()

    def _load(self):
        """Load settings from file."""
        if self.settings_file.exists():
            try:
                with open(self.settings_file, 'r', encoding='utf-8') as f:
                    self.settings = json.load(f)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load settings: {e}")
                self.settings = {}
            if not isinstance(self.settings, dict):
                logger.error(f"Ignoring settings file {self.settings_file}: expected a JSON object")
                self.settings = {}
        else:
            self.settings = {}

    def _save(self):
        """Save settings to file."""
        try:
            with open(self.settings_file, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")

    def _get_int(self, key, minimum):
        """Get an integer setting, falling back to the default when malformed."""
        default = self.DEFAULTS[key]
        value = self.settings.get(key, default)
        if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
            logger.warning(f"Invalid value for setting '{key}': {value!r}, using {default}")
            return default
        return value

    def _set_int(self, key, value, minimum):
        if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
            raise ValueError(f"Setting '{key}' must be an integer >= {minimum}, got {value!r}")
        self.settings[key] = value
        self._save()

    def get_grid_size(self):
        """Get the logical grid extent.

        Returns:
            Tuple of (row_count, column_count)
        """
        return self._get_int("row_count", 1), self._get_int("column_count", 1)

    def set_grid_size(self, row_count, column_count):
        """Save the logical grid extent.

        Args:
            row_count: Number of logical rows
            column_count: Number of logical columns
        """
        self._set_int("row_count", row_count, 1)
        self._set_int("column_count", column_count, 1)

    def get_cell_size(self):
        """Get the fixed cell dimensions in pixels.

        Returns:
            Tuple of (cell_width, cell_height)
        """
        return self._get_int("cell_width", 1), self._get_int("cell_height", 1)

    def set_cell_size(self, cell_width, cell_height):
        self._set_int("cell_width", cell_width, 1)
        self._set_int("cell_height", cell_height, 1)

    def get_overscan(self):
        """Get the number of extra rows/columns rendered around the viewport."""
        return self._get_int("overscan", 0)

    def set_overscan(self, overscan):
        self._set_int("overscan", overscan, 0)

    def get_resize_debounce_ms(self):
        """Get the resize debounce delay in milliseconds."""
        return self._get_int("resize_debounce_ms", 0)

    def set_resize_debounce_ms(self, delay_ms):
        self._set_int("resize_debounce_ms", delay_ms, 0)

    def get_circular_reference_mode(self):
        """Get how circular formula references are displayed.

        Returns:
            "error" to show the #CIRCULAR! marker, "zero" to contribute 0
        """
        default = self.DEFAULTS["circular_reference_mode"]
        mode = self.settings.get("circular_reference_mode", default)
        if mode not in self.CIRCULAR_MODES:
            logger.warning(f"Unknown circular reference mode {mode!r}, using '{default}'")
            return default
        return mode

    def set_circular_reference_mode(self, mode):
        """Save the circular reference mode.

        Args:
            mode: One of "error" or "zero"
        """
        if mode not in self.CIRCULAR_MODES:
            raise ValueError(f"Circular reference mode must be one of {self.CIRCULAR_MODES}, got {mode!r}")
        self.settings["circular_reference_mode"] = mode
        self._save()
