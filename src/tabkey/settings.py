"""Per-song view settings.

Remembers the key (table index) and display preferences chosen for each
song, stored as JSON in the tabkey config directory.
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional, Union

from tabkey.config import get_config_dir
from tabkey.logging_config import get_logger

logger = get_logger(__name__)

GRID_COLUMN_CHOICES = (2, 3, "auto")


def get_settings_path() -> Path:
    """Get the path to the song settings file."""
    return get_config_dir() / "song_settings.json"


@dataclass
class SongSettings:
    """View settings for one song.

    Attributes:
        table_index: Table index the song is shown in
        font_size: Font scale factor
        scroll_speed: Auto-scroll speed
        grid_mode: Whether sections are laid out in a grid
        grid_columns: Grid column count (2, 3 or "auto")
    """

    table_index: int = 0
    font_size: float = 1.0
    scroll_speed: float = 0.5
    grid_mode: bool = False
    grid_columns: Union[int, str] = 2

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SongSettings":
        """Create settings from stored values, ignoring invalid fields.

        Args:
            data: Stored settings

        Returns:
            SongSettings with defaults for missing or invalid fields
        """
        settings = cls()

        # bool is a subclass of int and must not pass as a number
        table_index = data.get("table_index")
        if isinstance(table_index, int) and not isinstance(table_index, bool):
            settings.table_index = table_index

        for name in ("font_size", "scroll_speed"):
            value = data.get(name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                setattr(settings, name, float(value))

        if isinstance(data.get("grid_mode"), bool):
            settings.grid_mode = data["grid_mode"]

        grid_columns = data.get("grid_columns")
        if type(grid_columns) in (int, str) and grid_columns in GRID_COLUMN_CHOICES:
            settings.grid_columns = grid_columns

        return settings

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class SongSettingsStore:
    """JSON-backed store of SongSettings keyed by song ID.

    Attributes:
        path: Settings file path
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path or get_settings_path()

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read song settings from {self.path}: {e}")
            return {}

        return data if isinstance(data, dict) else {}

    def contains(self, song_id: str) -> bool:
        return isinstance(self._read_all().get(song_id), dict)

    def load(self, song_id: str) -> SongSettings:
        """Load settings for a song.

        Args:
            song_id: The song ID

        Returns:
            Stored settings, or defaults if none are stored
        """
        data = self._read_all().get(song_id)
        if not isinstance(data, dict):
            return SongSettings()
        return SongSettings.from_dict(data)

    def save(self, song_id: str, settings: SongSettings) -> None:
        """Save settings for a song, keeping other songs' settings.

        Args:
            song_id: The song ID
            settings: Settings to store
        """
        data = self._read_all()
        data[song_id] = settings.to_dict()

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
