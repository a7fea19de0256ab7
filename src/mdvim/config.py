"""Editor settings loaded from a JSON file."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "mdvim" / "settings.json"


@dataclass(frozen=True)
class EditorSettings:
    """Immutable editor settings.

    Attributes:
        smart_enter: Continue lists and add table rows on Enter
        table_navigation: Tab / Shift+Tab move between table cells
        tab_size: Spaces inserted by Tab outside tables
        undo_limit: Maximum undo snapshots kept by the buffer
        default_table_rows: Body rows for ``:table`` without arguments
        default_table_cols: Columns for ``:table`` without arguments
    """

    smart_enter: bool = True
    table_navigation: bool = True
    tab_size: int = 4
    undo_limit: int = 200
    default_table_rows: int = 3
    default_table_cols: int = 3

    @classmethod
    def from_dict(cls, data: dict) -> EditorSettings:
        """Build settings from *data*, ignoring unknown keys.

        >>> EditorSettings.from_dict({"tab_size": 2, "theme": "dark"}).tab_size
        2
        """
        valid = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in valid})


def load_settings(path: str | Path | None = None) -> EditorSettings:
    """Read settings from *path* (default: ``~/.config/mdvim/settings.json``).

    A missing file gives the defaults. A file that is not a JSON object
    raises ValueError.
    """
    target = Path(path) if path else DEFAULT_SETTINGS_PATH
    if not target.exists():
        return EditorSettings()
    try:
        data = json.loads(target.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{target}: {e.msg} (line {e.lineno})") from e
    if not isinstance(data, dict):
        raise ValueError(f"{target}: settings must be a JSON object")
    return EditorSettings.from_dict(data)
