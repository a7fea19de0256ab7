"""Cursor context: table location and active inline/block formats."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from mdvim.buffer import EditorLike, Position, TextModel
from mdvim.table import TableLocation, get_table_cell_location


class FormatTag(Enum):
    BOLD = "bold"
    ITALIC = "italic"
    STRIKETHROUGH = "strikethrough"
    CODE = "code"
    CODE_BLOCK = "code-block"
    HEADING = "heading"
    QUOTE = "quote"
    LIST_UL = "list-ul"
    LIST_OL = "list-ol"
    CHECKLIST = "checklist"


# Block markers, matched against the whole line.
_BLOCK_PATTERNS: tuple[tuple[re.Pattern[str], FormatTag], ...] = (
    (re.compile(r"^#{1,6}\s"), FormatTag.HEADING),
    (re.compile(r"^>\s"), FormatTag.QUOTE),
    (re.compile(r"^\s*[-*+]\s"), FormatTag.LIST_UL),
    (re.compile(r"^\s*\d+\.\s"), FormatTag.LIST_OL),
    (re.compile(r"^\s*[-*+]\s\[[ xX]?\]"), FormatTag.CHECKLIST),
)

# Paired delimiters: (open before cursor, close after cursor).
_PAIR_PATTERNS: tuple[tuple[re.Pattern[str], re.Pattern[str], FormatTag], ...] = (
    (re.compile(r"\*\*[^*]*$"), re.compile(r"^[^*]*\*\*"), FormatTag.BOLD),
    (re.compile(r"__[^_]*$"), re.compile(r"^[^_]*__"), FormatTag.BOLD),
    (re.compile(r"[^*]\*[^*]*$"), re.compile(r"^[^*]*\*[^*]"), FormatTag.ITALIC),
    (re.compile(r"[^_]_[^_]*$"), re.compile(r"^[^_]*_[^_]"), FormatTag.ITALIC),
    (re.compile(r"~~[^~]*$"), re.compile(r"^[^~]*~~"), FormatTag.STRIKETHROUGH),
    (re.compile(r"[^`]`[^`]*$"), re.compile(r"^[^`]*`[^`]"), FormatTag.CODE),
)


def compute_active_formats(model: TextModel, position: Position) -> frozenset[FormatTag]:
    """Formats active at *position*, judged from the current line only.

    An inline format counts when an opening delimiter sits before the
    cursor and a closing one after it; spans across lines are not seen.
    """
    line = model.get_line_content(position.line_number)
    formats: set[FormatTag] = set()

    for pattern, tag in _BLOCK_PATTERNS:
        if pattern.search(line):
            formats.add(tag)
    if line.strip().startswith("```"):
        formats.add(FormatTag.CODE_BLOCK)

    before = line[: position.column - 1]
    after = line[position.column - 1 :]
    for open_re, close_re, tag in _PAIR_PATTERNS:
        if tag not in formats and open_re.search(before) and close_re.search(after):
            formats.add(tag)

    return frozenset(formats)


@dataclass(frozen=True)
class EditorContext:
    """Snapshot pushed to the UI after every cursor move."""

    table_location: TableLocation
    cursor: Position
    active_formats: frozenset[FormatTag] = field(default_factory=frozenset)

    @property
    def is_in_table(self) -> bool:
        return self.table_location.is_in_table


def compute_editor_context(model: TextModel, position: Position) -> EditorContext:
    return EditorContext(
        table_location=get_table_cell_location(model, position),
        cursor=position,
        active_formats=compute_active_formats(model, position),
    )


def attach_editor_context_handlers(
    editor: EditorLike, on_change: Callable[[EditorContext], None]
) -> Callable[[], None]:
    """Recompute the context on every cursor move; return a disposer.

    Runs once immediately with the editor's current position.
    """

    def run(position: Position | None) -> None:
        model = editor.get_model()
        if model is None or position is None:
            return
        on_change(compute_editor_context(model, position))

    run(editor.get_position())
    return editor.on_cursor_move(run)
