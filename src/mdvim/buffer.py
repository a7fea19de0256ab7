"""Line-addressable text buffer and the value types shared with the editor."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol


@dataclass(frozen=True)
class Position:
    """Cursor position. Both fields are 1-based."""

    line_number: int
    column: int


@dataclass(frozen=True)
class Range:
    """Text span, 1-based, end column exclusive."""

    start_line_number: int
    start_column: int
    end_line_number: int
    end_column: int

    @classmethod
    def from_position(cls, pos: Position) -> Range:
        return cls(pos.line_number, pos.column, pos.line_number, pos.column)

    def is_empty(self) -> bool:
        return (
            self.start_line_number == self.end_line_number
            and self.start_column == self.end_column
        )

    def get_start_position(self) -> Position:
        return Position(self.start_line_number, self.start_column)


@dataclass(frozen=True)
class TextEdit:
    """One replacement: ``text`` goes where ``range`` was."""

    range: Range
    text: str


class KeyDown:
    """Key event handed to key-down listeners before default handling.

    ``key`` follows Textual naming, so modifiers are part of the key
    (``"enter"`` vs ``"shift+enter"``).
    """

    def __init__(self, key: str, character: str | None = None) -> None:
        self.key = key
        self.character = character
        self.default_prevented: bool = False
        self.propagation_stopped: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop(self) -> None:
        self.propagation_stopped = True


class TextModel(Protocol):
    def get_line_content(self, line_number: int) -> str: ...

    def get_line_count(self) -> int: ...

    def get_line_max_column(self, line_number: int) -> int: ...

    def get_value_in_range(self, rng: Range) -> str: ...


class EditorLike(Protocol):
    """What the context tracker and smart-Enter handler need from a host."""

    def get_model(self) -> TextModel: ...

    def get_position(self) -> Position | None: ...

    def set_position(self, pos: Position) -> None: ...

    def execute_edits(self, edits: list[TextEdit]) -> Position | None: ...

    def on_cursor_move(
        self, callback: Callable[[Position], None]
    ) -> Callable[[], None]: ...

    def on_key_down(self, callback: Callable[[KeyDown], None]) -> Callable[[], None]: ...


class TextBuffer:
    """A list of lines with range replace and snapshot undo/redo.

    Undo entries are ``(lines, cursor_row, cursor_col)`` with 0-based cursor
    coordinates, so the owning editor can restore the caret too.
    """

    def __init__(self, content: str = "", *, undo_limit: int = 200) -> None:
        self.lines: list[str] = content.split("\n") if content else [""]
        self.undo_limit = undo_limit
        self.undo_stack: list[tuple[list[str], int, int]] = []
        self.redo_stack: list[tuple[list[str], int, int]] = []

    # -- TextModel ---------------------------------------------------------

    def get_line_content(self, line_number: int) -> str:
        return self.lines[line_number - 1]

    def get_line_count(self) -> int:
        return len(self.lines)

    def get_line_max_column(self, line_number: int) -> int:
        return len(self.lines[line_number - 1]) + 1

    def get_value(self) -> str:
        return "\n".join(self.lines)

    def set_value(self, content: str) -> None:
        self.lines = content.split("\n") if content else [""]
        self.undo_stack.clear()
        self.redo_stack.clear()

    def get_value_in_range(self, rng: Range) -> str:
        sl, sc = rng.start_line_number, rng.start_column
        el, ec = rng.end_line_number, rng.end_column
        if sl == el:
            return self.lines[sl - 1][sc - 1 : ec - 1]
        parts = [self.lines[sl - 1][sc - 1 :]]
        parts.extend(self.lines[sl : el - 1])
        parts.append(self.lines[el - 1][: ec - 1])
        return "\n".join(parts)

    # -- Editing -----------------------------------------------------------

    def save_undo(self, cursor_row: int = 0, cursor_col: int = 0) -> None:
        self.undo_stack.append((self.lines[:], cursor_row, cursor_col))
        if len(self.undo_stack) > self.undo_limit:
            self.undo_stack.pop(0)
        if self.redo_stack:
            self.redo_stack.clear()

    def apply_edits(
        self,
        edits: list[TextEdit],
        *,
        cursor_row: int = 0,
        cursor_col: int = 0,
    ) -> Position | None:
        """Apply non-overlapping *edits* as one undo step.

        Returns the position right after the text of the edit that comes
        last in the document, or None when *edits* is empty.
        """
        if not edits:
            return None
        self.save_undo(cursor_row, cursor_col)
        text = self.get_value()
        spans = sorted(
            (self._offset(e.range.start_line_number, e.range.start_column),
             self._offset(e.range.end_line_number, e.range.end_column),
             e.text)
            for e in edits
        )
        # back to front so earlier offsets stay valid
        for start, end, new in reversed(spans):
            text = text[:start] + new + text[end:]
        shift = sum(len(new) - (end - start) for start, end, new in spans[:-1])
        last_start, _last_end, last_text = spans[-1]
        end_offset = last_start + shift + len(last_text)
        self.lines = text.split("\n")
        return self._position_at(end_offset)

    def _offset(self, line_number: int, column: int) -> int:
        return sum(len(line) + 1 for line in self.lines[: line_number - 1]) + column - 1

    def _position_at(self, offset: int) -> Position:
        for i, line in enumerate(self.lines):
            if offset <= len(line):
                return Position(i + 1, offset + 1)
            offset -= len(line) + 1
        return Position(len(self.lines), len(self.lines[-1]) + 1)

    def undo(self, cursor_row: int = 0, cursor_col: int = 0) -> tuple[int, int] | None:
        """Restore the previous snapshot. Returns its cursor, or None."""
        if not self.undo_stack:
            return None
        self.redo_stack.append((self.lines[:], cursor_row, cursor_col))
        lines, row, col = self.undo_stack.pop()
        self.lines = lines
        return row, col

    def redo(self, cursor_row: int = 0, cursor_col: int = 0) -> tuple[int, int] | None:
        if not self.redo_stack:
            return None
        self.undo_stack.append((self.lines[:], cursor_row, cursor_col))
        lines, row, col = self.redo_stack.pop()
        self.lines = lines
        return row, col
