"""Markdown pipe-table model: grid codec, bounds, cell ranges and edits."""

from __future__ import annotations

import re
from dataclasses import dataclass

from mdvim.buffer import Position, Range, TextEdit, TextModel
from mdvim.log import get_logger

logger = get_logger(__name__)

Grid = list[list[str]]

_SEPARATOR_CELL_RE = re.compile(r"^-+$")
_ALIGNMENT_ROW_RE = re.compile(r"^\|?(\s*:?-+:?\s*\|)+\s*$")
_LEADING_PIPE_RE = re.compile(r"^\s*\|")

# Column width floor, wide enough for a "---" separator cell.
MIN_COLUMN_WIDTH = 3
BLANK_CELL = "   "
SEPARATOR_FILL = "---"


@dataclass(frozen=True)
class TableLocation:
    """Cursor position inside a table, 1-based. Zeroed when outside."""

    is_in_table: bool
    row_index: int
    col_index: int
    total_rows: int
    total_cols: int

    @classmethod
    def outside(cls) -> TableLocation:
        return cls(False, 0, 0, 0, 0)


@dataclass
class TableBlock:
    """연속된 테이블 라인 블록 (start_line/end_line은 1-based, inclusive)."""

    start_line: int
    end_line: int
    lines: list[str]


# -- Grid codec ------------------------------------------------------------


def parse_table(lines: list[str]) -> Grid:
    """Split each line on ``|`` into trimmed cells.

    The empty token before a leading pipe and after a trailing pipe is
    dropped. Rows of different lengths are kept as they are.
    """
    grid: Grid = []
    for line in lines:
        row = line.strip()
        cells = row.split("|")
        if row.startswith("|"):
            cells.pop(0)
        if row.endswith("|") and cells:
            cells.pop()
        grid.append([c.strip() for c in cells])
    return grid


def format_grid(grid: Grid) -> str:
    """Render *grid* as an aligned pipe table (no trailing newline)."""
    if not grid:
        return ""

    widths: list[int] = []
    for row in grid:
        for i, cell in enumerate(row):
            if i == len(widths):
                widths.append(MIN_COLUMN_WIDTH)
            widths[i] = max(widths[i], len(cell))

    out: list[str] = []
    for row_idx, row in enumerate(grid):
        cells: list[str] = []
        for col_idx, cell in enumerate(row):
            width = widths[col_idx]
            if row_idx == 1 and _SEPARATOR_CELL_RE.match(cell):
                cells.append("-" * width)
            else:
                cells.append(cell.ljust(width))
        out.append("| " + " | ".join(cells) + " |")
    return "\n".join(out)


def create_table(rows: int, cols: int) -> str:
    """Build a fresh table: one header row, a separator and *rows* body rows."""
    if rows < 0 or cols < 1:
        raise ValueError(f"invalid table size: {rows}x{cols}")
    cell_width = 8
    header = "|" + "|".join([" Header "] * cols) + "|"
    separator = "|" + "|".join(["-" * cell_width] * cols) + "|"
    body = "|" + "|".join([" " * cell_width] * cols) + "|"
    return "\n".join([header, separator] + [body] * rows)


# -- Locating --------------------------------------------------------------


def get_column_index(line: str, column: int) -> int:
    """0-based cell index for a 1-based cursor *column* on *line*.

    Pipes strictly before the cursor are counted; text before the first
    pipe belongs to cell 0.
    """
    before = line[: max(0, column - 1)]
    return max(0, before.count("|") - 1)


def is_cursor_in_table(model: TextModel, position: Position) -> bool:
    """Single-line check, cheap enough to run on every keystroke."""
    line = model.get_line_content(position.line_number)
    if _LEADING_PIPE_RE.match(line):
        return True
    return "|" in line and len(line.strip()) > 3


def _is_table_line(line: str) -> bool:
    return "|" in line.strip()


def is_alignment_row(line: str) -> bool:
    """True for a separator row such as ``|---|:--:|``."""
    return bool(_ALIGNMENT_ROW_RE.match(line.strip()))


def get_table_bounds(model: TextModel, line_number: int) -> TableBlock | None:
    """Find the run of pipe-containing lines around *line_number*.

    Returns None when the run is shorter than a header plus separator.
    """
    line_count = model.get_line_count()
    start = end = line_number

    while start > 1 and _is_table_line(model.get_line_content(start - 1)):
        start -= 1
    while end < line_count and _is_table_line(model.get_line_content(end + 1)):
        end += 1

    lines = [model.get_line_content(i) for i in range(start, end + 1)]
    if len(lines) < 2:
        return None
    return TableBlock(start_line=start, end_line=end, lines=lines)


def get_cell_range(model: TextModel, line_number: int, cell_index: int) -> Range | None:
    """Range of the content of cell *cell_index* (0-based) on *line_number*.

    Blank cells give the whole span between the pipes so typing replaces
    the padding; otherwise the padding is excluded.
    """
    if cell_index < 0:
        return None
    line = model.get_line_content(line_number)
    pipes = [i for i, ch in enumerate(line) if ch == "|"]
    if len(pipes) < 2:
        return None

    effective = cell_index if _LEADING_PIPE_RE.match(line) else cell_index - 1
    if effective < 0:
        # no leading pipe: start of line is the left boundary
        p1, p2 = -1, pipes[0]
    else:
        if effective >= len(pipes) - 1:
            return None
        p1, p2 = pipes[effective], pipes[effective + 1]

    start_col = p1 + 2
    end_col = p2 + 1
    raw = line[p1 + 1 : p2]
    if not raw.strip():
        return Range(line_number, start_col, line_number, end_col)

    leading = len(raw) - len(raw.lstrip())
    trailing = len(raw) - len(raw.rstrip())
    return Range(line_number, start_col + leading, line_number, end_col - trailing)


def get_table_cell_location(model: TextModel, position: Position) -> TableLocation:
    if not is_cursor_in_table(model, position):
        return TableLocation.outside()
    bounds = get_table_bounds(model, position.line_number)
    if bounds is None:
        return TableLocation.outside()
    grid = parse_table(bounds.lines)
    if not grid:
        return TableLocation.outside()

    line = model.get_line_content(position.line_number)
    return TableLocation(
        is_in_table=True,
        row_index=position.line_number - bounds.start_line + 1,
        col_index=get_column_index(line, position.column) + 1,
        total_rows=len(grid),
        total_cols=len(grid[0]),
    )


# -- Structural edits ------------------------------------------------------


def _whole_table_edit(model: TextModel, bounds: TableBlock, grid: Grid) -> TextEdit:
    """테이블 전체를 한 번에 교체하는 edit (undo 1회)."""
    rng = Range(
        bounds.start_line,
        1,
        bounds.end_line,
        model.get_line_max_column(bounds.end_line),
    )
    return TextEdit(range=rng, text=format_grid(grid))


def format_table_at_cursor(model: TextModel, position: Position) -> TextEdit | None:
    """Realign column widths and normalise the separator row."""
    bounds = get_table_bounds(model, position.line_number)
    if bounds is None:
        return None
    return _whole_table_edit(model, bounds, parse_table(bounds.lines))


def insert_row(model: TextModel, position: Position, direction: str) -> TextEdit | None:
    if direction not in ("above", "below"):
        raise ValueError(f"invalid row direction: {direction!r}")
    bounds = get_table_bounds(model, position.line_number)
    if bounds is None:
        return None
    grid = parse_table(bounds.lines)
    if not grid:
        return None

    new_row = [BLANK_CELL] * len(grid[0])
    row_idx = position.line_number - bounds.start_line
    insert_at = row_idx if direction == "above" else row_idx + 1
    grid.insert(insert_at, new_row)
    return _whole_table_edit(model, bounds, grid)


def delete_row(model: TextModel, position: Position) -> TextEdit | None:
    bounds = get_table_bounds(model, position.line_number)
    if bounds is None:
        return None
    grid = parse_table(bounds.lines)
    row_idx = position.line_number - bounds.start_line

    # header and separator survive while the table is that small
    if row_idx <= 1 and len(grid) <= 2:
        logger.debug("delete_row refused: row %d of %d-row table", row_idx, len(grid))
        return None

    del grid[row_idx]
    return _whole_table_edit(model, bounds, grid)


def insert_column(
    model: TextModel, position: Position, direction: str
) -> TextEdit | None:
    if direction not in ("left", "right"):
        raise ValueError(f"invalid column direction: {direction!r}")
    bounds = get_table_bounds(model, position.line_number)
    if bounds is None:
        return None

    line = model.get_line_content(position.line_number)
    col_idx = get_column_index(line, position.column)
    target = col_idx if direction == "left" else col_idx + 1

    grid = parse_table(bounds.lines)
    for i, row in enumerate(grid):
        is_separator = i == 1 and bool(row) and _SEPARATOR_CELL_RE.match(row[0])
        row.insert(target, SEPARATOR_FILL if is_separator else BLANK_CELL)
    return _whole_table_edit(model, bounds, grid)


def delete_column(model: TextModel, position: Position) -> TextEdit | None:
    bounds = get_table_bounds(model, position.line_number)
    if bounds is None:
        return None

    line = model.get_line_content(position.line_number)
    col_idx = get_column_index(line, position.column)
    grid = parse_table(bounds.lines)

    if len(grid[0]) <= 1:
        logger.debug("delete_column refused: last column")
        return None

    for row in grid:
        if col_idx < len(row):
            del row[col_idx]
    return _whole_table_edit(model, bounds, grid)


# -- Navigation ------------------------------------------------------------


def navigate_table(model: TextModel, position: Position, direction: str) -> Range | None:
    """Range of the next/previous cell, skipping the separator row.

    Stops at the table edges instead of wrapping around.
    """
    if direction not in ("next", "prev"):
        raise ValueError(f"invalid navigation direction: {direction!r}")
    bounds = get_table_bounds(model, position.line_number)
    if bounds is None:
        return None
    grid = parse_table(bounds.lines)
    if not grid:
        return None

    line = model.get_line_content(position.line_number)
    col_count = len(grid[0])
    step = 1 if direction == "next" else -1
    row = position.line_number - bounds.start_line
    col = get_column_index(line, position.column) + step

    if col >= col_count:
        col = 0
        row += 1
    elif col < 0:
        col = col_count - 1
        row -= 1

    if not 0 <= row < len(grid):
        return None

    if is_alignment_row(bounds.lines[row]):
        row += step
        if not 0 <= row < len(grid):
            return None

    return get_cell_range(model, bounds.start_line + row, col)
