"""Modal Markdown editor widget with table editing and smart Enter."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable

from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from mdvim import table
from mdvim._cmdline import CommandLine
from mdvim._selection import SelectionMixin
from mdvim.buffer import KeyDown, Position, Range, TextBuffer, TextEdit
from mdvim.config import EditorSettings
from mdvim.context import (
    EditorContext,
    FormatTag,
    attach_editor_context_handlers,
)
from mdvim.formatting import FORMAT_KINDS, TEMPLATES, format_edits, insert_template
from mdvim.log import get_logger
from mdvim.smart_enter import attach_smart_enter_handler, next_list_prefix

logger = get_logger(__name__)

# word, or a run of Markdown punctuation such as ``**`` or ``|``
_WORD_RE = re.compile(r"\w+|[^\w\s]+")


def _indent_of(line: str) -> int:
    if not line.strip():
        return 0
    return len(line) - len(line.lstrip())


class EditorMode(Enum):
    NORMAL = auto()
    INSERT = auto()
    COMMAND = auto()


class MarkdownEditor(SelectionMixin, Widget, can_focus=True):
    """A modal Markdown editor Textual widget.

    Supported commands:
      NORMAL: h j k l  w b  0 $ ^  gg G  i I a A o O
              x  dd yy p P  J  u ctrl+r  v V (then d y c or :fmt)
      INSERT: typing / Backspace / Enter / Tab / Shift+Tab / Escape
      COMMAND: :w :q :q! :wq :e  :tfmt :trow :tdelrow :tcol :tdelcol
               :table :fmt :tpl  :<line>
    """

    DEFAULT_CSS = """
    MarkdownEditor {
        height: 1fr;
        background: $surface;
        padding: 0 1;
    }
    """

    # -- Messages ----------------------------------------------------------

    @dataclass
    class FileSaveRequested(Message):
        content: str
        file_path: str  # empty string means save to current file
        quit_after: bool = False

    @dataclass
    class FileOpenRequested(Message):
        file_path: str

    @dataclass
    class Quit(Message):
        pass

    @dataclass
    class ForceQuit(Message):
        pass

    @dataclass
    class ContextChanged(Message):
        context: EditorContext

    # -- Init --------------------------------------------------------------

    def __init__(
        self,
        initial_content: str = "",
        *,
        read_only: bool = False,
        settings: EditorSettings | None = None,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self.settings: EditorSettings = settings or EditorSettings()
        self.read_only: bool = read_only
        self.buffer = TextBuffer(initial_content, undo_limit=self.settings.undo_limit)
        self.cursor_row: int = 0
        self.cursor_col: int = 0
        self._mode: EditorMode = EditorMode.NORMAL
        self.cmdline = CommandLine()
        self.pending: str = ""
        self.status_msg: str = ""
        self.yank_buffer: list[str] = []
        self._yank_linewise: bool = True
        self._scroll_top: int = 0
        # Visual selection: "" | "v" | "V"
        self._visual_mode: str = ""
        self._visual_anchor: tuple[int, int] = (0, 0)
        # Render caches
        self._style_cache: dict[int, list[str]] = {}
        self._cache_dirty: bool = False
        self._char_width_cache: dict[str, int] = {}
        # bumped on every buffer change
        self._edit_count: int = 0
        # Host subscriptions
        self._cursor_listeners: list[Callable[[Position], None]] = []
        self._key_listeners: list[Callable[[KeyDown], None]] = []
        self._last_notified: Position | None = None
        self._notifying: bool = False
        self._can_post: bool = False
        # Context shown in the status bar
        self.table_location: table.TableLocation = table.TableLocation.outside()
        self.active_formats: frozenset[FormatTag] = frozenset()
        self._dispose_context = attach_editor_context_handlers(self, self._on_context)
        self._last_notified = self.get_position()
        self._dispose_smart_enter: Callable[[], None] | None = None
        if self.settings.smart_enter:
            self._dispose_smart_enter = attach_smart_enter_handler(self)

    def on_mount(self) -> None:
        self._can_post = True

    def on_unmount(self) -> None:
        self._can_post = False

    @property
    def lines(self) -> list[str]:
        return self.buffer.lines

    @lines.setter
    def lines(self, value: list[str]) -> None:
        self.buffer.lines = value

    # -- Host API ------------------------------------------------------------

    def get_model(self) -> TextBuffer:
        return self.buffer

    def get_position(self) -> Position:
        return Position(self.cursor_row + 1, self.cursor_col + 1)

    def set_position(self, pos: Position) -> None:
        self.cursor_row = pos.line_number - 1
        self.cursor_col = pos.column - 1
        self._clamp_cursor()
        self._notify_cursor()

    def get_selection(self) -> Range:
        """The visual selection, or an empty range at the cursor."""
        if self._visual_mode:
            return self._visual_range()
        return Range.from_position(self.get_position())

    def execute_edits(self, edits: list[TextEdit]) -> Position | None:
        """Apply *edits* as one undo step; the cursor is only clamped."""
        if self.read_only or not edits:
            return None
        end = self.buffer.apply_edits(
            edits, cursor_row=self.cursor_row, cursor_col=self.cursor_col
        )
        self._invalidate_caches()
        self._clamp_cursor()
        return end

    def on_cursor_move(self, callback: Callable[[Position], None]) -> Callable[[], None]:
        self._cursor_listeners.append(callback)

        def dispose() -> None:
            if callback in self._cursor_listeners:
                self._cursor_listeners.remove(callback)

        return dispose

    def on_key_down(self, callback: Callable[[KeyDown], None]) -> Callable[[], None]:
        self._key_listeners.append(callback)

        def dispose() -> None:
            if callback in self._key_listeners:
                self._key_listeners.remove(callback)

        return dispose

    def set_smart_enter(self, enabled: bool) -> None:
        if enabled and self._dispose_smart_enter is None:
            self._dispose_smart_enter = attach_smart_enter_handler(self)
        elif not enabled and self._dispose_smart_enter is not None:
            self._dispose_smart_enter()
            self._dispose_smart_enter = None

    def _notify_cursor(self, force: bool = False) -> None:
        """Tell cursor listeners about a new position.

        Listeners that move the cursor do not re-enter; the loop picks the
        new position up once they return.
        """
        if self._notifying:
            return
        self._notifying = True
        try:
            for _ in range(2):
                pos = self.get_position()
                if pos == self._last_notified and not force:
                    break
                force = False
                self._last_notified = pos
                for cb in list(self._cursor_listeners):
                    cb(pos)
        finally:
            self._notifying = False

    def _dispatch_key_down(self, event) -> bool:
        """Run key-down listeners. Returns True if one took over the key."""
        if not self._key_listeners:
            return False
        key_event = KeyDown(event.key, getattr(event, "character", None))
        for cb in list(self._key_listeners):
            cb(key_event)
            if key_event.propagation_stopped:
                break
        return key_event.default_prevented

    def _on_context(self, ctx: EditorContext) -> None:
        self.table_location = ctx.table_location
        self.active_formats = ctx.active_formats
        if self._can_post:
            self.post_message(self.ContextChanged(ctx))

    # -- Helpers -----------------------------------------------------------

    def _invalidate_caches(self) -> None:
        """Invalidate render caches when content changes."""
        self._cache_dirty = True
        self._edit_count += 1

    def _check_readonly(self) -> bool:
        """Check if read-only and set status. Returns True if read-only."""
        if self.read_only:
            self.status_msg = "[readonly]"
        return self.read_only

    def _save_undo(self) -> None:
        self.buffer.save_undo(self.cursor_row, self.cursor_col)
        self._invalidate_caches()

    def _clamp_cursor(self) -> None:
        self.cursor_row = max(0, min(self.cursor_row, len(self.lines) - 1))
        line_len = len(self.lines[self.cursor_row])
        if self._mode == EditorMode.NORMAL:
            max_col = max(0, line_len - 1) if line_len else 0
        else:
            max_col = line_len
        self.cursor_col = max(0, min(self.cursor_col, max_col))

    def _char_width(self, ch: str) -> int:
        """Return display width of a character (2 for fullwidth/wide)."""
        if ch < "Ā":
            return 1
        w = self._char_width_cache.get(ch)
        if w is None:
            w = 2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1
            self._char_width_cache[ch] = w
        return w

    def _make_segments(self, line: str, avail: int) -> list[tuple[int, int]]:
        """Break *line* into segments fitting within *avail* display columns."""
        if not line:
            return [(0, 0)]
        if line.isascii():
            return [(s, min(s + avail, len(line))) for s in range(0, len(line), avail)]
        segs: list[tuple[int, int]] = []
        seg_start = 0
        w = 0
        for i, ch in enumerate(line):
            cw = self._char_width(ch)
            if w + cw > avail and i > seg_start:
                segs.append((seg_start, i))
                seg_start = i
                w = cw
            else:
                w += cw
        segs.append((seg_start, len(line)))
        return segs

    def _cursor_wrap_dy(self, line: str, cursor_col: int, avail: int) -> int:
        """Return the wrapped row index (0-based) of *cursor_col* within *line*."""
        segs = self._make_segments(line, avail)
        for si, (_s_start, s_end) in enumerate(segs):
            if cursor_col < s_end:
                return si
        if line:
            ls, le = segs[-1]
            last_w = sum(self._char_width(line[c]) for c in range(ls, le))
            if last_w + 1 > avail:
                return len(segs)
        return max(0, len(segs) - 1)

    def _visible_height(self) -> int:
        return max(1, self.content_region.height - 2)

    def _ensure_cursor_visible(self, avail: int) -> None:
        vh = self._visible_height()
        if self.cursor_row < self._scroll_top:
            self._scroll_top = self.cursor_row
        lines = self.lines
        rows_before = sum(
            len(self._make_segments(lines[i], avail))
            for i in range(self._scroll_top, self.cursor_row)
        )
        cursor_dy = self._cursor_wrap_dy(lines[self.cursor_row], self.cursor_col, avail)
        while rows_before + cursor_dy >= vh and self._scroll_top < self.cursor_row:
            rows_before -= len(self._make_segments(lines[self._scroll_top], avail))
            self._scroll_top += 1

    # -- Public API --------------------------------------------------------

    def get_content(self) -> str:
        return self.buffer.get_value()

    def set_content(self, content: str) -> None:
        self.buffer.set_value(content)
        self.cursor_row = 0
        self.cursor_col = 0
        self._invalidate_caches()
        self._notify_cursor(force=True)
        self.refresh()

    # =====================================================================
    # Rendering
    # =====================================================================

    _MODE_STYLE = {
        EditorMode.NORMAL: "bold white on dark_green",
        EditorMode.INSERT: "bold white on dark_blue",
        EditorMode.COMMAND: "bold white on dark_red",
    }
    _VISUAL_STYLE = "bold white on dark_magenta"
    _HEADING_RE = re.compile(r"^#{1,6}\s")
    _LIST_MARKER_RE = re.compile(r"^\s*([-*+]|\d+\.)\s(\[[ xX]?\])?")
    _INLINE_STYLES = (
        (re.compile(r"`[^`]+`"), "yellow"),
        (re.compile(r"\*\*[^*]+\*\*|__[^_]+__"), "bold"),
        (re.compile(r"~~[^~]+~~"), "strike"),
        (re.compile(r"!?\[[^\]]*\]\([^)]*\)"), "underline bright_blue"),
    )

    def _compute_line_styles(self, line: str) -> list[str]:
        """Compute Markdown highlight styles for every character in *line*."""
        n = len(line)
        if n == 0:
            return []
        stripped = line.lstrip()
        if self._HEADING_RE.match(line):
            return ["bold magenta"] * n
        if stripped.startswith("```"):
            return ["yellow"] * n
        if stripped.startswith(">"):
            return ["italic green"] * n

        styles = ["white"] * n
        if "|" in line:
            dim_row = table.is_alignment_row(line)
            for i, ch in enumerate(line):
                if ch == "|":
                    styles[i] = "dim cyan"
                elif dim_row:
                    styles[i] = "dim"
            if dim_row:
                return styles

        m = self._LIST_MARKER_RE.match(line)
        if m:
            for i in range(m.start(1), m.end()):
                styles[i] = "bold cyan"

        for pattern, style in self._INLINE_STYLES:
            for im in pattern.finditer(line):
                for j in range(im.start(), im.end()):
                    styles[j] = style
        return styles

    def _status_context(self) -> str:
        parts: list[str] = []
        loc = self.table_location
        if loc.is_in_table:
            parts.append(
                f"Table R{loc.row_index}/{loc.total_rows} C{loc.col_index}/{loc.total_cols}"
            )
        if self.active_formats:
            parts.append(" ".join(sorted(f.value for f in self.active_formats)))
        return "  ".join(parts)

    def render(self) -> Text:
        width = self.content_region.width
        height = self.content_region.height
        if height < 3 or width < 10:
            return Text("(too small)")

        if self._cache_dirty:
            self._style_cache.clear()
            self._cache_dirty = False

        content_height = height - 2
        ln_width = max(3, len(str(len(self.lines))))
        prefix_w = ln_width + 1
        avail = max(1, width - prefix_w)
        self._ensure_cursor_visible(avail)

        lines = self.lines
        cursor_row = self.cursor_row
        cursor_col = self.cursor_col
        style_cache = self._style_cache
        result_append = Text.append

        result = Text()
        rows_used = 0
        line_idx = self._scroll_top
        num_lines = len(lines)
        gutter_pad = " " * prefix_w
        visual = self._visual_span() if self._visual_mode else None

        while rows_used < content_height and line_idx < num_lines:
            line = lines[line_idx]
            is_cursor_line = line_idx == cursor_row
            if line_idx in style_cache:
                line_styles = style_cache[line_idx]
            else:
                line_styles = self._compute_line_styles(line)
                style_cache[line_idx] = line_styles
            line_len = len(line)

            if visual and visual[0] <= line_idx <= visual[2] and line_len:
                vsr, vsc, ver, vec = visual
                first = vsc if line_idx == vsr else 0
                last = min(vec + 1, line_len) if line_idx == ver else line_len
                line_styles = line_styles[:]
                for c in range(first, last):
                    line_styles[c] = f"{line_styles[c]} on dark_blue"

            segs = self._make_segments(line, avail)
            if is_cursor_line and cursor_col >= line_len and line:
                ls, le = segs[-1]
                last_w = sum(self._char_width(line[c]) for c in range(ls, le))
                if last_w + 1 > avail:
                    segs.append((line_len, line_len))

            for si, (s_start, s_end) in enumerate(segs):
                if rows_used >= content_height:
                    break
                if si == 0 or rows_used == 0:
                    result_append(
                        result, f"{line_idx + 1:>{ln_width}} ", style="dim cyan"
                    )
                else:
                    result_append(result, gutter_pad)
                col = s_start
                while col < s_end:
                    if is_cursor_line and col == cursor_col:
                        result_append(
                            result, line[col], style=f"reverse {line_styles[col]}"
                        )
                        col += 1
                        continue
                    sty = line_styles[col]
                    end = col + 1
                    while (
                        end < s_end
                        and line_styles[end] == sty
                        and not (is_cursor_line and end == cursor_col)
                    ):
                        end += 1
                    result_append(result, line[col:end], style=sty)
                    col = end
                if is_cursor_line and cursor_col >= line_len and si == len(segs) - 1:
                    result_append(result, " ", style="reverse")
                result_append(result, "\n")
                rows_used += 1
            line_idx += 1

        if rows_used < content_height:
            tilde_line = f"{'~':>{prefix_w - 1}} \n"
            while rows_used < content_height:
                result_append(result, tilde_line, style="dim blue")
                rows_used += 1

        # status bar
        mode = self._mode
        if self._visual_mode and mode == EditorMode.NORMAL:
            mode_label = " VISUAL LINE " if self._visual_mode == "V" else " VISUAL "
            result_append(result, mode_label, style=self._VISUAL_STYLE)
        else:
            mode_label = f" {mode.name} "
            result_append(result, mode_label, style=self._MODE_STYLE[mode])
        if self.read_only:
            result_append(result, " RO ", style="bold white on grey37")
        if self.pending:
            result_append(result, f"  {self.pending}", style="bold yellow")

        context = self._status_context()
        pos = f" Ln {cursor_row + 1}/{num_lines}, Col {cursor_col + 1} "
        used = len(mode_label) + (4 if self.read_only else 0) + len(pos)
        msg = f"  {self.status_msg}"
        result_append(result, msg)
        spacer_len = max(0, width - used - len(msg) - len(context) - 2)
        if spacer_len:
            result_append(result, " " * spacer_len)
        if context:
            result_append(result, context + "  ", style="bold cyan")
        result_append(result, pos, style="bold")

        if mode == EditorMode.COMMAND:
            result_append(result, f"\n:{self.cmdline.text}", style="bold yellow")
            result_append(result, " ", style="reverse")
        else:
            result_append(result, "\n")
        return result

    # =====================================================================
    # Key handling
    # =====================================================================

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self._dispatch_key(event)
        self.refresh()

    def _dispatch_key(self, event) -> None:
        """Route *event* by mode, then refresh the cursor context.

        Context listeners also run when an edit left the caret in place.
        """
        edits_before = self._edit_count
        if self._mode == EditorMode.NORMAL:
            self._handle_normal(event)
        elif self._mode == EditorMode.INSERT:
            self._handle_insert(event)
        elif self._mode == EditorMode.COMMAND:
            self._handle_command(event)

        self._clamp_cursor()
        self._notify_cursor(force=self._edit_count != edits_before)

    # -- NORMAL ------------------------------------------------------------

    def _enter_insert(self) -> None:
        if self.read_only:
            self.status_msg = "[readonly]"
            return
        self._visual_mode = ""
        self._mode = EditorMode.INSERT
        self.status_msg = "-- INSERT --"

    def _move(self, char: str, key: str) -> bool:
        """Apply a cursor motion. False when the key is not a motion."""
        line = self.lines[self.cursor_row]
        if char == "h" or key == "left":
            self.cursor_col -= 1
        elif char == "l" or key == "right":
            self.cursor_col += 1
        elif char == "j" or key == "down":
            self.cursor_row += 1
        elif char == "k" or key == "up":
            self.cursor_row -= 1
        elif char == "w":
            self._word_forward()
        elif char == "b":
            self._word_backward()
        elif char == "0":
            self.cursor_col = 0
        elif char == "^" or key == "home":
            self.cursor_col = _indent_of(line)
        elif char == "$" or key == "end":
            self.cursor_col = max(0, len(line) - 1)
        elif char == "G":
            self.cursor_row = len(self.lines) - 1
        elif key in ("pagedown", "ctrl+f"):
            self.cursor_row += self._visible_height()
        elif key in ("pageup", "ctrl+b"):
            self.cursor_row -= self._visible_height()
        else:
            return False
        return True

    def _handle_normal(self, event) -> None:
        key = event.key
        char = event.character or ""

        if key == "escape" and self._visual_mode:
            self._visual_mode = ""
            self.status_msg = ""
            return
        if self.pending:
            self._handle_pending(char, key)
            return
        if self._move(char, key):
            return

        if char in ("v", "V"):
            self._start_visual(char)
        elif self._visual_mode and char in ("d", "y", "c"):
            self._run_visual_operator(char)
        elif char == ":":
            self._mode = EditorMode.COMMAND
            self.cmdline.reset()
            self.status_msg = ""
        elif char in ("i", "I", "a", "A"):
            if char == "I":
                self.cursor_col = _indent_of(self.lines[self.cursor_row])
            elif char == "a":
                self.cursor_col += 1
            elif char == "A":
                self.cursor_col = len(self.lines[self.cursor_row])
            self._enter_insert()
        elif char in ("d", "y", "g"):
            if self.read_only and char == "d":
                self.status_msg = "[readonly]"
            else:
                self.pending = char
        elif (char and char in "oOxpPJu" or key == "ctrl+r") and self._check_readonly():
            return
        elif char in ("o", "O"):
            self._open_line(below=char == "o")
        elif char == "x":
            self._delete_char()
        elif char in ("p", "P"):
            self._paste(after=char == "p")
        elif char == "J":
            self._join_lines()
        elif char == "u":
            self._undo()
        elif key == "ctrl+r":
            self._redo()

    def _open_line(self, *, below: bool) -> None:
        """``o`` / ``O``: a new line that continues the current list item."""
        line = self.lines[self.cursor_row]
        if below:
            text = next_list_prefix(line)
            if text is None:
                text = " " * _indent_of(line)
        else:
            text = " " * _indent_of(line)
        self._save_undo()
        if below:
            self.cursor_row += 1
        self.lines.insert(self.cursor_row, text)
        self.cursor_col = len(text)
        self._enter_insert()

    def _delete_char(self) -> None:
        line = self.lines[self.cursor_row]
        if self.cursor_col >= len(line):
            return
        self._save_undo()
        col = self.cursor_col
        self.lines[self.cursor_row] = line[:col] + line[col + 1 :]

    # -- Pending multi-char ------------------------------------------------

    def _handle_pending(self, char: str, key: str) -> None:
        combo = self.pending + char
        self.pending = ""
        if key == "escape":
            self.status_msg = ""
        elif combo == "dd":
            self._save_undo()
            self.yank_buffer = [self.lines[self.cursor_row]]
            self._yank_linewise = True
            if len(self.lines) > 1:
                del self.lines[self.cursor_row]
            else:
                self.lines[0] = ""
            self.cursor_col = 0
            self.status_msg = "line deleted"
        elif combo == "yy":
            self.yank_buffer = [self.lines[self.cursor_row]]
            self._yank_linewise = True
            self.status_msg = "line yanked"
        elif combo == "gg":
            self.cursor_row = 0
            self.cursor_col = 0
        else:
            self.status_msg = f"unknown: {combo}"

    # -- INSERT ------------------------------------------------------------

    def _handle_insert(self, event) -> None:
        key = event.key
        char = event.character

        if self._dispatch_key_down(event):
            self._invalidate_caches()
            return

        if key == "escape":
            self._mode = EditorMode.NORMAL
            self.cursor_col = max(0, self.cursor_col - 1)
            self.status_msg = ""
            return

        if key == "backspace":
            self._save_undo()
            if self.cursor_col > 0:
                line = self.lines[self.cursor_row]
                self.lines[self.cursor_row] = (
                    line[: self.cursor_col - 1] + line[self.cursor_col :]
                )
                self.cursor_col -= 1
            elif self.cursor_row > 0:
                prev = self.lines[self.cursor_row - 1]
                self.cursor_col = len(prev)
                self.lines[self.cursor_row - 1] = prev + self.lines[self.cursor_row]
                self.lines.pop(self.cursor_row)
                self.cursor_row -= 1
            return

        if key == "enter":
            self._save_undo()
            line = self.lines[self.cursor_row]
            self.lines[self.cursor_row] = line[: self.cursor_col]
            self.cursor_row += 1
            self.lines.insert(self.cursor_row, line[self.cursor_col :])
            self.cursor_col = 0
            return

        if key in ("tab", "shift+tab"):
            direction = "next" if key == "tab" else "prev"
            if self._navigate_cell(direction):
                return
            if key == "tab":
                self._save_undo()
                pad = " " * self.settings.tab_size
                line = self.lines[self.cursor_row]
                self.lines[self.cursor_row] = (
                    line[: self.cursor_col] + pad + line[self.cursor_col :]
                )
                self.cursor_col += len(pad)
            return

        if key == "end":
            self.cursor_col = len(self.lines[self.cursor_row])
            return
        if key == "home":
            line = self.lines[self.cursor_row]
            self.cursor_col = len(line) - len(line.lstrip())
            return

        if key in ("left", "right", "up", "down"):
            delta = {"left": (0, -1), "right": (0, 1), "up": (-1, 0), "down": (1, 0)}
            dr, dc = delta[key]
            self.cursor_row += dr
            self.cursor_col += dc
            return

        if char and char.isprintable():
            self._save_undo()
            line = self.lines[self.cursor_row]
            self.lines[self.cursor_row] = (
                line[: self.cursor_col] + char + line[self.cursor_col :]
            )
            self.cursor_col += 1

    def _navigate_cell(self, direction: str) -> bool:
        """Move to the next/previous table cell. False when not in a table."""
        if not self.settings.table_navigation:
            return False
        model = self.buffer
        pos = self.get_position()
        if not table.is_cursor_in_table(model, pos):
            return False
        rng = table.navigate_table(model, pos, direction)
        if rng is not None:
            self.set_position(rng.get_start_position())
        return True

    # -- COMMAND -----------------------------------------------------------

    def _handle_command(self, event) -> None:
        key = event.key
        char = event.character

        if key == "escape":
            self._mode = EditorMode.NORMAL
            self._visual_mode = ""
            self.cmdline.reset()
            self.status_msg = ""
            return

        if key == "enter":
            cmd = self.cmdline.submit()
            self._mode = EditorMode.NORMAL
            self._exec_command(cmd)
            self._visual_mode = ""
            return

        if key == "backspace":
            if not self.cmdline.backspace():
                self._mode = EditorMode.NORMAL
                self._visual_mode = ""
            return

        if key == "up":
            self.cmdline.older()
            return
        if key == "down":
            self.cmdline.newer()
            return

        if char and char.isprintable():
            self.cmdline.type(char)

    _STRUCTURE_VERBS = ("tfmt", "trow", "tdelrow", "tcol", "tdelcol")
    _TABLE_VERBS = _STRUCTURE_VERBS + ("table", "fmt", "tpl")

    def _exec_command(self, cmd: str) -> None:
        stripped = cmd.strip()

        if stripped.isdigit():
            self.cursor_row = max(0, min(int(stripped) - 1, len(self.lines) - 1))
            self.cursor_col = 0
            return

        parts = stripped.split(None, 1)
        verb = parts[0] if parts else ""
        arg = parts[1].strip() if len(parts) > 1 else ""

        force = verb.endswith("!")
        if force:
            verb = verb[:-1]

        if verb == "w":
            if self._check_readonly():
                return
            self.post_message(
                self.FileSaveRequested(content=self.get_content(), file_path=arg)
            )
        elif verb == "q":
            if force:
                self.post_message(self.ForceQuit())
            else:
                self.post_message(self.Quit())
        elif verb in ("wq", "x"):
            if self.read_only:
                self.post_message(self.Quit())
                return
            self.post_message(
                self.FileSaveRequested(
                    content=self.get_content(), file_path=arg, quit_after=True
                )
            )
        elif verb == "e":
            if not arg:
                self.status_msg = "Usage: :e <file>"
            else:
                self.post_message(self.FileOpenRequested(file_path=arg))
        elif verb in self._TABLE_VERBS:
            if self._check_readonly():
                return
            self._exec_edit_command(verb, arg)
        else:
            self.status_msg = f"unknown command: :{cmd}"

    def _exec_edit_command(self, verb: str, arg: str) -> None:
        model = self.buffer
        pos = self.get_position()
        edits: list[TextEdit] = []

        if verb in self._STRUCTURE_VERBS:
            if not table.get_table_cell_location(model, pos).is_in_table:
                self.status_msg = "not in a table"
                return

        if verb == "tfmt":
            edit = table.format_table_at_cursor(model, pos)
        elif verb == "trow":
            direction = arg or "below"
            if direction not in ("above", "below"):
                self.status_msg = "Usage: :trow [above|below]"
                return
            edit = table.insert_row(model, pos, direction)
        elif verb == "tdelrow":
            edit = table.delete_row(model, pos)
        elif verb == "tcol":
            direction = arg or "right"
            if direction not in ("left", "right"):
                self.status_msg = "Usage: :tcol [left|right]"
                return
            edit = table.insert_column(model, pos, direction)
        elif verb == "tdelcol":
            edit = table.delete_column(model, pos)
        elif verb == "table":
            edit = self._new_table_edit(arg)
        elif verb == "fmt":
            if arg not in FORMAT_KINDS:
                self.status_msg = f"Usage: :fmt <{'|'.join(FORMAT_KINDS)}>"
                return
            edits = format_edits(model, self.get_selection(), arg)
            edit = None
        else:  # tpl
            if arg not in TEMPLATES:
                self.status_msg = f"Usage: :tpl <{'|'.join(TEMPLATES)}>"
                return
            edit = insert_template(self.get_selection(), arg)

        if edit is not None:
            edits = [edit]
        if not edits:
            logger.debug("command :%s made no edit at %s", verb, pos)
            if verb in self._STRUCTURE_VERBS:
                self.status_msg = f"cannot :{verb} here"
            return
        self.execute_edits(edits)
        self._notify_cursor(force=True)

    def _new_table_edit(self, arg: str) -> TextEdit | None:
        rows = self.settings.default_table_rows
        cols = self.settings.default_table_cols
        nums = arg.replace("x", " ").split()
        if nums:
            if not all(n.isdigit() for n in nums) or len(nums) > 2:
                self.status_msg = "Usage: :table [rows] [cols]"
                return None
            rows = int(nums[0])
            if len(nums) == 2:
                cols = int(nums[1])
        if rows < 0 or cols < 1:
            self.status_msg = "Usage: :table [rows] [cols]"
            return None
        return TextEdit(range=self.get_selection(), text=table.create_table(rows, cols))

    # -- Movement helpers --------------------------------------------------

    def _word_forward(self) -> None:
        line = self.lines[self.cursor_row]
        for m in _WORD_RE.finditer(line):
            if m.start() > self.cursor_col:
                self.cursor_col = m.start()
                return
        if self.cursor_row < len(self.lines) - 1:
            self.cursor_row += 1
            self.cursor_col = _indent_of(self.lines[self.cursor_row])

    def _word_backward(self) -> None:
        starts = [m.start() for m in _WORD_RE.finditer(self.lines[self.cursor_row])]
        before = [s for s in starts if s < self.cursor_col]
        if before:
            self.cursor_col = before[-1]
        elif self.cursor_row > 0:
            self.cursor_row -= 1
            prev = [m.start() for m in _WORD_RE.finditer(self.lines[self.cursor_row])]
            self.cursor_col = prev[-1] if prev else 0

    # -- Edit helpers ------------------------------------------------------

    def _paste(self, *, after: bool) -> None:
        if not self.yank_buffer:
            return
        if self._yank_linewise:
            self._save_undo()
            at = self.cursor_row + 1 if after else self.cursor_row
            self.lines[at:at] = self.yank_buffer
            self.cursor_row = at
            self.cursor_col = 0
            return
        col = self.cursor_col
        if after and self.lines[self.cursor_row]:
            col += 1
        pos = Position(self.cursor_row + 1, col + 1)
        end = self.execute_edits(
            [TextEdit(range=Range.from_position(pos), text=self.yank_buffer[0])]
        )
        if end is not None:
            self.cursor_row = end.line_number - 1
            self.cursor_col = max(0, end.column - 2)

    def _join_lines(self) -> None:
        if self.cursor_row >= len(self.lines) - 1:
            return
        self._save_undo()
        cur = self.lines[self.cursor_row].rstrip()
        nxt = self.lines[self.cursor_row + 1].lstrip()
        self.cursor_col = len(cur)
        self.lines[self.cursor_row] = cur + " " + nxt
        self.lines.pop(self.cursor_row + 1)

    def _undo(self) -> None:
        self._visual_mode = ""
        restored = self.buffer.undo(self.cursor_row, self.cursor_col)
        if restored is None:
            self.status_msg = "nothing to undo"
            return
        self.cursor_row, self.cursor_col = restored
        self._invalidate_caches()
        self.status_msg = "undone"

    def _redo(self) -> None:
        self._visual_mode = ""
        restored = self.buffer.redo(self.cursor_row, self.cursor_col)
        if restored is None:
            self.status_msg = "nothing to redo"
            return
        self.cursor_row, self.cursor_col = restored
        self._invalidate_caches()
        self.status_msg = "redone"
