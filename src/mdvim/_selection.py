"""Visual selection mixin for MarkdownEditor."""

from __future__ import annotations

from mdvim.buffer import Range, TextEdit


class SelectionMixin:
    """Character-wise (``v``) and line-wise (``V``) selection.

    The selection is the span between the anchor and the cursor, both ends
    inclusive, and is what ``:fmt`` and the ``d``/``y``/``c`` operators act on.
    """

    def _start_visual(self, kind: str) -> None:
        if self._visual_mode == kind:
            self._visual_mode = ""
            self.status_msg = ""
            return
        self._visual_mode = kind
        self._visual_anchor = (self.cursor_row, self.cursor_col)
        self.status_msg = "-- VISUAL LINE --" if kind == "V" else "-- VISUAL --"

    def _visual_span(self) -> tuple[int, int, int, int]:
        """선택 범위 (start_row, start_col, end_row, end_col), 0-based inclusive."""
        cursor = (self.cursor_row, self.cursor_col)
        (sr, sc), (er, ec) = sorted((self._visual_anchor, cursor))
        if self._visual_mode == "V":
            return sr, 0, er, max(0, len(self.lines[er]) - 1)
        return sr, sc, er, ec

    def _visual_range(self) -> Range:
        """The selection as a 1-based, end-exclusive range."""
        sr, sc, er, ec = self._visual_span()
        end_col = min(ec + 1, len(self.lines[er]))
        return Range(sr + 1, sc + 1, er + 1, end_col + 1)

    def _visual_line_span(self) -> Range:
        """Selected whole lines plus one adjoining line break."""
        sr, _sc, er, _ec = self._visual_span()
        if er + 1 < len(self.lines):
            return Range(sr + 1, 1, er + 2, 1)
        if sr > 0:
            return Range(sr, len(self.lines[sr - 1]) + 1, er + 1, len(self.lines[er]) + 1)
        return Range(1, 1, er + 1, len(self.lines[er]) + 1)

    def _run_visual_operator(self, op: str) -> None:
        """d / y / c over the selection; always leaves visual mode."""
        linewise = self._visual_mode == "V"
        sr, sc, er, _ec = self._visual_span()
        rng = self._visual_range()
        line_span = self._visual_line_span()
        self._visual_mode = ""

        if linewise:
            self.yank_buffer = self.lines[sr : er + 1]
        else:
            self.yank_buffer = [self.buffer.get_value_in_range(rng)]
        self._yank_linewise = linewise

        if op == "y":
            self.cursor_row, self.cursor_col = sr, sc
            self.status_msg = "yanked"
            return
        if self._check_readonly():
            return

        if not linewise:
            edit = TextEdit(range=rng, text="")
        elif op == "c":
            # keep one empty line to type into
            edit = TextEdit(range=Range(sr + 1, 1, er + 1, len(self.lines[er]) + 1), text="")
        else:
            edit = TextEdit(range=line_span, text="")
        self.execute_edits([edit])
        self.cursor_row = min(sr, len(self.lines) - 1)
        self.cursor_col = 0 if linewise else sc
        if op == "c":
            self._enter_insert()
        else:
            self.status_msg = "deleted"
