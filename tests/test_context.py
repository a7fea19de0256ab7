"""Tests for cursor context tracking."""

from mdvim.buffer import Position, TextBuffer
from mdvim.context import (
    FormatTag,
    attach_editor_context_handlers,
    compute_active_formats,
    compute_editor_context,
)
from mdvim.table import TableLocation


def formats(line: str, column: int) -> frozenset:
    return compute_active_formats(TextBuffer(line), Position(1, column))


class TestBlockFormats:
    """Line-level formats."""

    def test_heading(self):
        assert formats("## Title", 1) == {FormatTag.HEADING}

    def test_heading_needs_space(self):
        """'#Title' is not a heading."""
        assert formats("#hashtag", 1) == frozenset()

    def test_quote(self):
        assert formats("> said", 3) == {FormatTag.QUOTE}

    def test_lists(self):
        assert formats("- item", 3) == {FormatTag.LIST_UL}
        assert formats("  12. item", 6) == {FormatTag.LIST_OL}

    def test_checklist_is_also_bullet(self):
        """A task item is also a bullet item."""
        assert formats("- [ ] task", 8) == {FormatTag.LIST_UL, FormatTag.CHECKLIST}

    def test_code_fence(self):
        assert FormatTag.CODE_BLOCK in formats("```python", 1)


class TestInlineFormats:
    """Paired delimiters around the cursor."""

    def test_bold(self):
        assert formats("**bold** text", 4) == {FormatTag.BOLD}

    def test_bold_underscores(self):
        assert formats("a __b__ c", 5) == {FormatTag.BOLD}

    def test_outside_bold(self):
        """Cursor after the closing delimiter is outside."""
        assert formats("**bold** text", 11) == frozenset()

    def test_italic(self):
        assert formats("an *it* word", 6) == {FormatTag.ITALIC}

    def test_strikethrough(self):
        assert formats("~~gone~~", 4) == {FormatTag.STRIKETHROUGH}

    def test_inline_code(self):
        assert formats("use `code` here", 7) == {FormatTag.CODE}

    def test_unclosed_delimiter(self):
        """An opening delimiter alone does not count."""
        assert formats("**open only", 5) == frozenset()


class TestEditorContext:
    """Context snapshot for one position."""

    def test_in_table(self):
        model = TextBuffer("| A | B |\n|---|---|\n| 1 | **2** |")
        ctx = compute_editor_context(model, Position(3, 9))
        assert ctx.is_in_table
        assert ctx.table_location == TableLocation(True, 3, 2, 3, 2)
        assert ctx.active_formats == {FormatTag.BOLD}
        assert ctx.cursor == Position(3, 9)

    def test_outside_table(self):
        ctx = compute_editor_context(TextBuffer("plain"), Position(1, 1))
        assert not ctx.is_in_table
        assert ctx.table_location == TableLocation.outside()


class TestAttachHandlers:
    """Cursor-move subscription."""

    def test_runs_immediately_and_on_move(self, make_editor):
        """Context is pushed on attach and after each move."""
        editor = make_editor("text\n| A | B |\n|---|---|")
        seen = []
        dispose = attach_editor_context_handlers(editor, seen.append)
        assert len(seen) == 1
        assert not seen[0].is_in_table

        editor.set_position(Position(2, 7))
        assert seen[-1].table_location.col_index == 2

        dispose()
        editor.set_position(Position(1, 1))
        assert len(seen) == 2

    def test_skips_missing_position(self, make_editor):
        """A None position is skipped."""
        editor = make_editor("text")
        editor.position = None
        seen = []
        attach_editor_context_handlers(editor, seen.append)
        assert seen == []
