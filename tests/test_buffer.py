"""Tests for TextBuffer."""

from mdvim.buffer import KeyDown, Position, Range, TextBuffer, TextEdit


class TestTextModel:
    """Line access and range reads."""

    def test_empty(self):
        buf = TextBuffer()
        assert buf.lines == [""]
        assert buf.get_line_count() == 1
        assert buf.get_line_max_column(1) == 1

    def test_line_access_is_one_based(self):
        """Line numbers passed in are 1-based."""
        buf = TextBuffer("abc\ndefg")
        assert buf.get_line_content(2) == "defg"
        assert buf.get_line_max_column(2) == 5

    def test_value_in_range_single_line(self):
        buf = TextBuffer("hello world")
        assert buf.get_value_in_range(Range(1, 7, 1, 12)) == "world"

    def test_value_in_range_multi_line(self):
        """Ranges spanning lines keep the line breaks."""
        buf = TextBuffer("abc\ndef\nghi")
        assert buf.get_value_in_range(Range(1, 2, 3, 2)) == "bc\ndef\ng"

    def test_set_value_clears_history(self):
        """set_value starts a fresh history."""
        buf = TextBuffer("a")
        buf.save_undo()
        buf.set_value("b\nc")
        assert buf.lines == ["b", "c"]
        assert buf.undo_stack == []


class TestApplyEdits:
    """Atomic multi-edit application."""

    def test_insert(self):
        buf = TextBuffer("hello")
        end = buf.apply_edits([TextEdit(Range(1, 6, 1, 6), " world")])
        assert buf.get_value() == "hello world"
        assert end == Position(1, 12)

    def test_replace_across_lines(self):
        """One edit can join lines."""
        buf = TextBuffer("one\ntwo\nthree")
        end = buf.apply_edits([TextEdit(Range(1, 2, 3, 3), "X")])
        assert buf.lines == ["oXree"]
        assert end == Position(1, 3)

    def test_newline_in_text(self):
        buf = TextBuffer("- a")
        end = buf.apply_edits([TextEdit(Range(1, 4, 1, 4), "\n- ")])
        assert buf.lines == ["- a", "- "]
        assert end == Position(2, 3)

    def test_several_edits_one_step(self):
        """Several edits undo together."""
        buf = TextBuffer("abc\ndef")
        end = buf.apply_edits([
            TextEdit(Range(2, 1, 2, 2), "YY"),
            TextEdit(Range(1, 1, 1, 1), "X"),
        ])
        assert buf.lines == ["Xabc", "YYef"]
        assert end == Position(2, 3)
        assert len(buf.undo_stack) == 1

    def test_empty_edit_list(self):
        """No edits means no undo step."""
        buf = TextBuffer("abc")
        assert buf.apply_edits([]) is None
        assert buf.undo_stack == []


class TestUndoRedo:
    """Snapshot undo and redo."""

    def test_undo_restores_lines_and_cursor(self):
        buf = TextBuffer("abc")
        buf.apply_edits([TextEdit(Range(1, 1, 1, 4), "xyz")], cursor_row=0, cursor_col=2)
        assert buf.undo() == (0, 2)
        assert buf.lines == ["abc"]

    def test_redo(self):
        buf = TextBuffer("abc")
        buf.apply_edits([TextEdit(Range(1, 1, 1, 4), "xyz")])
        buf.undo(0, 1)
        assert buf.redo() == (0, 1)
        assert buf.lines == ["xyz"]

    def test_nothing_to_undo(self):
        buf = TextBuffer("abc")
        assert buf.undo() is None
        assert buf.redo() is None

    def test_new_edit_clears_redo(self):
        """A new edit drops the redo stack."""
        buf = TextBuffer("abc")
        buf.save_undo()
        buf.undo()
        buf.save_undo()
        assert buf.redo_stack == []

    def test_undo_limit(self):
        """Oldest snapshots fall off past the limit."""
        buf = TextBuffer("a", undo_limit=2)
        for _ in range(3):
            buf.save_undo()
        assert len(buf.undo_stack) == 2


class TestKeyDown:
    """Key-down event flags."""

    def test_flags(self):
        event = KeyDown("enter")
        assert not event.default_prevented
        event.prevent_default()
        event.stop()
        assert event.default_prevented
        assert event.propagation_stopped
