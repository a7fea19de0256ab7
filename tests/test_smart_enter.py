"""Tests for smart Enter."""

from mdvim.buffer import KeyDown, Position, TextBuffer
from mdvim.smart_enter import (
    EnterAction,
    attach_smart_enter_handler,
    classify_enter,
    handle_enter,
    next_list_prefix,
)

TABLE = "| A | B |\n|---|---|\n| 1 | 2 |"


class TestClassify:
    """Enter classification."""

    def test_table(self):
        assert classify_enter(TextBuffer(TABLE), Position(3, 3)) is EnterAction.TABLE_ROW

    def test_list_item_with_text(self):
        assert classify_enter(TextBuffer("- one"), Position(1, 6)) is EnterAction.LIST_CONTINUE

    def test_empty_list_item(self):
        """A marker with no text ends the list."""
        assert classify_enter(TextBuffer("- "), Position(1, 3)) is EnterAction.LIST_BREAK
        assert classify_enter(TextBuffer("  - [ ] "), Position(1, 9)) is EnterAction.LIST_BREAK

    def test_plain_text(self):
        assert classify_enter(TextBuffer("hello"), Position(1, 6)) is EnterAction.DEFAULT

    def test_marker_without_space(self):
        """'-item' is not a list item."""
        assert classify_enter(TextBuffer("-dash"), Position(1, 6)) is EnterAction.DEFAULT


class TestNextListPrefix:
    """Continuation prefixes."""

    def test_bullet(self):
        assert next_list_prefix("  * item") == "  * "

    def test_ordered_increments(self):
        """Ordered lists count up."""
        assert next_list_prefix("9. nine") == "10. "

    def test_task_box_unchecked(self):
        """Checked tasks continue unchecked."""
        assert next_list_prefix("- [x] done") == "- [ ] "

    def test_not_a_list(self):
        assert next_list_prefix("text") is None


class TestHandleEnter:
    """Enter handling on a fake editor."""

    def test_table_row_added_and_cursor_in_first_cell(self, make_editor):
        """A new body row with the cursor in its first cell."""
        editor = make_editor(TABLE, Position(3, 3))
        event = KeyDown("enter")
        assert handle_enter(editor, event) is EnterAction.TABLE_ROW
        assert event.default_prevented
        assert event.propagation_stopped
        assert editor.model.lines == [
            "| A   | B   |",
            "| --- | --- |",
            "| 1   | 2   |",
            "|     |     |",
        ]
        assert editor.position == Position(4, 3)
        # one edit, so one undo step
        assert len(editor.edits) == 1
        assert len(editor.model.undo_stack) == 1

    def test_table_row_mid_table(self, make_editor):
        editor = make_editor(TABLE + "\n| 3 | 4 |", Position(3, 3))
        handle_enter(editor, KeyDown("enter"))
        assert editor.model.lines[3] == "|     |     |"
        assert editor.model.lines[4] == "| 3   | 4   |"
        assert editor.position == Position(4, 3)

    def test_lone_pipe_line_suppresses_enter(self, make_editor):
        """Enter is swallowed even when no row can be added."""
        editor = make_editor("a | b", Position(1, 3))
        event = KeyDown("enter")
        assert handle_enter(editor, event) is EnterAction.TABLE_ROW
        assert event.default_prevented
        assert editor.model.lines == ["a | b"]

    def test_list_continue(self, make_editor):
        editor = make_editor("- one", Position(1, 6))
        assert handle_enter(editor, KeyDown("enter")) is EnterAction.LIST_CONTINUE
        assert editor.model.lines == ["- one", "- "]
        assert editor.position == Position(2, 3)

    def test_ordered_list_continue(self, make_editor):
        editor = make_editor("1. first", Position(1, 9))
        handle_enter(editor, KeyDown("enter"))
        assert editor.model.lines == ["1. first", "2. "]
        assert editor.position == Position(2, 4)

    def test_list_continue_splits_line(self, make_editor):
        """Text after the cursor moves to the new item."""
        editor = make_editor("- onetwo", Position(1, 6))
        handle_enter(editor, KeyDown("enter"))
        assert editor.model.lines == ["- one", "- two"]

    def test_list_break(self, make_editor):
        """Enter on an empty item clears the marker."""
        editor = make_editor("- a\n- ", Position(2, 3))
        assert handle_enter(editor, KeyDown("enter")) is EnterAction.LIST_BREAK
        assert editor.model.lines == ["- a", "", ""]
        assert editor.position == Position(3, 1)

    def test_default_leaves_event_alone(self, make_editor):
        """Plain text Enter is left to the editor."""
        editor = make_editor("hello", Position(1, 6))
        event = KeyDown("enter")
        assert handle_enter(editor, event) is EnterAction.DEFAULT
        assert not event.default_prevented
        assert editor.edits == []

    def test_modified_enter_ignored(self, make_editor):
        """Shift+Enter and friends are not handled."""
        editor = make_editor("- one", Position(1, 6))
        event = KeyDown("shift+enter")
        assert handle_enter(editor, event) is EnterAction.DEFAULT
        assert not event.default_prevented

    def test_no_position(self, make_editor):
        editor = make_editor("- one")
        editor.position = None
        assert handle_enter(editor, KeyDown("enter")) is EnterAction.DEFAULT


class TestAttach:
    """Key-down subscription."""

    def test_attach_and_dispose(self, make_editor):
        editor = make_editor("- one", Position(1, 6))
        dispose = attach_smart_enter_handler(editor)
        assert editor.press(KeyDown("enter")).default_prevented
        dispose()
        assert not editor.press(KeyDown("enter")).default_prevented
