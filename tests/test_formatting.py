"""Tests for formatting helpers."""

import pytest

from mdvim.buffer import Range, TextBuffer
from mdvim.formatting import (
    TEMPLATES,
    format_edits,
    insert_template,
    toggle_line_prefix,
    wrap_selection,
)


class TestWrapSelection:
    """Inline wraps around a selection."""

    def test_wraps_text(self):
        model = TextBuffer("hello")
        (edit,) = wrap_selection(model, Range(1, 1, 1, 6), "bold")
        assert edit.text == "**hello**"
        assert edit.range == Range(1, 1, 1, 6)

    def test_placeholder_for_empty_selection(self):
        """Empty selection gets the placeholder text."""
        model = TextBuffer("")
        (edit,) = wrap_selection(model, Range(1, 1, 1, 1), "italic")
        assert edit.text == "_italic_"

    def test_link(self):
        model = TextBuffer("docs")
        (edit,) = wrap_selection(model, Range(1, 1, 1, 5), "link")
        assert edit.text == "[docs](https://example.com)"

    def test_multiline_code_becomes_fence(self):
        """Code across lines becomes a fenced block."""
        model = TextBuffer("a\nb")
        (edit,) = wrap_selection(model, Range(1, 1, 2, 2), "code")
        assert edit.text == "```\na\nb\n```"

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            wrap_selection(TextBuffer(""), Range(1, 1, 1, 1), "blink")


class TestLinePrefix:
    """Line prefix toggling."""

    def test_adds_prefix(self):
        model = TextBuffer("Title")
        (edit,) = toggle_line_prefix(model, Range(1, 1, 1, 1), "### ")
        model.apply_edits([edit])
        assert model.lines == ["### Title"]

    def test_removes_existing_prefix(self):
        """A line that has the prefix loses it."""
        model = TextBuffer("> quoted")
        model.apply_edits(toggle_line_prefix(model, Range(1, 3, 1, 3), "> "))
        assert model.lines == ["quoted"]

    def test_every_selected_line(self):
        """Each selected line is toggled on its own."""
        model = TextBuffer("a\n- b\nc")
        model.apply_edits(format_edits(model, Range(1, 1, 3, 2), "list-ul"))
        assert model.lines == ["- a", "b", "- c"]


class TestTemplates:
    """Snippet templates."""

    def test_insert_template(self):
        edit = insert_template(Range(2, 1, 2, 1), "callout")
        assert edit.text == TEMPLATES["callout"]
        assert edit.range == Range(2, 1, 2, 1)

    def test_mermaid_is_fenced(self):
        assert "```mermaid" in TEMPLATES["mermaid"]

    def test_unknown_template(self):
        with pytest.raises(ValueError):
            insert_template(Range(1, 1, 1, 1), "video")
