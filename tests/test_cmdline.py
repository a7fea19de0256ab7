"""Tests for the `:` command line."""

from mdvim._cmdline import CommandLine


class TestCommandLine:
    """Typing, submitting and history recall."""

    def test_type_and_backspace(self):
        cmdline = CommandLine()
        for ch in "tfm":
            cmdline.type(ch)
        assert cmdline.backspace() is True
        assert cmdline.text == "tf"

    def test_backspace_when_empty(self):
        assert CommandLine().backspace() is False

    def test_submit_strips_and_records(self):
        cmdline = CommandLine()
        cmdline.text = "  trow above "
        assert cmdline.submit() == "trow above"
        assert cmdline.text == ""
        assert list(cmdline.history) == ["trow above"]

    def test_blank_not_recorded(self):
        cmdline = CommandLine()
        cmdline.text = "   "
        assert cmdline.submit() == ""
        assert list(cmdline.history) == []

    def test_duplicates_move_to_front(self):
        """Re-running a command makes it the newest entry once."""
        cmdline = CommandLine()
        for cmd in ("tfmt", "trow", "tfmt"):
            cmdline.text = cmd
            cmdline.submit()
        assert list(cmdline.history) == ["tfmt", "trow"]

    def test_history_size(self):
        cmdline = CommandLine(history_size=2)
        for cmd in ("a", "b", "c"):
            cmdline.text = cmd
            cmdline.submit()
        assert list(cmdline.history) == ["c", "b"]

    def test_recall_walks_history(self):
        """older() goes back, newer() returns to the empty line."""
        cmdline = CommandLine()
        for cmd in ("tfmt", "trow"):
            cmdline.text = cmd
            cmdline.submit()

        cmdline.older()
        assert cmdline.text == "trow"
        cmdline.older()
        assert cmdline.text == "tfmt"
        cmdline.older()
        assert cmdline.text == "tfmt"
        cmdline.newer()
        assert cmdline.text == "trow"
        cmdline.newer()
        assert cmdline.text == ""
        assert cmdline.recall == -1

    def test_typing_leaves_recall(self):
        cmdline = CommandLine()
        cmdline.text = "tfmt"
        cmdline.submit()
        cmdline.older()
        cmdline.type(" ")
        assert cmdline.recall == -1
        assert cmdline.text == "tfmt "
