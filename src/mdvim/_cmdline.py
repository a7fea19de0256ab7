"""`:` command line state with recall of earlier commands."""

from __future__ import annotations

from collections import deque


class CommandLine:
    """Text typed after ``:`` plus a most-recent-first history.

    ``recall`` walks the history: 0 is the newest entry, -1 means the
    user is editing fresh text.
    """

    def __init__(self, history_size: int = 50) -> None:
        self.text: str = ""
        self.history: deque[str] = deque(maxlen=history_size)
        self.recall: int = -1

    def reset(self) -> None:
        self.text = ""
        self.recall = -1

    def type(self, char: str) -> None:
        self.text += char
        self.recall = -1

    def backspace(self) -> bool:
        """Drop the last character. False when there was nothing to drop."""
        if not self.text:
            return False
        self.text = self.text[:-1]
        self.recall = -1
        return True

    def submit(self) -> str:
        """Return the command and remember it (newest first, no duplicates)."""
        cmd = self.text.strip()
        if cmd:
            if cmd in self.history:
                self.history.remove(cmd)
            self.history.appendleft(cmd)
        self.reset()
        return cmd

    def older(self) -> None:
        if self.recall + 1 < len(self.history):
            self.recall += 1
            self.text = self.history[self.recall]

    def newer(self) -> None:
        if self.recall > 0:
            self.recall -= 1
            self.text = self.history[self.recall]
        elif self.recall == 0:
            self.reset()
