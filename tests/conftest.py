"""Shared helpers: a minimal host editor around TextBuffer."""

import pytest

from mdvim.buffer import Position, TextBuffer


class FakeEditor:
    """Just enough editor for the context tracker and smart Enter."""

    def __init__(self, content: str = "", position: Position | None = None) -> None:
        self.model = TextBuffer(content)
        self.position = position or Position(1, 1)
        self.cursor_listeners = []
        self.key_listeners = []
        self.edits = []

    def get_model(self):
        return self.model

    def get_position(self):
        return self.position

    def set_position(self, pos):
        self.position = pos
        for cb in list(self.cursor_listeners):
            cb(pos)

    def execute_edits(self, edits):
        self.edits.append(list(edits))
        return self.model.apply_edits(edits)

    def on_cursor_move(self, callback):
        self.cursor_listeners.append(callback)
        return lambda: self.cursor_listeners.remove(callback)

    def on_key_down(self, callback):
        self.key_listeners.append(callback)
        return lambda: self.key_listeners.remove(callback)

    def press(self, event):
        for cb in list(self.key_listeners):
            cb(event)
        return event


@pytest.fixture
def make_editor():
    return FakeEditor
