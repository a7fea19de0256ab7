"""Context-sensitive Enter: new table rows and list continuation."""

from __future__ import annotations

import re
from enum import Enum, auto
from typing import Callable

from mdvim.buffer import EditorLike, KeyDown, Position, Range, TextEdit, TextModel
from mdvim.log import get_logger
from mdvim.table import insert_row, is_cursor_in_table

logger = get_logger(__name__)

# indent, marker, spacing, optional task box
_LIST_ITEM_RE = re.compile(r"^(\s*)([-*+]|\d+\.)(\s+)(\[[ xX]?\]\s+)?")
_ORDERED_MARKER_RE = re.compile(r"^\d+\.$")

# From the first pipe of the new row to the start of its first cell.
FIRST_CELL_OFFSET = 2


class EnterAction(Enum):
    DEFAULT = auto()
    TABLE_ROW = auto()
    LIST_CONTINUE = auto()
    LIST_BREAK = auto()


def classify_enter(model: TextModel, position: Position) -> EnterAction:
    """Decide what a plain Enter at *position* should do."""
    if is_cursor_in_table(model, position):
        return EnterAction.TABLE_ROW
    line = model.get_line_content(position.line_number)
    m = _LIST_ITEM_RE.match(line)
    if not m:
        return EnterAction.DEFAULT
    if len(line.strip()) == len(m.group(0).strip()):
        return EnterAction.LIST_BREAK
    return EnterAction.LIST_CONTINUE


def next_list_prefix(line: str) -> str | None:
    """Prefix for the item after *line*, or None if it is not a list item.

    Ordered markers count up and task boxes come back unchecked.
    """
    m = _LIST_ITEM_RE.match(line)
    if not m:
        return None
    indent, marker, space, task_box = m.groups()
    if _ORDERED_MARKER_RE.match(marker):
        marker = f"{int(marker[:-1]) + 1}."
    return indent + marker + space + ("[ ] " if task_box else "")


def _is_plain_enter(event: KeyDown) -> bool:
    return event.key == "enter"


def handle_enter(editor: EditorLike, event: KeyDown) -> EnterAction:
    """Run the Enter transition for *event*.

    Anything other than DEFAULT means the default Enter was suppressed.
    """
    if not _is_plain_enter(event):
        return EnterAction.DEFAULT
    model = editor.get_model()
    pos = editor.get_position()
    if model is None or pos is None:
        return EnterAction.DEFAULT

    action = classify_enter(model, pos)
    if action is EnterAction.DEFAULT:
        return action

    event.prevent_default()
    event.stop()

    if action is EnterAction.TABLE_ROW:
        _enter_table_row(editor, model, pos)
    elif action is EnterAction.LIST_BREAK:
        line = model.get_line_content(pos.line_number)
        rng = Range(pos.line_number, 1, pos.line_number, len(line) + 1)
        end = editor.execute_edits([TextEdit(range=rng, text="\n")])
        if end is not None:
            editor.set_position(end)
    else:
        prefix = next_list_prefix(model.get_line_content(pos.line_number)) or ""
        end = editor.execute_edits(
            [TextEdit(range=Range.from_position(pos), text="\n" + prefix)]
        )
        if end is not None:
            editor.set_position(end)
    return action


def _enter_table_row(editor: EditorLike, model: TextModel, pos: Position) -> None:
    # insert_row re-renders the whole table, so the reformat rides along
    # in the same edit
    edit = insert_row(model, pos, "below")
    if edit is None:
        # a lone pipe line: nothing to add a row to
        logger.debug("smart enter: no table around line %d", pos.line_number)
        return
    editor.execute_edits([edit])

    next_line = pos.line_number + 1
    content = model.get_line_content(next_line)
    first_pipe = content.find("|")
    if first_pipe != -1:
        editor.set_position(Position(next_line, first_pipe + 1 + FIRST_CELL_OFFSET))


def attach_smart_enter_handler(editor: EditorLike) -> Callable[[], None]:
    """Hook :func:`handle_enter` into the editor's key-down stream."""

    def on_key(event: KeyDown) -> None:
        handle_enter(editor, event)

    return editor.on_key_down(on_key)
