"""Toolbar-style Markdown formatting: wrap a selection or toggle line prefixes."""

from __future__ import annotations

from mdvim.buffer import Range, TextEdit, TextModel

# kind -> (opening, closing, placeholder)
_WRAPPERS: dict[str, tuple[str, str, str]] = {
    "bold": ("**", "**", "bold"),
    "italic": ("_", "_", "italic"),
    "strikethrough": ("~~", "~~", "text"),
    "code": ("`", "`", "code"),
    "link": ("[", "](https://example.com)", "Link Text"),
    "image": ("![", "](https://example.com/image.png)", "Alt Text"),
}

LINE_PREFIXES: dict[str, str] = {
    "heading": "### ",
    "list-ul": "- ",
    "list-ol": "1. ",
    "checklist": "- [ ] ",
    "quote": "> ",
}

TEMPLATES: dict[str, str] = {
    "mermaid": (
        "\n```mermaid\ngraph TD;\n    A-->B;\n    A-->C;\n    B-->D;\n    C-->D;\n```\n"
    ),
    "math": " $$ x = y^2 $$ ",
    "callout": "\n> [!NOTE]\n> Content here\n",
}

FORMAT_KINDS = tuple(_WRAPPERS) + tuple(LINE_PREFIXES)


def wrap_selection(model: TextModel, selection: Range, kind: str) -> list[TextEdit]:
    """Surround the selected text with the delimiters for *kind*.

    An empty selection gets a placeholder. ``code`` over several lines
    becomes a fenced block.
    """
    if kind not in _WRAPPERS:
        raise ValueError(f"unknown inline format: {kind!r}")
    text = model.get_value_in_range(selection)
    if kind == "code" and selection.start_line_number != selection.end_line_number:
        return [TextEdit(range=selection, text=f"```\n{text}\n```")]
    opening, closing, placeholder = _WRAPPERS[kind]
    return [TextEdit(range=selection, text=f"{opening}{text or placeholder}{closing}")]


def toggle_line_prefix(model: TextModel, selection: Range, prefix: str) -> list[TextEdit]:
    """Remove *prefix* from selected lines that have it, add it elsewhere."""
    edits: list[TextEdit] = []
    for ln in range(selection.start_line_number, selection.end_line_number + 1):
        if model.get_line_content(ln).startswith(prefix):
            edits.append(TextEdit(range=Range(ln, 1, ln, 1 + len(prefix)), text=""))
        else:
            edits.append(TextEdit(range=Range(ln, 1, ln, 1), text=prefix))
    return edits


def format_edits(model: TextModel, selection: Range, kind: str) -> list[TextEdit]:
    """Dispatch *kind* to wrapping or line-prefix toggling."""
    if kind in LINE_PREFIXES:
        return toggle_line_prefix(model, selection, LINE_PREFIXES[kind])
    return wrap_selection(model, selection, kind)


def insert_template(selection: Range, kind: str) -> TextEdit:
    if kind not in TEMPLATES:
        raise ValueError(f"unknown template: {kind!r}")
    return TextEdit(range=selection, text=TEMPLATES[kind])
