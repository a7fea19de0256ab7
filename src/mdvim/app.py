"""Markdown editor application."""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from textual.app import App, ComposeResult
from textual.widgets import Header, Static

from mdvim.config import EditorSettings, load_settings
from mdvim.log import configure_file_logging, get_logger
from mdvim.widget import MarkdownEditor

logger = get_logger(__name__)

SAMPLE_MARKDOWN = """\
# mdvim

Press `i` to insert, `Esc` to leave, `:` for commands.

- Enter continues this list
- an empty item ends it

| Command | Action |
|---------|--------|
| :trow | add a row |
| :tcol | add a column |
| :tfmt | align the table |
"""


class MarkdownEditorApp(App):
    """TUI app that wraps the MarkdownEditor widget."""

    CSS = """
    #context-bar {
        height: 1;
        background: $panel;
        color: $text-muted;
        padding: 0 1;
    }
    """
    TITLE = "Markdown Editor"
    BINDINGS = []
    ENABLE_COMMAND_PALETTE = False

    def __init__(
        self,
        file_path: str = "",
        initial_content: str = "",
        read_only: bool = False,
        settings: EditorSettings | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.file_path = file_path
        self.initial_content = initial_content
        self.read_only = read_only
        self.settings = settings or EditorSettings()

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield MarkdownEditor(
            self.initial_content,
            read_only=self.read_only,
            settings=self.settings,
            id="editor",
        )
        yield Static("", id="context-bar")

    def on_mount(self) -> None:
        self._update_title()
        self.query_one("#editor").focus()

    def _update_title(self) -> None:
        ro = " [RO]" if self.read_only else ""
        if self.file_path:
            self.sub_title = self.file_path + ro
        else:
            self.sub_title = "[new]" + ro

    # -- Event handlers ----------------------------------------------------

    def on_markdown_editor_context_changed(
        self, event: MarkdownEditor.ContextChanged
    ) -> None:
        ctx = event.context
        parts = []
        if ctx.is_in_table:
            loc = ctx.table_location
            parts.append(
                f"table row {loc.row_index}/{loc.total_rows}, "
                f"column {loc.col_index}/{loc.total_cols}"
            )
        if ctx.active_formats:
            parts.append(", ".join(sorted(f.value for f in ctx.active_formats)))
        self.query_one("#context-bar", Static).update(" | ".join(parts))

    def on_markdown_editor_quit(self, event: MarkdownEditor.Quit) -> None:
        self.exit()

    def on_markdown_editor_force_quit(self, event: MarkdownEditor.ForceQuit) -> None:
        self.exit()

    def on_markdown_editor_file_save_requested(
        self, event: MarkdownEditor.FileSaveRequested
    ) -> None:
        target = event.file_path or self.file_path
        if not target:
            self.notify("No file name, use :w <file>", severity="warning")
            return

        try:
            path = Path(target)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(event.content, encoding="utf-8")
        except OSError as exc:
            logger.warning("save failed: %s", exc)
            self.notify(f"Save failed: {exc}", severity="error", timeout=6)
            return

        self.file_path = str(path)
        self._update_title()
        self.notify(f"Saved: {self.file_path}", severity="information")
        if event.quit_after:
            self.exit()

    def on_markdown_editor_file_open_requested(
        self, event: MarkdownEditor.FileOpenRequested
    ) -> None:
        target = event.file_path
        try:
            content = Path(target).read_text(encoding="utf-8")
        except FileNotFoundError:
            self.notify(f"File not found: {target}", severity="error", timeout=6)
            return
        except OSError as exc:
            self.notify(f"Cannot open: {exc}", severity="error", timeout=6)
            return

        self.query_one("#editor", MarkdownEditor).set_content(content)
        self.file_path = target
        self._update_title()
        self.notify(f"Opened: {target}", severity="information")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="mdvim",
        description="Markdown Editor in Textual",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default="",
        help="Markdown file to open",
    )
    parser.add_argument(
        "-R", "--read-only",
        action="store_true",
        default=False,
        help="open in read-only mode",
    )
    parser.add_argument(
        "--no-smart-enter",
        action="store_true",
        default=False,
        help="plain Enter in lists and tables",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="settings file (default: ~/.config/mdvim/settings.json)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="write debug log to this file",
    )
    args = parser.parse_args()

    if args.log_file:
        configure_file_logging(args.log_file)

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as exc:
        print(f"mdvim: {exc}", file=sys.stderr)
        sys.exit(1)
    if args.no_smart_enter:
        settings = replace(settings, smart_enter=False)

    file_path: str = args.file
    initial_content: str = SAMPLE_MARKDOWN

    if file_path:
        path = Path(file_path)
        try:
            initial_content = path.read_text(encoding="utf-8") if path.exists() else ""
        except PermissionError as exc:
            print(f"mdvim: {exc}", file=sys.stderr)
            sys.exit(1)

    logger.debug("starting with %s", file_path or "sample document")
    app = MarkdownEditorApp(
        file_path=file_path,
        initial_content=initial_content,
        read_only=args.read_only,
        settings=settings,
    )
    app.run()


if __name__ == "__main__":
    main()
