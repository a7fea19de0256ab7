"""Logger helper for mdvim.

Example:
    >>> from mdvim.log import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("table edit refused")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Return a standard library logger under the ``mdvim.`` namespace.

    >>> get_logger("table").name
    'mdvim.table'
    """
    if not (name == "mdvim" or name.startswith("mdvim.")):
        name = f"mdvim.{name}"
    return logging.getLogger(name)


def configure_file_logging(path: str, level: int = logging.DEBUG) -> logging.Handler:
    """Send ``mdvim.*`` records to *path*.

    The TUI owns the terminal, so this is the only handler the app installs.
    """
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger("mdvim")
    root.addHandler(handler)
    root.setLevel(level)
    return handler
