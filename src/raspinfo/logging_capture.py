"""Forward every log record to the store's application log.

The store handler sits on the root logger next to the console handler.
``logging`` calls each handler independently and routes handler failures to
``Handler.handleError``, so a failing store write never blocks the console
output and vice versa.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from raspinfo.state.store import SnapshotStore

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class StoreLogHandler(logging.Handler):
    """Append the formatted message of every record to the store."""

    def __init__(self, store: SnapshotStore, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._store = store

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._store.append_log_line(self.format(record))
        except Exception:
            self.handleError(record)


def configure_logging(
    store: SnapshotStore,
    level: int | str = logging.INFO,
    *,
    stream: TextIO | None = None,
) -> StoreLogHandler:
    """Install a console handler and a :class:`StoreLogHandler` on the root logger.

    Handlers installed by an earlier call are replaced, so calling this twice
    does not duplicate output.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_raspinfo", False):
            root.removeHandler(handler)

    console = logging.StreamHandler(stream or sys.stdout)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    console._raspinfo = True  # type: ignore[attr-defined]

    store_handler = StoreLogHandler(store)
    store_handler.setFormatter(logging.Formatter("%(message)s"))
    store_handler._raspinfo = True  # type: ignore[attr-defined]

    root.addHandler(console)
    root.addHandler(store_handler)
    root.setLevel(level)
    return store_handler
