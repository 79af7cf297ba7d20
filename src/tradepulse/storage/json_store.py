"""JSON-file persistence for the trade book.

The file holds exactly the backup format (see
:mod:`tradepulse.journal.backup`), so a data file and a backup are
interchangeable.  Writes go to a temporary sibling first and are moved
into place with ``os.replace`` so a crash never leaves a truncated file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from tradepulse.core.errors import ImportFormatError, StorageError
from tradepulse.journal.backup import dump_backup, load_backup
from tradepulse.journal.record import TradeRecord

logger = logging.getLogger(__name__)


class JsonFileStore:
    """:class:`~tradepulse.journal.book.TradeStore` backed by one JSON file.

    A missing file loads as an empty collection.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[TradeRecord]:
        if not self._path.exists():
            return []
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot read {self._path}: {exc}") from exc
        if not text.strip():
            return []
        try:
            return load_backup(text)
        except ImportFormatError as exc:
            raise StorageError(f"Corrupt trade file {self._path}: {exc}") from exc

    def save(self, trades: list[TradeRecord]) -> None:
        payload = dump_backup(trades)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write {self._path}: {exc}") from exc
        logger.debug("Saved %d trades to %s", len(trades), self._path)
