"""Trade book -- the single owned collection of trade records.

The book is the only mutable state in the journal.  Analytics never
read it implicitly: callers pass ``book.trades`` into the pure
functions in :mod:`metrics`, :mod:`windows` and :mod:`calendar`.

Persistence is an external collaborator behind the :class:`TradeStore`
protocol.  The book calls ``store.save`` after every successful
mutation; a failed mutation leaves both memory and storage untouched.

Usage::

    book = TradeBook.load(JsonFileStore("data/trades.json"))
    book.add(TradeRecord.from_prices(...))
    book.append(parse_csv(text))        # CSV import
    book.replace(load_backup(text))     # JSON restore
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from tradepulse.core.enums import ImportMode
from tradepulse.core.errors import DuplicateTradeError, TradeNotFoundError

from .record import TradeRecord

logger = logging.getLogger(__name__)


class TradeStore(Protocol):
    """Load/save hooks for the persisted collection."""

    def load(self) -> list[TradeRecord]:
        ...

    def save(self, trades: list[TradeRecord]) -> None:
        ...


def _check_unique(
    batch: list[TradeRecord], existing: set[str] | None = None
) -> None:
    seen = set(existing or ())
    for trade in batch:
        if trade.id in seen:
            raise DuplicateTradeError(trade.id)
        seen.add(trade.id)


class TradeBook:
    """Ordered, id-unique collection of trades.

    Parameters
    ----------
    trades : Iterable[TradeRecord] | None
        Initial contents.  Ids must be unique.
    store : TradeStore | None
        Optional persistence hook.  Without one the book is memory-only.
    """

    def __init__(
        self,
        trades: Iterable[TradeRecord] | None = None,
        *,
        store: TradeStore | None = None,
    ) -> None:
        initial = list(trades or [])
        _check_unique(initial)
        self._trades: list[TradeRecord] = initial
        self._store = store

    @classmethod
    def load(cls, store: TradeStore) -> TradeBook:
        """Build a book from whatever the store currently holds."""
        trades = store.load()
        logger.debug("Loaded %d trades from store", len(trades))
        return cls(trades, store=store)

    # ------------------------------------------------------------------ #
    # Queries                                                              #
    # ------------------------------------------------------------------ #

    @property
    def trades(self) -> list[TradeRecord]:
        """Snapshot copy in insertion order."""
        return list(self._trades)

    def __len__(self) -> int:
        return len(self._trades)

    def __iter__(self):
        return iter(list(self._trades))

    def __contains__(self, trade_id: object) -> bool:
        return any(t.id == trade_id for t in self._trades)

    def get(self, trade_id: str) -> TradeRecord:
        for trade in self._trades:
            if trade.id == trade_id:
                return trade
        raise TradeNotFoundError(trade_id)

    def recent(self, n: int = 20) -> list[TradeRecord]:
        """The *n* most recent trades by exit date, newest first."""
        ordered = sorted(self._trades, key=lambda t: t.exit_date, reverse=True)
        return ordered[:n]

    # ------------------------------------------------------------------ #
    # Mutations                                                            #
    # ------------------------------------------------------------------ #

    def add(self, trade: TradeRecord) -> None:
        """Append one trade.  An existing id is never overwritten."""
        if trade.id in self:
            raise DuplicateTradeError(trade.id)
        self._commit([*self._trades, trade])
        logger.info("Added trade %s (%s, pnl=%.2f)", trade.id, trade.ticker, trade.pnl)

    def delete(self, trade_id: str) -> TradeRecord:
        """Remove a trade for good and return it."""
        trade = self.get(trade_id)
        self._commit([t for t in self._trades if t.id != trade_id])
        logger.info("Deleted trade %s", trade_id)
        return trade

    def append(self, trades: Iterable[TradeRecord]) -> int:
        """Add a batch (CSV import).  All-or-nothing on id collisions."""
        batch = list(trades)
        _check_unique(batch, {t.id for t in self._trades})
        self._commit([*self._trades, *batch])
        logger.info("Appended %d trades (total %d)", len(batch), len(self._trades))
        return len(batch)

    def replace(self, trades: Iterable[TradeRecord]) -> int:
        """Swap the whole collection (JSON restore)."""
        batch = list(trades)
        _check_unique(batch)
        self._commit(batch)
        logger.info("Replaced journal with %d trades", len(batch))
        return len(batch)

    def apply(self, mode: ImportMode, trades: Iterable[TradeRecord]) -> int:
        """Dispatch an import result to :meth:`append` or :meth:`replace`."""
        if mode == ImportMode.REPLACE:
            return self.replace(trades)
        return self.append(trades)

    def reset(self) -> None:
        """Delete every trade."""
        count = len(self._trades)
        self._commit([])
        logger.warning("Journal reset, %d trades removed", count)

    def _commit(self, trades: list[TradeRecord]) -> None:
        # Save first so a storage failure leaves the book unchanged.
        if self._store is not None:
            self._store.save(list(trades))
        self._trades = trades
