"""Custom exception hierarchy for the journal."""


class TradePulseError(Exception):
    """Base exception for all journal errors."""


# --- Configuration ---
class ConfigError(TradePulseError):
    """Invalid or missing configuration."""


# --- Import ---
class ImportFormatError(TradePulseError):
    """A whole import file could not be read as CSV or as a JSON trade array."""


class EmptyImportError(ImportFormatError):
    """A CSV file parsed without errors but produced zero trades."""


# --- Collection ---
class DuplicateTradeError(TradePulseError):
    """A trade id already exists in the collection."""

    def __init__(self, trade_id: str):
        self.trade_id = trade_id
        super().__init__(f"Trade id already exists: {trade_id}")


class TradeNotFoundError(TradePulseError):
    """No trade with the given id."""


# --- Persistence ---
class StorageError(TradePulseError):
    """Reading or writing the persisted trade collection failed."""
