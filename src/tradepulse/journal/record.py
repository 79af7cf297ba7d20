"""Trade record -- the core data model.

A TradeRecord captures one completed trade: instrument, direction,
prices, size, classification tags, and the derived analytics (net P&L,
percentage return, R-multiple, win/loss status).

Records are immutable.  Every derived field is computed once, at
construction, by one of the factory classmethods (or supplied directly
by an importer); ``status`` is recomputed from ``pnl`` on every access
so the two can never disagree.

The JSON shape (``model_dump(by_alias=True)``) is the persisted/backup
format: camelCase keys, ISO-8601 timestamps.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)
from pydantic.alias_generators import to_camel

from tradepulse.core.enums import Bias, TradeStatus, TradeType
from tradepulse.core.ids import ensure_aware, new_id


# ---------------------------------------------------------------------- #
# Derivation rules                                                         #
# ---------------------------------------------------------------------- #

def derive_status(pnl: float) -> TradeStatus:
    """Win / loss / break-even classification from the sign of net P&L."""
    if pnl > 0:
        return TradeStatus.WIN
    if pnl < 0:
        return TradeStatus.LOSS
    return TradeStatus.BREAK_EVEN


def compute_pnl(
    entry_price: float,
    exit_price: float,
    quantity: float,
    fees: float,
    trade_type: TradeType,
) -> float:
    """Net P&L: price move times size in the trade's direction, less fees."""
    gross = (exit_price - entry_price) * quantity * trade_type.multiplier
    return gross - fees


def compute_pnl_percentage(
    entry_price: float,
    exit_price: float,
    trade_type: TradeType,
) -> float:
    """Signed percentage return relative to entry.  0.0 when entry is unknown."""
    if entry_price <= 0:
        return 0.0
    return ((exit_price - entry_price) / entry_price) * 100 * trade_type.multiplier


def r_multiple_from_prices(
    entry_price: float,
    exit_price: float,
    stop_loss: float | None,
    trade_type: TradeType,
) -> float | None:
    """Realized move divided by the distance to the stop.

    Returns ``None`` without a stop, or when the stop sits on the wrong
    side of entry (zero or negative risk).
    """
    if stop_loss is None or stop_loss <= 0:
        return None
    if trade_type is TradeType.LONG:
        price_diff = exit_price - entry_price
        risk_diff = entry_price - stop_loss
    else:
        price_diff = entry_price - exit_price
        risk_diff = stop_loss - entry_price
    if risk_diff <= 0:
        return None
    return price_diff / risk_diff


def r_multiple_from_risk(pnl: float, risk_amount: float | None) -> float | None:
    """Net P&L divided by the dollar amount risked."""
    if risk_amount is None or risk_amount <= 0:
        return None
    return pnl / risk_amount


def _stored_r(value: float | None) -> float | None:
    # A zero R carries no information and is stored as unset.
    if value is None or value == 0:
        return None
    return round(value, 2)


# ---------------------------------------------------------------------- #
# Model                                                                    #
# ---------------------------------------------------------------------- #

class TradeRecord(BaseModel):
    """One trade with its derived metrics.

    Parameters
    ----------
    id : str
        Opaque unique identifier (UUID by default).
    ticker : str
        Instrument symbol, normalized to upper case.
    entry_date, exit_date : datetime
        Timezone-aware.  ``exit_date`` is the realization date used for
        every time-based grouping.
    entry_price, exit_price : float
        0 means "unknown" (quick-entry mode).
    pnl : float
        Net P&L in account currency, fees already deducted.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        extra="ignore",
    )

    # Identity
    id: str = Field(default_factory=new_id)
    ticker: str
    entry_date: datetime
    exit_date: datetime

    # Direction
    type: TradeType = TradeType.LONG
    bias: Bias | None = None

    # Execution
    entry_price: float = Field(default=0.0, ge=0)
    exit_price: float = Field(default=0.0, ge=0)
    quantity: float = Field(default=0.0, ge=0)
    fees: float = Field(default=0.0, ge=0)

    # Risk
    stop_loss: float | None = Field(default=None, ge=0)
    initial_risk: float | None = Field(default=None, ge=0)
    r_multiple: float | None = None

    # Classification
    setup: str = ""
    poi: str = ""
    target: str = ""
    notes: str = ""
    screenshot_url: str | None = None

    # Outcome
    pnl: float = 0.0
    pnl_percentage: float = 0.0

    @field_validator("ticker")
    @classmethod
    def _upper_ticker(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("entry_date", "exit_date")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @field_validator("r_multiple")
    @classmethod
    def _round_r(cls, value: float | None) -> float | None:
        return None if value is None else round(value, 2)

    @field_validator("setup", "poi", "target", "notes", mode="before")
    @classmethod
    def _none_to_blank(cls, value: object) -> object:
        return "" if value is None else value

    # ------------------------------------------------------------------ #
    # Computed properties                                                  #
    # ------------------------------------------------------------------ #

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> TradeStatus:
        return derive_status(self.pnl)

    @property
    def has_price_data(self) -> bool:
        """False for quick-mode trades logged without prices."""
        return self.entry_price > 0

    @property
    def return_pct(self) -> float | None:
        """``pnl_percentage`` when it is meaningful, else ``None``."""
        if not self.has_price_data:
            return None
        return self.pnl_percentage

    @property
    def is_win(self) -> bool:
        return self.pnl > 0

    # ------------------------------------------------------------------ #
    # Factories                                                            #
    # ------------------------------------------------------------------ #

    @classmethod
    def from_prices(
        cls,
        *,
        ticker: str,
        entry_date: datetime,
        exit_date: datetime,
        entry_price: float,
        exit_price: float,
        quantity: float,
        fees: float = 0.0,
        type: TradeType = TradeType.LONG,
        stop_loss: float | None = None,
        bias: Bias | None = None,
        setup: str = "",
        poi: str = "",
        target: str = "",
        notes: str = "",
    ) -> TradeRecord:
        """Detailed-mode entry: derive P&L, return and R from prices."""
        pnl = compute_pnl(entry_price, exit_price, quantity, fees, type)
        pnl_pct = compute_pnl_percentage(entry_price, exit_price, type)

        stop = stop_loss if stop_loss is not None and stop_loss > 0 else None
        initial_risk: float | None = None
        if stop is not None:
            risk = abs(entry_price - stop) * quantity
            initial_risk = risk if risk > 0 else None

        r = r_multiple_from_prices(entry_price, exit_price, stop, type)

        return cls(
            ticker=ticker,
            entry_date=entry_date,
            exit_date=exit_date,
            type=type,
            bias=bias,
            entry_price=entry_price,
            exit_price=exit_price,
            quantity=quantity,
            fees=fees,
            stop_loss=stop,
            initial_risk=initial_risk,
            r_multiple=_stored_r(r),
            setup=setup,
            poi=poi,
            target=target,
            notes=notes,
            pnl=pnl,
            pnl_percentage=pnl_pct,
        )

    @classmethod
    def from_net_pnl(
        cls,
        *,
        ticker: str,
        entry_date: datetime,
        exit_date: datetime,
        net_pnl: float,
        quantity: float = 0.0,
        fees: float = 0.0,
        risk_amount: float | None = None,
        type: TradeType = TradeType.LONG,
        bias: Bias | None = None,
        setup: str = "",
        poi: str = "",
        target: str = "",
        notes: str = "",
    ) -> TradeRecord:
        """Quick-mode entry: net P&L and optional dollar risk, no prices."""
        risk = risk_amount if risk_amount is not None and risk_amount > 0 else None
        return cls(
            ticker=ticker,
            entry_date=entry_date,
            exit_date=exit_date,
            type=type,
            bias=bias,
            entry_price=0.0,
            exit_price=0.0,
            quantity=quantity,
            fees=fees,
            initial_risk=risk,
            r_multiple=_stored_r(r_multiple_from_risk(net_pnl, risk)),
            setup=setup,
            poi=poi,
            target=target,
            notes=notes,
            pnl=net_pnl,
            pnl_percentage=0.0,
        )

    # ------------------------------------------------------------------ #
    # Serialisation                                                        #
    # ------------------------------------------------------------------ #

    def to_dict(self) -> dict:
        """Export to the camelCase JSON shape used for persistence."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
