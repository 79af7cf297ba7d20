"""AI coach -- prompt construction around an external text generator.

The generator itself is an opaque collaborator (see
:class:`TextGenerator`).  This module only decides what the model sees
(at most the N most recent trades, projected to a handful of fields)
and what the user sees when the call fails.  Failures never propagate.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Protocol

from .record import TradeRecord

logger = logging.getLogger(__name__)

NO_TRADES_MESSAGE = (
    "No trades available to analyze. Please add some trades to your journal first."
)
EMPTY_ANALYSIS_MESSAGE = "Analysis could not be generated at this time."
ANALYSIS_FALLBACK = (
    "An error occurred while connecting to the AI analyst. Please try again later."
)
EMPTY_REVIEW_MESSAGE = "No feedback available."
REVIEW_FALLBACK = "Could not generate feedback."

COACH_SYSTEM_INSTRUCTION = (
    "You are an expert trading mentor designed to help traders improve "
    "profitability and discipline."
)

_ANALYSIS_TEMPLATE = """\
You are a professional trading psychology coach and risk manager.
Analyze the following recent trading journal entries (JSON format).

Data:
{trades_json}

Please provide a concise but high-impact analysis covering:
1. **Performance Summary**: Briefly comment on the win rate and PnL trend.
2. **Pattern Recognition**: Identify any recurring mistakes (e.g., overtrading, poor risk management, specific setups failing) or strengths.
3. **Actionable Advice**: Give 3 specific bullet points on what I should focus on for my next session to improve.

Keep the tone professional, direct, and constructive. Use Markdown formatting.
"""

_REVIEW_TEMPLATE = """\
Analyze this specific trade and provide brief feedback on the execution based on the notes:
Ticker: {ticker}
PnL: {pnl}
Setup: {setup}
Notes: {notes}

Was this a disciplined trade? What could have been done better? Keep it under 50 words.
"""


class TextGenerator(Protocol):
    """Free-text generation service.  May raise on any failure."""

    def generate(self, prompt: str, system_instruction: str | None = None) -> str:
        ...


def most_recent(trades: Sequence[TradeRecord], limit: int) -> list[TradeRecord]:
    """Newest *limit* trades by exit date.  The input is not reordered."""
    return sorted(trades, key=lambda t: t.exit_date, reverse=True)[:limit]


def project_trade(trade: TradeRecord) -> dict:
    return {
        "ticker": trade.ticker,
        "type": trade.type.value,
        "pnl": trade.pnl,
        "setup": trade.setup,
        "notes": trade.notes,
        "date": trade.exit_date.isoformat(),
    }


def build_analysis_prompt(trades: Sequence[TradeRecord], limit: int = 20) -> str:
    trades_json = json.dumps(
        [project_trade(t) for t in most_recent(trades, limit)], indent=2
    )
    return _ANALYSIS_TEMPLATE.format(trades_json=trades_json)


def build_review_prompt(trade: TradeRecord) -> str:
    return _REVIEW_TEMPLATE.format(
        ticker=trade.ticker, pnl=trade.pnl, setup=trade.setup, notes=trade.notes
    )


class TradeCoach:
    """Journal-level coaching on top of a :class:`TextGenerator`.

    Parameters
    ----------
    generator : TextGenerator
        The external text service.
    recent_trades : int
        How many of the most recent trades go into the analysis prompt.
    """

    def __init__(self, generator: TextGenerator, *, recent_trades: int = 20) -> None:
        self._generator = generator
        self._recent = recent_trades

    def analyze(self, trades: Sequence[TradeRecord]) -> str:
        """Performance summary, recurring patterns and advice."""
        if not trades:
            return NO_TRADES_MESSAGE
        prompt = build_analysis_prompt(trades, self._recent)
        try:
            text = self._generator.generate(prompt, COACH_SYSTEM_INSTRUCTION)
        except Exception:
            logger.exception("Coach analysis failed")
            return ANALYSIS_FALLBACK
        return text or EMPTY_ANALYSIS_MESSAGE

    def review(self, trade: TradeRecord) -> str:
        """Short execution feedback on a single trade."""
        try:
            text = self._generator.generate(build_review_prompt(trade))
        except Exception:
            logger.exception("Coach review failed for trade %s", trade.id)
            return REVIEW_FALLBACK
        return text or EMPTY_REVIEW_MESSAGE
