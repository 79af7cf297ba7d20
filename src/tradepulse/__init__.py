"""TradePulse: personal trading-journal analytics.

Turns a list of trade records into dashboard statistics, per-dimension
breakdowns, equity curves and calendar views, and ingests third-party
CSV exports into the same normalized model.
"""

__version__ = "0.1.0"
