"""SST screener — breakout-after-pullback signal analysis and backtesting."""

__version__ = "0.1.0"
