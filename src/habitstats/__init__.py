"""habitstats: time-series analytics for habit and health tracking logs."""

__version__ = "0.1.0"
