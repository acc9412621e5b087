"""Season lifecycle and statistics aggregation engine for athlete journals."""

__version__ = "0.1.0"
