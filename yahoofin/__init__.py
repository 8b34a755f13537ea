"""Client for Yahoo Finance price history, option chains and expiration dates."""

__version__ = "0.1.0"

__all__ = ["client", "constants", "history", "option", "ticker"]