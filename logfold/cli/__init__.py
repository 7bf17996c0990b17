"""CLI package for logfold."""

__all__ = ["main"]
