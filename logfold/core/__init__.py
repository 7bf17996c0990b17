"""Core logfold configuration."""

from logfold.core.config import EventConfig

__all__ = ["EventConfig"]
