"""Line reading and event boundary detection."""

from logfold.merge.controller import Merger
from logfold.merge.reader import LineReader

__all__ = ["LineReader", "Merger"]
