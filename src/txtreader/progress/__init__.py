"""Reading position persistence."""

from .repository import ReadingState, ReadingStateRepository
from .tracker import ProgressTracker

__all__ = ["ProgressTracker", "ReadingState", "ReadingStateRepository"]
