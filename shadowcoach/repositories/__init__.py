"""Persistence adapters for learner state."""

from .learner_progress import (
    InMemoryLearnerProgressStore,
    JsonFileLearnerProgressStore,
    LearnerProgressStore,
)

__all__ = [
    "InMemoryLearnerProgressStore",
    "JsonFileLearnerProgressStore",
    "LearnerProgressStore",
]
