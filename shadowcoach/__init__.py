"""Story-mode progression and combo generation for shadow-boxing practice."""

__version__ = "0.1.0"
