"""Support ticket desk backend."""

__version__ = "3.0.0"
