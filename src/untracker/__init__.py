"""Split tracker modules into one audio file per instrument or sample."""

__version__ = "0.3.0"
