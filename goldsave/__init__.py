"""Gold savings commission and bonus engine."""

__version__ = "1.0.0"
