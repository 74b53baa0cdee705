"""lift-scheduler: periodized resistance program generator."""

__version__ = "0.1.0"
