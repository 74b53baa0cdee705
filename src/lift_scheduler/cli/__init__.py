"""Command-line interface for lift-scheduler."""
