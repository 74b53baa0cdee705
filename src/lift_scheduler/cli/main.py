"""
CLI entry point using Typer.

Provides commands for program generation and workout logging:
- generate: Generate and store the 12-week program
- show-plan: Display generated days and exercises
- templates: Display the day templates
- log-sets: Log (or re-log) sets of a workout
- show-sets: Display the sets of a workout
- complete-workout: Mark a workout complete
"""

from .app import app
from .commands import planning, sessions  # noqa: F401  (registers commands)

__all__ = ["app"]


if __name__ == "__main__":
    app()
