"""
Minimal smoke tests for the lift-scheduler CLI.

Tests basic functionality:
- App runs without errors
- Templates are printed
- A program is generated once, and a second run is refused
- Sets can be logged, re-logged, and shown
"""

import pytest
from typer.testing import CliRunner

import lift_scheduler.cli.commands.planning as planning_commands
from lift_scheduler.cli.main import app
from lift_scheduler.core.models import ProgressEvent
from lift_scheduler.io.json_store import JsonDocumentStore

runner = CliRunner()


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def fast_config(tmp_path):
    """Config without pacing pauses so generation runs at full speed."""
    path = tmp_path / "fast.yaml"
    path.write_text("writer:\n  pace_every: 0\n", encoding="utf-8")
    return path


def _store_args(data_dir, fast_config):
    return ["--store", "json", "--data-dir", str(data_dir), "--config", str(fast_config)]


def _generate(data_dir, fast_config, program_id="p1"):
    return runner.invoke(app, ["generate", "--program-id", program_id, *_store_args(data_dir, fast_config)])


class TestCLISmoke:
    """Basic smoke tests for CLI commands."""

    def test_app_help(self):
        """Test that app runs and shows help."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "generate" in result.output
        assert "log-sets" in result.output

    def test_templates(self):
        """Test templates prints every day-type."""
        result = runner.invoke(app, ["templates"])
        assert result.exit_code == 0
        assert "Lower Strength" in result.output
        assert "Upper Hypertrophy" in result.output

    def test_templates_paused_variant(self):
        result = runner.invoke(app, ["templates", "--day-type", "lower-strength", "--variant", "paused-hinge"])
        assert result.exit_code == 0
        assert "paused-hinge" in result.output
        assert "Paused" in result.output
        assert "Conventional" not in result.output

    def test_templates_unknown_day_type(self):
        result = runner.invoke(app, ["templates", "--day-type", "full-body"])
        assert result.exit_code == 1

    def test_generate_writes_program(self, data_dir, fast_config):
        """Test generate creates all days and exercises."""
        result = _generate(data_dir, fast_config)

        assert result.exit_code == 0, result.output
        store = JsonDocumentStore(data_dir)
        assert len(store.list_documents("program_days")) == 48
        assert len(store.list_documents("program_exercises")) == 348

    def test_generate_twice_refused(self, data_dir, fast_config):
        """Test a second generate for the same program does not duplicate days."""
        _generate(data_dir, fast_config)
        result = _generate(data_dir, fast_config)

        assert result.exit_code == 1
        assert "already has generated days" in result.output
        assert len(JsonDocumentStore(data_dir).list_documents("program_days")) == 48

    def test_generate_interrupted_prints_partial_summary(self, data_dir, fast_config, monkeypatch):
        """Test Ctrl-C during generate reports what was written before exiting."""

        def interrupted(store, program_id, *, on_progress=None, **kwargs):
            on_progress(ProgressEvent(phase="day", created=1, total=48, message="Created Day 1"))
            for n in range(1, 4):
                on_progress(ProgressEvent(phase="exercise", created=n, total=348, message=f"Created exercise {n}/348"))
            raise KeyboardInterrupt

        monkeypatch.setattr(planning_commands, "generate_plan", interrupted)
        result = _generate(data_dir, fast_config)

        assert result.exit_code == 130
        assert "Days created" in result.output
        assert "Exercises created" in result.output
        assert "cancelled" in result.output
        assert "records written so far were kept" in result.output

    def test_generate_rejects_unknown_store(self, data_dir):
        result = runner.invoke(app, ["generate", "--program-id", "p1", "--store", "sqlite"])
        assert result.exit_code == 1

    def test_show_plan_week(self, data_dir, fast_config):
        """Test show-plan prints the deload week."""
        _generate(data_dir, fast_config)
        result = runner.invoke(app, ["show-plan", "--program-id", "p1", "--week", "6", *_store_args(data_dir, fast_config)])

        assert result.exit_code == 0
        assert "DELOAD" in result.output

    def test_show_plan_empty(self, data_dir, fast_config):
        result = runner.invoke(app, ["show-plan", "--program-id", "none", *_store_args(data_dir, fast_config)])
        assert result.exit_code == 0
        assert "No generated days" in result.output

    def test_log_sets_twice_keeps_one_record(self, data_dir, fast_config):
        """Test re-logging the same set updates it instead of duplicating."""
        _generate(data_dir, fast_config)
        store = JsonDocumentStore(data_dir)
        day = store.list_documents("program_days", filters={"week_number": 1, "order_index": 1})[0]
        exercise = store.list_documents("program_exercises", filters={"program_day_id": day["id"], "order_index": 1})[0]

        base = [
            "log-sets",
            "--program-id", "p1",
            "--day-id", day["id"],
            "--date", "2026-03-02",
            *_store_args(data_dir, fast_config),
        ]
        first = runner.invoke(app, [*base, "--sets", f"{exercise['id']}#1=8@60/2"])
        second = runner.invoke(app, [*base, "--sets", f"{exercise['id']}#1=9@60/1"])

        assert first.exit_code == 0, first.output
        assert second.exit_code == 0, second.output
        store = JsonDocumentStore(data_dir)
        workouts = store.list_documents("workout_logs")
        set_logs = store.list_documents("set_logs")
        assert len(workouts) == 1
        assert len(set_logs) == 1
        assert set_logs[0]["reps"] == 9
        assert set_logs[0]["rir"] == 1

        shown = runner.invoke(app, ["show-sets", "--workout-log-id", workouts[0]["id"], *_store_args(data_dir, fast_config)])
        assert shown.exit_code == 0

        done = runner.invoke(app, ["complete-workout", "--workout-log-id", workouts[0]["id"], *_store_args(data_dir, fast_config)])
        assert done.exit_code == 0
        assert JsonDocumentStore(data_dir).list_documents("workout_logs")[0]["status"] == "complete"

    def test_log_sets_bad_entry(self, data_dir, fast_config):
        result = runner.invoke(app, [
            "log-sets",
            "--program-id", "p1",
            "--day-id", "d1",
            "--sets", "bench 3x5",
            *_store_args(data_dir, fast_config),
        ])
        assert result.exit_code == 1
        assert len(JsonDocumentStore(data_dir).list_documents("set_logs")) == 0
