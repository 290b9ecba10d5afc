"""Tests for the slit-fdtd command-line tool."""

import io

import pytest
from click.testing import CliRunner
from rich.console import Console

from slit_fdtd import DoubleSlitSimulation, __version__
from slit_fdtd.cli.progress import SimulationProgress, cell_updates, format_time
from slit_fdtd.cli.run import main


@pytest.fixture
def runner():
    return CliRunner()


def test_dry_run(runner):
    """Dry run prints the parameter table without stepping."""
    result = runner.invoke(main, ["--width", "60", "--height", "40", "--dry-run"])

    assert result.exit_code == 0
    assert "Dry run" in result.output
    assert "60 × 40" in result.output
    assert "Simulation complete" not in result.output


def test_short_run(runner):
    result = runner.invoke(main, ["--width", "60", "--height", "40", "--frames", "5"])

    assert result.exit_code == 0, result.output
    assert "Simulation complete" in result.output
    assert "Steps" in result.output
    assert "15" in result.output


def test_no_source_reported(runner):
    result = runner.invoke(main, ["--width", "60", "--height", "40", "--no-source", "--dry-run"])

    assert result.exit_code == 0
    assert "disabled" in result.output


def test_rejects_tiny_grid(runner):
    result = runner.invoke(main, ["--width", "3", "--dry-run"])
    assert result.exit_code != 0


def test_rejects_screen_out_of_range(runner):
    result = runner.invoke(main, ["--screen", "150", "--dry-run"])
    assert result.exit_code != 0


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_png_export(runner, tmp_path):
    pytest.importorskip("matplotlib")

    frame = tmp_path / "frame.png"
    profile = tmp_path / "profile.png"
    result = runner.invoke(
        main,
        [
            "--width", "60",
            "--height", "40",
            "--frames", "3",
            "--frame-png", str(frame),
            "--profile-png", str(profile),
        ],
    )

    assert result.exit_code == 0, result.output
    assert frame.stat().st_size > 0
    assert profile.stat().st_size > 0


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0s"), (5, "5s"), (60, "1m 00s"), (83, "1m 23s"), (3600, "1h 00m"), (8100, "2h 15m")],
)
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected


def test_interrupt_exits_130(runner, monkeypatch):
    """Ctrl-C stops the bar once and exits with the SIGINT code."""
    finish_calls = []
    original_finish = SimulationProgress.finish

    def counting_finish(self):
        finish_calls.append(self)
        original_finish(self)

    def interrupted_run(self, *args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(SimulationProgress, "finish", counting_finish)
    monkeypatch.setattr(DoubleSlitSimulation, "run", interrupted_run)

    result = runner.invoke(main, ["--width", "60", "--height", "40", "--frames", "5"])

    assert result.exit_code == 130
    assert "Interrupted" in result.output
    assert len(finish_calls) == 1


def test_progress_reports_throughput_and_memory():
    console = Console(file=io.StringIO(), force_terminal=False)
    simulation = DoubleSlitSimulation(width=40, height=30)

    with SimulationProgress(console, simulation, 4, update_interval=0.0) as progress:
        simulation.run(4, callback=progress.update)
        task = progress.progress.tasks[0]
        assert task.completed == 4
        assert "Mcells/s" in task.fields["stats"]

    assert progress.peak_memory_mb > 0
    # Second stop is harmless
    progress.finish()


def test_cell_updates():
    simulation = DoubleSlitSimulation(width=40, height=30)
    assert cell_updates(simulation, 2) == 2 * 3 * 40 * 30
