"""Tests for console and file output."""

import csv
import json

import pytest

from agentrace.output.console import ConsoleOutput
from agentrace.output.export import Exporter
from agentrace.simulation import RaceOrchestrator


def _record_race(config, roster, track, ticks: int = 50):
    orchestrator = RaceOrchestrator(config=config)
    orchestrator.initialize(roster, track)
    snapshots = []
    orchestrator.set_state_callback(snapshots.append)
    for _ in range(ticks):
        orchestrator.tick()
    return orchestrator, snapshots


def test_export_all_writes_every_format(tmp_path, quiet_config, roster, circuit) -> None:
    _, snapshots = _record_race(quiet_config, roster, circuit)
    exporter = Exporter(tmp_path / "out")

    files = exporter.export_all(snapshots, prefix="race")

    assert set(files) == {"telemetry_csv", "lap_times_csv", "snapshot_json"}
    assert files["telemetry_csv"].name == "race_telemetry.csv"

    with open(files["telemetry_csv"], newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == len(snapshots) * len(roster)
    assert rows[0]["status"] == "stopped"

    with open(files["snapshot_json"]) as f:
        data = json.load(f)
    assert data["elapsed_time"] == pytest.approx(snapshots[-1].elapsed_time)
    assert len(data["vehicles"]) == len(roster)


def test_lap_times_export(tmp_path, quiet_config, roster, straight_track) -> None:
    """Completed laps appear one row each."""
    _, snapshots = _record_race(quiet_config, roster, straight_track, ticks=400)
    final = snapshots[-1]

    path = Exporter(tmp_path).export_lap_times_csv(final)

    with open(path, newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == sum(len(vehicle.lap_times) for vehicle in final.vehicles)
    assert len(rows) > 0


def test_export_all_rejects_empty(tmp_path) -> None:
    with pytest.raises(ValueError):
        Exporter(tmp_path).export_all([])


def test_console_output(capsys, quiet_config, roster, circuit) -> None:
    orchestrator, snapshots = _record_race(quiet_config, roster, circuit, ticks=10)

    ConsoleOutput.print_standings(snapshots[-1])
    ConsoleOutput.print_agent_summary(orchestrator.agents)

    out = capsys.readouterr().out
    assert "STANDINGS" in out
    assert "AGENT DECISIONS" in out
    for config in roster:
        assert config.name in out
