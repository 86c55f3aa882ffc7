"""Export race snapshots to CSV and JSON."""

import csv
import json
from collections.abc import Sequence
from pathlib import Path

from agentrace.simulation.snapshot import SimulationSnapshot


class Exporter:
    """Exports recorded snapshots to various formats."""

    def __init__(self, output_dir: str | Path = "output"):
        """Initialize exporter.

        Args:
            output_dir: Directory for output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def export_telemetry_csv(
        self,
        snapshots: Sequence[SimulationSnapshot],
        filename: str = "telemetry.csv",
    ) -> Path:
        """Export one row per vehicle per snapshot.

        Args:
            snapshots: Snapshots in the order they were emitted
            filename: Output filename

        Returns:
            Path to created file
        """
        filepath = self.output_dir / filename

        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "elapsed_time", "status", "weather", "vehicle_id", "name",
                "race_position", "laps", "segment", "segment_progress", "speed",
                "energy_level", "tire_wear", "in_pit", "x", "y",
            ])

            for snapshot in snapshots:
                for vehicle in snapshot.vehicles:
                    writer.writerow([
                        f"{snapshot.elapsed_time:.3f}",
                        snapshot.status,
                        snapshot.weather.type.value,
                        vehicle.id,
                        vehicle.name,
                        vehicle.race_position,
                        vehicle.laps,
                        vehicle.current_segment,
                        f"{vehicle.segment_progress:.4f}",
                        f"{vehicle.speed:.2f}",
                        f"{vehicle.energy_level:.4f}",
                        f"{vehicle.tire_wear:.4f}",
                        int(vehicle.in_pit),
                        f"{vehicle.position[0]:.2f}",
                        f"{vehicle.position[1]:.2f}",
                    ])

        return filepath

    def export_lap_times_csv(
        self,
        snapshot: SimulationSnapshot,
        filename: str = "lap_times.csv",
    ) -> Path:
        """Export every completed lap time from a snapshot.

        Args:
            snapshot: Usually the final snapshot of a race
            filename: Output filename

        Returns:
            Path to created file
        """
        filepath = self.output_dir / filename

        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["vehicle_id", "name", "lap", "lap_time"])

            for vehicle in sorted(snapshot.vehicles, key=lambda v: v.race_position):
                for lap, lap_time in enumerate(vehicle.lap_times, 1):
                    writer.writerow([vehicle.id, vehicle.name, lap, f"{lap_time:.3f}"])

        return filepath

    def export_snapshot_json(
        self,
        snapshot: SimulationSnapshot,
        filename: str = "snapshot.json",
    ) -> Path:
        """Export a single snapshot to JSON.

        Args:
            snapshot: Snapshot to write
            filename: Output filename

        Returns:
            Path to created file
        """
        filepath = self.output_dir / filename

        with open(filepath, "w") as f:
            json.dump(snapshot.to_dict(), f, indent=2)

        return filepath

    def export_all(
        self,
        snapshots: Sequence[SimulationSnapshot],
        prefix: str = "",
    ) -> dict[str, Path]:
        """Export telemetry, lap times and the final snapshot.

        Args:
            snapshots: Snapshots in the order they were emitted
            prefix: Optional prefix for filenames

        Returns:
            Dictionary of format -> filepath

        Raises:
            ValueError: If no snapshots were recorded
        """
        if not snapshots:
            raise ValueError("No snapshots to export")

        prefix = f"{prefix}_" if prefix else ""
        final = snapshots[-1]

        return {
            "telemetry_csv": self.export_telemetry_csv(snapshots, f"{prefix}telemetry.csv"),
            "lap_times_csv": self.export_lap_times_csv(final, f"{prefix}lap_times.csv"),
            "snapshot_json": self.export_snapshot_json(final, f"{prefix}snapshot.json"),
        }
