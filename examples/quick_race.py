#!/usr/bin/env python3
"""Quick race example on a synthetic circuit.

Runs a short race as fast as possible (no real-time pacing), prints the
standings and agent metrics, and exports the recorded snapshots.

Usage:
    python examples/quick_race.py
"""

import logging
import math
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import numpy as np

from agentrace.agents import Agent, DriverPreset, DriverTraits, TraitAgent
from agentrace.models import (
    EnergyModel,
    PerformanceProfile,
    SegmentType,
    TrackSegment,
    Vehicle,
    VehicleConfig,
    Weather,
    WeatherType,
)
from agentrace.output import ConsoleOutput, Exporter
from agentrace.simulation import RaceOrchestrator, RaceStatus, SimulationConfig, WeatherProfile
from agentrace.strategy import HeuristicPolicy


def create_circuit() -> list[TrackSegment]:
    """Create a small circuit: two straights joined by corners, a chicane and a hairpin."""
    layout = [
        # (type, length, radius, hazard)
        (SegmentType.STRAIGHT, 600.0, None, 0.0),
        (SegmentType.CORNER, 150.0, 120.0, 0.0),
        (SegmentType.CHICANE, 120.0, None, 0.1),
        (SegmentType.FAST_SWEEP, 250.0, 300.0, 0.0),
        (SegmentType.STRAIGHT, 500.0, None, 0.0),
        (SegmentType.HAIRPIN, 80.0, 25.0, 0.2),
        (SegmentType.S_CURVE, 200.0, 90.0, 0.0),
    ]

    # Lay the segments out on a closed polygon so positions are meaningful
    segments = []
    heading = 0.0
    x, y = 0.0, 0.0
    turn = 2 * math.pi / len(layout)
    for index, (segment_type, length, radius, hazard) in enumerate(layout):
        end = (x + length * math.cos(heading), y + length * math.sin(heading))
        segments.append(TrackSegment(
            id=index,
            type=segment_type,
            length=length,
            start=(x, y),
            end=end,
            radius=radius,
            hazard_level=hazard,
        ))
        x, y = end
        heading += turn
    return segments


def create_roster() -> list[VehicleConfig]:
    """Create a small field with slightly different cars."""
    cars = [
        (1, "Volt", 285.0, 8.5, 1.05),
        (2, "Ampere", 280.0, 8.0, 1.00),
        (3, "Ohm", 290.0, 7.5, 0.95),
        (4, "Tesla", 275.0, 9.0, 1.10),
    ]
    return [
        VehicleConfig(
            id=vehicle_id,
            name=name,
            max_speed=max_speed,
            acceleration_profile=PerformanceProfile(acceleration=accel),
            grip_coefficient=grip,
            energy=EnergyModel(consumption_rate=0.00004, regeneration_rate=0.00002),
        )
        for vehicle_id, name, max_speed, accel, grip in cars
    ]


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("Agent Race Simulation - Quick Example")
    print("=" * 50)

    rng = np.random.default_rng(42)
    presets = [DriverPreset.EXPERT, DriverPreset.AGGRESSIVE, DriverPreset.DEFENSIVE]

    def build_agent(vehicle: Vehicle) -> Agent:
        # Last car uses the plain heuristic policy for comparison
        if vehicle.id > len(presets):
            return Agent(vehicle, HeuristicPolicy())
        traits = DriverTraits.preset(presets[vehicle.id - 1])
        return TraitAgent(vehicle, HeuristicPolicy(), traits=traits, rng=rng)

    config = SimulationConfig(
        total_laps=3,
        weather_profile=WeatherProfile(
            initial_weather=Weather(type=WeatherType.CLEAR, temperature=24.0),
            change_probability=2.0,
        ),
    )
    orchestrator = RaceOrchestrator(config=config, rng=rng, agent_factory=build_agent)

    snapshots = []
    orchestrator.set_state_callback(snapshots.append)
    orchestrator.initialize(create_roster(), create_circuit())

    print(f"Vehicles: {len(orchestrator.vehicles)}")
    print(f"Segments: {len(orchestrator.track)}")
    print(f"Laps: {config.total_laps}")

    # Tick directly instead of pacing against the wall clock
    orchestrator.start()
    while orchestrator.status == RaceStatus.RUNNING:
        orchestrator.tick()

    ConsoleOutput.print_standings(snapshots[-1])
    ConsoleOutput.print_agent_summary(orchestrator.agents)

    print("\nExporting results...")
    exporter = Exporter(output_dir="output")
    files = exporter.export_all(snapshots, prefix="quick_race")
    for fmt, path in files.items():
        print(f"  {fmt}: {path}")

    print("\nDone!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
