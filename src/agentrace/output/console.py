"""Console output formatting."""

from agentrace.agents import Agent
from agentrace.simulation.snapshot import SimulationSnapshot


def _format_lap(seconds: float | None) -> str:
    if seconds is None:
        return "-"
    if seconds < 60:
        return f"{seconds:.3f}s"
    mins = int(seconds // 60)
    return f"{mins}:{seconds % 60:06.3f}"


class ConsoleOutput:
    """Formats race snapshots for console display."""

    @staticmethod
    def print_standings(snapshot: SimulationSnapshot) -> None:
        """Print the leaderboard for a snapshot.

        Args:
            snapshot: Race state to print
        """
        print("\n" + "=" * 78)
        print(
            f"STANDINGS - lap {snapshot.current_lap}/{snapshot.total_laps} "
            f"at {snapshot.elapsed_time:.1f}s ({snapshot.status.upper()})"
        )
        print("=" * 78)
        print(
            f"{'Pos':<4} {'Vehicle':<18} {'Laps':<5} {'Speed':<8} "
            f"{'Energy':<7} {'Tires':<7} {'Best lap':<11} {'+/-':<5} {'Pit':<3}"
        )
        print("-" * 78)

        for vehicle in sorted(snapshot.vehicles, key=lambda v: v.race_position):
            net_moves = vehicle.overtakes - vehicle.positions_lost
            print(
                f"{vehicle.race_position:<4} "
                f"{vehicle.name:<18} "
                f"{vehicle.laps:<5} "
                f"{vehicle.speed:<8.1f} "
                f"{vehicle.energy_level * 100:<6.1f}% "
                f"{vehicle.tire_wear * 100:<6.1f}% "
                f"{_format_lap(vehicle.best_lap):<11} "
                f"{net_moves:<+5d} "
                f"{'IN' if vehicle.in_pit else '':<3}"
            )

        weather = snapshot.weather
        print("-" * 78)
        print(f"Weather: {weather.type.value} (intensity {weather.intensity:.2f})")
        if snapshot.pending_events:
            print(f"Pending events: {', '.join(e.type for e in snapshot.pending_events)}")
        print("=" * 78)

    @staticmethod
    def print_agent_summary(agents: list[Agent]) -> None:
        """Print decision metrics for each agent.

        Args:
            agents: Agents to summarize
        """
        print("\n" + "=" * 70)
        print("AGENT DECISIONS")
        print("=" * 70)
        print(f"{'Agent':<20} {'Decisions':<10} {'Avg risk':<9} {'Overtakes':<10} {'Pits':<6} {'Boosts':<6}")
        print("-" * 70)

        for agent in agents:
            metrics = agent.metrics()
            print(
                f"{agent.name:<20} "
                f"{metrics.total_decisions:<10} "
                f"{metrics.average_risk_level:<9.2f} "
                f"{metrics.overtake_attempts:<10} "
                f"{metrics.pit_decisions:<6} "
                f"{metrics.boost_activations:<6}"
            )

        print("=" * 70)
