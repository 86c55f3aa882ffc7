"""Race orchestrator: fixed-timestep loop, race bookkeeping and control surface."""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

import numpy as np

from agentrace.agents import Agent
from agentrace.models import (
    OvertakeIntent,
    PitIntent,
    StrategyDecision,
    TrackSegment,
    Vehicle,
    VehicleConfig,
    Weather,
    track_length,
)
from agentrace.simulation.config import SimulationConfig
from agentrace.simulation.events import EventManager, EventType, SimulationEvent
from agentrace.simulation.physics import apply_physics
from agentrace.simulation.snapshot import EventSummary, SimulationSnapshot, VehicleSnapshot
from agentrace.strategy import (
    DecisionContext,
    Hazard,
    HeuristicPolicy,
    NeighborInfo,
    RaceProgress,
    Surroundings,
)

logger = logging.getLogger(__name__)

MAX_AHEAD = 3
MAX_BEHIND = 3
MAX_NEARBY = 5

# Obstacle impact
OBSTACLE_SPEED_FACTOR = 0.3
OBSTACLE_TIRE_DAMAGE = 0.05

AgentFactory = Callable[[Vehicle], Agent]
StateCallback = Callable[[SimulationSnapshot], None]


class RaceStatus(str, Enum):
    """Orchestrator state."""

    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True)
class TrackPosition:
    """Where a vehicle stood at the start of a tick."""

    vehicle_id: int
    race_distance: float  # meters since the start, laps included
    speed: float
    laps: int
    in_pit: bool


def default_agent(vehicle: Vehicle) -> Agent:
    """Agent driven by the heuristic policy."""
    return Agent(vehicle, HeuristicPolicy())


class RaceOrchestrator:
    """Runs a race of agent-driven vehicles over a segmented track.

    ``tick`` advances the race by one fixed step and can be called directly.
    ``advance_frame`` and ``run`` drive it from wall-clock time: elapsed real
    time, scaled by the speed multiplier, fills an accumulator that is drained
    one fixed step at a time, so per-tick numerics never depend on frame rate.
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        rng: np.random.Generator | None = None,
        agent_factory: AgentFactory | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        """Initialize the orchestrator.

        Args:
            config: Race settings
            rng: Random number generator for stochastic events and weather
            agent_factory: Builds the agent for each vehicle
            clock: Monotonic wall clock in seconds
        """
        self.config = config or SimulationConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.agent_factory = agent_factory or default_agent
        self.clock = clock
        self.event_manager = EventManager()

        self._track: list[TrackSegment] = []
        self._segment_offsets: list[float] = []
        self._lap_length = 0.0
        self._vehicles: list[Vehicle] = []
        self._agents: list[Agent] = []
        self._weather = self.config.weather_profile.initial_weather
        self._status = RaceStatus.STOPPED
        self._elapsed = 0.0
        self._accumulator = 0.0
        self._last_frame_time: float | None = None
        self._speed_multiplier = self.config.speed_multiplier
        self._callback: StateCallback | None = None
        self._decisions: dict[int, StrategyDecision] = {}
        self._obstacle_hits: dict[int, set[int]] = {}

        self.event_manager.subscribe(EventType.BREAKDOWN, self._on_breakdown)
        self.event_manager.subscribe(EventType.COLLISION, self._on_collision)
        self.event_manager.subscribe(EventType.OBSTACLE_APPEAR, self._on_obstacle_appear)
        self.event_manager.subscribe(EventType.BATTERY_LOW, self._on_battery_low)
        self.event_manager.subscribe(EventType.WEATHER_CHANGE, self._on_weather_change)

    def initialize(self, roster: Sequence[VehicleConfig], track: Sequence[TrackSegment]) -> None:
        """Build vehicles and agents and put them on the grid.

        Can be called again to start over with a new roster or track.

        Args:
            roster: One config per vehicle, in grid order
            track: Ordered track segments

        Raises:
            ValueError: If two vehicles share an id
        """
        ids = [config.id for config in roster]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate vehicle ids in roster: {ids}")

        self._status = RaceStatus.STOPPED
        self._track = [segment.model_copy(deep=True) for segment in track]
        self._lap_length = track_length(self._track)
        self._segment_offsets = []
        offset = 0.0
        for segment in self._track:
            self._segment_offsets.append(offset)
            offset += segment.length

        self._vehicles = [Vehicle.from_config(config) for config in roster]
        self._agents = [self.agent_factory(vehicle) for vehicle in self._vehicles]

        self._restart()
        logger.info(
            "Initialized race with %d vehicles on a %d-segment track (%.0fm)",
            len(self._vehicles), len(self._track), self._lap_length,
        )

    def set_state_callback(self, callback: StateCallback | None) -> None:
        """Register the consumer of snapshots (replaces any previous one)."""
        self._callback = callback

    def start(self) -> None:
        """Start the race if it is stopped and has vehicles and a track."""
        if self._status != RaceStatus.STOPPED:
            return
        if not self._vehicles or not self._track:
            logger.warning("Cannot start: %d vehicles, %d track segments", len(self._vehicles), len(self._track))
            return

        self._status = RaceStatus.RUNNING
        self._last_frame_time = self.clock()
        logger.info("Race started")

    def pause(self) -> None:
        if self._status == RaceStatus.RUNNING:
            self._status = RaceStatus.PAUSED
            logger.info("Race paused at %.2fs", self._elapsed)

    def resume(self) -> None:
        if self._status == RaceStatus.PAUSED:
            self._status = RaceStatus.RUNNING
            # Time spent paused does not count
            self._last_frame_time = self.clock()
            logger.info("Race resumed at %.2fs", self._elapsed)

    def stop(self) -> None:
        """Halt the loop. A finished race stays finished."""
        if self._status != RaceStatus.FINISHED:
            self._status = RaceStatus.STOPPED
        self._last_frame_time = None
        self._accumulator = 0.0

    def reset(self) -> None:
        """Stop and put every vehicle back on the grid, then emit one snapshot."""
        self._status = RaceStatus.STOPPED
        for agent in self._agents:
            agent.reset()
        for segment in self._track:
            segment.obstacle = None
        self._restart()
        logger.info("Race reset")
        self._emit_snapshot()

    def set_speed_multiplier(self, value: float) -> None:
        """Set simulated seconds per wall-clock second, clamped to [0.1, 10]."""
        self._speed_multiplier = max(0.1, min(10.0, value))

    def _restart(self) -> None:
        self.event_manager.reset()
        self._elapsed = 0.0
        self._accumulator = 0.0
        self._last_frame_time = None
        self._weather = self.config.weather_profile.initial_weather
        self._decisions = {}
        self._obstacle_hits = {}
        for index, vehicle in enumerate(self._vehicles):
            vehicle.reset_race_state()
            self._place_on_grid(vehicle, index)

    def _place_on_grid(self, vehicle: Vehicle, index: int) -> None:
        if not self._track:
            return
        offset = index * self.config.start_stagger * self._track[0].length
        segment_index, progress = self._locate(offset)
        vehicle.current_segment = segment_index
        vehicle.segment_progress = progress
        self._update_pose(vehicle)

    def _locate(self, offset: float) -> tuple[int, float]:
        """Segment index and progress for a distance into the lap."""
        offset %= self._lap_length
        for index, segment in enumerate(self._track):
            if offset < segment.length:
                return index, offset / segment.length
            offset -= segment.length
        return 0, 0.0

    def advance_frame(self, now: float | None = None) -> int:
        """Run as many fixed ticks as the wall time since the last frame allows.

        Args:
            now: Current clock reading (read from the clock when omitted)

        Returns:
            Number of ticks executed
        """
        if self._status != RaceStatus.RUNNING:
            return 0

        now = self.clock() if now is None else now
        if self._last_frame_time is None:
            self._last_frame_time = now
        delta = max(0.0, now - self._last_frame_time)
        self._last_frame_time = now
        self._accumulator += delta * self._speed_multiplier

        dt = self.config.fixed_timestep
        ticks = 0
        while self._accumulator >= dt and self._status == RaceStatus.RUNNING:
            self.tick(dt)
            self._accumulator -= dt
            ticks += 1

        if self._status == RaceStatus.FINISHED:
            self._accumulator = 0.0
        return ticks

    def run(self, frame_interval: float = 1 / 60, max_frames: int | None = None) -> int:
        """Drive the race in real time until it stops or finishes.

        Starts the race first if it is stopped. Blocks the calling thread.

        Args:
            frame_interval: Seconds to sleep between frames
            max_frames: Optional frame limit

        Returns:
            Number of frames run
        """
        self.start()
        frames = 0
        while self._status in (RaceStatus.RUNNING, RaceStatus.PAUSED):
            if max_frames is not None and frames >= max_frames:
                break
            self.advance_frame()
            frames += 1
            time.sleep(frame_interval)
        return frames

    def tick(self, dt: float | None = None) -> None:
        """Advance the race by one step.

        Does nothing once the race is finished or before a roster and track
        exist.

        Args:
            dt: Step length in seconds (defaults to the fixed timestep)
        """
        if self._status == RaceStatus.FINISHED or not self._vehicles or not self._track:
            return
        dt = self.config.fixed_timestep if dt is None else dt

        self._elapsed += dt
        self.event_manager.advance_to(self._elapsed)
        self.event_manager.process()

        self._update_weather(dt)
        self._inject_random_events(dt)

        frame = self._capture_frame()
        obstacles = {i: s.obstacle for i, s in enumerate(self._track) if s.obstacle}

        for agent in self._agents:
            vehicle = agent.vehicle
            if vehicle.in_pit:
                self._update_pit_stop(vehicle, dt)
                continue
            context = self._decision_context(vehicle, frame, obstacles)
            try:
                decision = agent.decide(context)
            except Exception:
                logger.exception("Decision failed for vehicle %d, using safe default", vehicle.id)
                decision = StrategyDecision.safe_default()
            self._decisions[vehicle.id] = decision
            self._update_vehicle(agent, decision, context, dt)

        self._update_race_positions(frame)
        self._check_completion()
        self._emit_snapshot()

    def _update_weather(self, dt: float) -> None:
        probability = self.config.weather_profile.change_probability * dt / 60
        new_weather = self._weather.change(self.rng, probability)
        if new_weather is not None:
            self._weather = new_weather
            self.event_manager.emit_weather_change(new_weather.model_dump(mode="json"))

    def _inject_random_events(self, dt: float) -> None:
        probabilities = self.config.event_probabilities
        scale = dt / 60

        for vehicle in self._vehicles:
            if (
                vehicle.energy.level < self.config.battery_low_threshold
                and self.rng.random() < probabilities.battery_low * scale
            ):
                self.event_manager.emit_battery_low(vehicle.id, vehicle.energy.level)

            if self.rng.random() < probabilities.breakdown * scale:
                self.event_manager.emit_breakdown(vehicle.id, float(self.rng.random()))

        if self.rng.random() < probabilities.obstacle_appear * scale:
            segment_index = int(self.rng.integers(len(self._track)))
            types = self.config.obstacle_types
            obstacle_type = types[int(self.rng.integers(len(types)))]
            self.event_manager.emit_obstacle_appear(segment_index, obstacle_type)

        for i, first in enumerate(self._vehicles):
            for second in self._vehicles[i + 1:]:
                if first.in_pit or second.in_pit:
                    continue
                gap = abs(self._race_distance(first) - self._race_distance(second))
                if gap < self.config.collision_distance and self.rng.random() < probabilities.collision * scale:
                    self.event_manager.emit_collision(first.id, second.id, float(self.rng.random()))

    def _capture_frame(self) -> list[TrackPosition]:
        return [
            TrackPosition(
                vehicle_id=vehicle.id,
                race_distance=self._race_distance(vehicle),
                speed=vehicle.speed,
                laps=vehicle.laps,
                in_pit=vehicle.in_pit,
            )
            for vehicle in self._vehicles
        ]

    def _race_distance(self, vehicle: Vehicle) -> float:
        segment = self._track[vehicle.current_segment]
        return (
            vehicle.laps * self._lap_length
            + self._segment_offsets[vehicle.current_segment]
            + vehicle.segment_progress * segment.length
        )

    @staticmethod
    def _race_order(frame: Sequence[TrackPosition]) -> list[int]:
        """Vehicle ids from first to last place (ties keep grid order)."""
        ranked = sorted(enumerate(frame), key=lambda item: (-item[1].race_distance, item[0]))
        return [position.vehicle_id for _, position in ranked]

    def _surroundings(self, vehicle_id: int, frame: Sequence[TrackPosition]) -> Surroundings:
        me = next(position for position in frame if position.vehicle_id == vehicle_id)
        ahead: list[NeighborInfo] = []
        behind: list[NeighborInfo] = []
        nearby: list[NeighborInfo] = []

        for other in frame:
            if other.vehicle_id == vehicle_id or other.in_pit:
                continue
            delta = other.race_distance - me.race_distance
            info = NeighborInfo(vehicle_id=other.vehicle_id, speed=other.speed, gap=abs(delta), laps=other.laps)
            if delta > 0:
                ahead.append(info)
            else:
                behind.append(info)
            if abs(delta) < self.config.nearby_distance:
                nearby.append(info)

        def by_gap(info: NeighborInfo) -> float:
            return info.gap

        return Surroundings(
            ahead=tuple(sorted(ahead, key=by_gap)[:MAX_AHEAD]),
            behind=tuple(sorted(behind, key=by_gap)[:MAX_BEHIND]),
            nearby=tuple(sorted(nearby, key=by_gap)[:MAX_NEARBY]),
        )

    def _hazards(self, vehicle: Vehicle, obstacles: dict[int, str]) -> tuple[Hazard, ...]:
        count = len(self._track)
        hazards = []
        for segment_index, obstacle_type in obstacles.items():
            distance = (segment_index - vehicle.current_segment) % count
            if distance <= self.config.hazard_lookahead:
                hazards.append(Hazard(type=obstacle_type, segment_index=segment_index, distance=distance))
        return tuple(sorted(hazards, key=lambda hazard: hazard.distance))

    def _decision_context(
        self,
        vehicle: Vehicle,
        frame: Sequence[TrackPosition],
        obstacles: dict[int, str],
    ) -> DecisionContext:
        segment = self._track[vehicle.current_segment]
        return DecisionContext(
            vehicle=vehicle,
            segment=segment,
            weather=self._weather,
            progress=RaceProgress(
                current_lap=vehicle.laps,
                total_laps=self.config.total_laps,
                elapsed_time=self._elapsed,
            ),
            surroundings=self._surroundings(vehicle.id, frame),
            hazards=self._hazards(vehicle, obstacles),
        )

    def _update_vehicle(self, agent: Agent, decision: StrategyDecision, context: DecisionContext, dt: float) -> None:
        vehicle = agent.vehicle
        segment = context.segment
        result = apply_physics(vehicle, segment, self._weather, dt, decision.throttle, decision.braking)
        vehicle.speed = result.speed
        vehicle.acceleration = result.acceleration

        self._check_obstacle(vehicle, segment)

        traveled = vehicle.speed * dt / 3.6
        vehicle.debit_energy(result.battery_drain * traveled * agent.consumption_multiplier)
        if result.regen_braking > 0:
            vehicle.credit_energy(result.regen_braking * traveled)
        vehicle.accrue_tire_wear(traveled, decision.throttle, decision.steering, agent.wear_multiplier)

        self._advance_along_track(vehicle, traveled)
        self._apply_decision(vehicle, decision, context.surroundings)

    def _check_obstacle(self, vehicle: Vehicle, segment: TrackSegment) -> None:
        vehicle.obstacle_hit = False
        if segment.obstacle is None:
            return

        if self.config.obstacles_single_use:
            obstacle, segment.obstacle = segment.obstacle, None
        else:
            hit_by = self._obstacle_hits.setdefault(vehicle.current_segment, set())
            if vehicle.id in hit_by:
                return
            hit_by.add(vehicle.id)
            obstacle = segment.obstacle

        vehicle.speed *= OBSTACLE_SPEED_FACTOR
        vehicle.add_tire_damage(OBSTACLE_TIRE_DAMAGE)
        vehicle.hazards_triggered += 1
        vehicle.obstacle_hit = True
        logger.debug("Vehicle %d hit %s on segment %d", vehicle.id, obstacle, vehicle.current_segment)

    def _advance_along_track(self, vehicle: Vehicle, distance: float) -> None:
        vehicle.distance += distance
        segment = self._track[vehicle.current_segment]
        vehicle.segment_progress += distance / segment.length

        while vehicle.segment_progress >= 1.0:
            overflow = (vehicle.segment_progress - 1.0) * segment.length
            vehicle.current_segment = (vehicle.current_segment + 1) % len(self._track)
            if vehicle.current_segment == 0:
                vehicle.laps += 1
                vehicle.lap_times.append(self._elapsed - vehicle.lap_start_time)
                vehicle.lap_start_time = self._elapsed
                logger.debug("Vehicle %d completed lap %d", vehicle.id, vehicle.laps)
            segment = self._track[vehicle.current_segment]
            vehicle.segment_progress = overflow / segment.length

        self._update_pose(vehicle)

    def _update_pose(self, vehicle: Vehicle) -> None:
        segment = self._track[vehicle.current_segment]
        point = segment.point_at(vehicle.segment_progress)
        if point is not None:
            vehicle.position = point
            vehicle.heading = segment.direction

    def _apply_decision(self, vehicle: Vehicle, decision: StrategyDecision, surroundings: Surroundings) -> None:
        if decision.boost:
            vehicle.speed = min(vehicle.max_speed, vehicle.speed * self.config.boost_multiplier)

        if decision.overtaking == OvertakeIntent.ATTEMPT:
            vehicle.speed = min(vehicle.max_speed, vehicle.speed * self.config.overtake_multiplier)
            defender = surroundings.ahead[0].vehicle_id if surroundings.ahead else None
            self.event_manager.emit_overtake_attempt(vehicle.id, defender)

        pit, reason = decision.pit, "scheduled"
        if not vehicle.is_raceable():
            pit, reason = PitIntent.IMMEDIATE, "unraceable"

        if (
            pit == PitIntent.IMMEDIATE
            and not vehicle.in_pit
            and vehicle.current_segment == self.config.pit_entry_segment
        ):
            vehicle.enter_pit(self.config.pit_duration)
            self.event_manager.emit_pit_stop(vehicle.id, reason)
            logger.info("Vehicle %d entered the pit at %.2fs (%s)", vehicle.id, self._elapsed, reason)

    def _update_pit_stop(self, vehicle: Vehicle, dt: float) -> None:
        vehicle.obstacle_hit = False
        vehicle.pit_time_remaining = max(0.0, vehicle.pit_time_remaining - dt)
        if vehicle.pit_time_remaining <= 0:
            vehicle.complete_pit_stop()
            logger.info("Vehicle %d left the pit at %.2fs", vehicle.id, self._elapsed)

    def _update_race_positions(self, frame_before: Sequence[TrackPosition]) -> None:
        frame_after = self._capture_frame()
        # Passing a car in the pit lane is not an overtake
        racing = {p.vehicle_id for p in frame_before if not p.in_pit}
        racing &= {p.vehicle_id for p in frame_after if not p.in_pit}
        order_before = [vid for vid in self._race_order(frame_before) if vid in racing]
        order_after = [vid for vid in self._race_order(frame_after) if vid in racing]
        before = {vehicle_id: rank for rank, vehicle_id in enumerate(order_before)}
        for rank, vehicle_id in enumerate(order_after):
            change = before[vehicle_id] - rank
            vehicle = self.vehicle(vehicle_id)
            if change > 0:
                vehicle.overtakes += change
            elif change < 0:
                vehicle.positions_lost -= change

    def _check_completion(self) -> None:
        leader = max(self._vehicles, key=lambda vehicle: vehicle.laps)
        if leader.laps >= self.config.total_laps:
            self._status = RaceStatus.FINISHED
            self._last_frame_time = None
            logger.info("Race finished: %s won after %.2fs", leader.name, self._elapsed)

    def _on_breakdown(self, event: SimulationEvent) -> None:
        vehicle = self.vehicle(event.target_vehicle_id)
        if vehicle is None:
            return
        severity = max(0.0, min(1.0, event.payload.get("severity", 0.0)))
        vehicle.speed *= 1 - severity * 0.5
        logger.info("Vehicle %d broke down (severity %.2f)", vehicle.id, severity)

    def _on_collision(self, event: SimulationEvent) -> None:
        severity = max(0.0, min(1.0, event.payload.get("severity", 0.0)))
        for vehicle_id in (event.target_vehicle_id, event.payload.get("other_id")):
            vehicle = self.vehicle(vehicle_id)
            if vehicle is None:
                continue
            vehicle.speed *= 1 - severity * 0.3
            vehicle.add_tire_damage(severity * 0.1)
        logger.info(
            "Collision between vehicles %s and %s (severity %.2f)",
            event.target_vehicle_id, event.payload.get("other_id"), severity,
        )

    def _on_obstacle_appear(self, event: SimulationEvent) -> None:
        segment_index = event.payload.get("segment_index")
        if segment_index is None or not 0 <= segment_index < len(self._track):
            return
        self._track[segment_index].obstacle = event.payload.get("obstacle_type")
        self._obstacle_hits.pop(segment_index, None)
        logger.info("Obstacle %s appeared on segment %d", event.payload.get("obstacle_type"), segment_index)

    def _on_battery_low(self, event: SimulationEvent) -> None:
        logger.debug("Vehicle %s battery low (%.2f)", event.target_vehicle_id, event.payload.get("level", 0.0))

    def _on_weather_change(self, event: SimulationEvent) -> None:
        logger.info("Weather changed to %s (intensity %.2f)", event.payload.get("type"), event.payload.get("intensity", 0.0))

    def snapshot(self) -> SimulationSnapshot:
        """Build an immutable snapshot of the current race state."""
        order = self._race_order(self._capture_frame()) if self._track else [v.id for v in self._vehicles]
        ranks = {vehicle_id: rank for rank, vehicle_id in enumerate(order, 1)}
        return SimulationSnapshot(
            timestamp=time.time(),
            elapsed_time=self._elapsed,
            status=self._status.value,
            vehicles=tuple(VehicleSnapshot.from_vehicle(v, ranks[v.id]) for v in self._vehicles),
            weather=self._weather,
            current_lap=max((v.laps for v in self._vehicles), default=0),
            total_laps=self.config.total_laps,
            pending_events=tuple(EventSummary.from_event(e) for e in self.event_manager.pending()),
        )

    def _emit_snapshot(self) -> None:
        if self._callback is None:
            return
        try:
            self._callback(self.snapshot())
        except Exception:
            logger.exception("State callback failed")

    def standings(self) -> list[Vehicle]:
        """Vehicles from first to last place."""
        if not self._track:
            return list(self._vehicles)
        order = self._race_order(self._capture_frame())
        return [self.vehicle(vehicle_id) for vehicle_id in order]

    def vehicle(self, vehicle_id: int | None) -> Vehicle | None:
        """Look up a vehicle by id."""
        return next((v for v in self._vehicles if v.id == vehicle_id), None)

    def agent(self, vehicle_id: int) -> Agent | None:
        """Look up the agent driving a vehicle."""
        return next((a for a in self._agents if a.vehicle.id == vehicle_id), None)

    def last_decision(self, vehicle_id: int) -> StrategyDecision | None:
        """Decision a vehicle acted on in the latest tick."""
        return self._decisions.get(vehicle_id)

    @property
    def status(self) -> RaceStatus:
        return self._status

    @property
    def elapsed_time(self) -> float:
        return self._elapsed

    @property
    def weather(self) -> Weather:
        return self._weather

    @property
    def speed_multiplier(self) -> float:
        return self._speed_multiplier

    @property
    def vehicles(self) -> list[Vehicle]:
        return list(self._vehicles)

    @property
    def agents(self) -> list[Agent]:
        return list(self._agents)

    @property
    def track(self) -> list[TrackSegment]:
        return list(self._track)
