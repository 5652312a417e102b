from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Collection, Iterator, Optional, Protocol

import numpy as np
import structlog

from .vector_math import UNIT_Y, Vector, magnitude, to_vector

STEP_ROUNDING = 1e-9


@dataclass(slots=True)
class SimulationConfig:
    speed: float = 153.0
    gravity: float = 227.0
    time_step: float = 1.0 / 240.0
    max_time: float = 5.0  # horizon, seconds

    def __post_init__(self) -> None:
        for name in ("time_step", "max_time"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be positive and finite, got {value!r}")

    @property
    def step_count(self) -> int:
        """Whole steps needed to cover the horizon, tolerant of rounding in the ratio."""
        return max(1, math.ceil(self.max_time / self.time_step - STEP_ROUNDING))


@dataclass(slots=True)
class LaunchState:
    position: Vector
    velocity: Vector


@dataclass(frozen=True, slots=True)
class RayHit:
    position: Vector
    obj: Any = None


@dataclass(frozen=True, slots=True)
class PredictionResult:
    point: Vector
    hit: bool
    hit_object: Any = None
    elapsed: float = 0.0


class RayCaster(Protocol):
    def __call__(
        self,
        origin: Vector,
        direction: Vector,
        max_distance: float,
        exclude: Collection[Any],
    ) -> Optional[RayHit]:
        ...


def launch(origin: Vector, direction: Vector, speed: float) -> LaunchState:
    """Initial state for a shot fired along ``direction``, which must be unit length."""
    return LaunchState(
        position=to_vector(origin),
        velocity=to_vector(direction) * speed,
    )


def step(state: LaunchState, config: SimulationConfig) -> LaunchState:
    """Advance one fixed step under constant gravity.

    Position uses the exact constant-acceleration displacement for the step,
    so the committed points lie on the analytic parabola.
    """
    dt = config.time_step
    g = config.gravity
    return LaunchState(
        position=state.position + state.velocity * dt - UNIT_Y * (0.5 * g * dt * dt),
        velocity=state.velocity - UNIT_Y * (g * dt),
    )


class TrajectoryIntegrator:
    """Steps a ballistic arc and reports the first segment that hits the scene."""

    def __init__(self, config: Optional[SimulationConfig] = None) -> None:
        self.config = config if config is not None else SimulationConfig()
        self.logger = structlog.get_logger(__name__)

    def trace(self, origin: Vector, direction: Vector) -> Iterator[tuple[float, LaunchState]]:
        """Yield ``(elapsed, state)`` for the launch and every step up to the horizon.

        No collision testing is done; useful for drawing the arc.
        """
        state = launch(origin, direction, self.config.speed)
        yield 0.0, state
        for index in range(1, self.config.step_count + 1):
            state = step(state, self.config)
            yield index * self.config.time_step, state

    def predict(
        self,
        origin: Vector,
        direction: Vector,
        exclude: Collection[Any],
        cast_ray: RayCaster,
    ) -> PredictionResult:
        """Find where a shot fired from ``origin`` along unit ``direction`` lands.

        Each step casts a ray over the segment between consecutive positions.
        The first reported hit ends the simulation and its point is returned
        as-is. When ``max_time`` runs out first the result has ``hit=False``
        and carries the last simulated position.

        Exceptions raised by ``cast_ray`` propagate to the caller.
        """
        config = self.config
        state = launch(origin, direction, config.speed)
        for steps in range(config.step_count):
            elapsed = steps * config.time_step
            following = step(state, config)
            segment = following.position - state.position
            length = magnitude(segment)
            heading = segment / length if length > 0 else np.zeros(3, dtype=np.float64)

            hit = cast_ray(state.position, heading, length, exclude)
            if hit is not None:
                self.logger.debug(
                    "Prediction finished",
                    hit=True,
                    steps=steps,
                    elapsed=round(elapsed, 4),
                )
                return PredictionResult(
                    point=to_vector(hit.position),
                    hit=True,
                    hit_object=hit.obj,
                    elapsed=elapsed,
                )

            state = following

        steps = config.step_count
        elapsed = steps * config.time_step
        self.logger.debug("Prediction finished", hit=False, steps=steps, elapsed=round(elapsed, 4))
        return PredictionResult(point=state.position, hit=False, elapsed=elapsed)


def predict(
    origin: Vector,
    direction: Vector,
    config: SimulationConfig,
    exclude: Collection[Any],
    cast_ray: RayCaster,
) -> PredictionResult:
    return TrajectoryIntegrator(config).predict(origin, direction, exclude, cast_ray)
