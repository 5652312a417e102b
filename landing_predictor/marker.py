from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

import numpy as np
import structlog

from .simulation import PredictionResult, RayCaster, SimulationConfig, TrajectoryIntegrator
from .targets import DEFAULT_EPSILON, Target, first_target_within
from .ticks import Connection, TickSource
from .vector_math import Vector, distance, magnitude, to_vector

RaySource = Callable[[], tuple[Vector, Vector]]
TargetRegistry = Callable[[], Iterable[Target]]


@dataclass(slots=True)
class MarkerConfig:
    epsilon: float = DEFAULT_EPSILON
    unit: str = "m"


@dataclass(slots=True)
class MarkerState:
    """What the presentation layer needs to draw the marker and its label."""

    attached: bool = False
    position: Vector = field(default_factory=lambda: np.zeros(3))
    hit: bool = False
    on_target: bool = False
    target_name: str = ""
    label: str = ""


class LandingMarker:
    """Keeps a landing marker in sync with a predicted impact point while enabled.

    The marker owns its toggle state and tick subscription, so any number of
    markers can run side by side. Disabling detaches the marker but keeps its
    last state for a cheap ``enable()``.

    ``marker_object`` is the scene object that draws the marker, if the scene
    has one; it is added to the exclusion set so casts pass through it.
    """

    def __init__(
        self,
        ticks: TickSource,
        ray_source: RaySource,
        cast_ray: RayCaster,
        targets: TargetRegistry = tuple,
        exclude: Iterable[Any] = (),
        simulation: Optional[SimulationConfig] = None,
        config: Optional[MarkerConfig] = None,
        marker_object: Any = None,
    ) -> None:
        self.ticks = ticks
        self.ray_source = ray_source
        self.cast_ray = cast_ray
        self.targets = targets
        self.integrator = TrajectoryIntegrator(simulation)
        self.config = config if config is not None else MarkerConfig()
        self.state = MarkerState()
        self.exclude: set[Any] = set(exclude)
        self.marker_object = marker_object
        if marker_object is not None:
            self.exclude.add(marker_object)
        self.last_result: Optional[PredictionResult] = None
        self._connection: Optional[Connection] = None
        self.logger = structlog.get_logger(__name__)

    @property
    def enabled(self) -> bool:
        return self._connection is not None

    def enable(self) -> None:
        if self.enabled:
            return
        self._connection = self.ticks.connect(self._on_tick)
        self.state.attached = True
        self.logger.info("Landing marker enabled")

    def disable(self) -> None:
        if not self.enabled:
            return
        self._connection.disconnect()
        self._connection = None
        self.state.attached = False
        self.logger.info("Landing marker disabled")

    def toggle(self) -> bool:
        if self.enabled:
            self.disable()
        else:
            self.enable()
        return self.enabled

    def _on_tick(self, dt: float) -> None:
        self.update()

    def update(self) -> Optional[PredictionResult]:
        """Predict from the current ray and refresh the marker state.

        Returns None and leaves the marker untouched when the ray has no
        direction.
        """
        origin, direction = self.ray_source()
        origin = to_vector(origin)
        direction = to_vector(direction)
        length = magnitude(direction)
        if length == 0:
            self.logger.debug("Skipping update for zero-length aim direction")
            return None

        result = self.integrator.predict(origin, direction / length, self.exclude, self.cast_ray)
        target = first_target_within(result.point, self.targets(), self.config.epsilon)

        self.state.position = result.point
        self.state.hit = result.hit
        self.state.on_target = target is not None
        self.state.target_name = target.name if target is not None else ""
        if target is not None:
            self.state.label = (target.name or "target").upper()
        else:
            self.state.label = f"{distance(result.point, origin):.1f} {self.config.unit}"
        self.last_result = result
        return result
