"""Ballistic landing-point prediction with a toggleable marker."""

from .marker import LandingMarker, MarkerConfig, MarkerState
from .scene import Box, Plane, Scene, SceneObject, Sphere
from .simulation import (
    LaunchState,
    PredictionResult,
    RayCaster,
    RayHit,
    SimulationConfig,
    TrajectoryIntegrator,
    predict,
)
from .targets import Target, first_target_within, is_near_any_target
from .ticks import Connection, TickSignal

__all__ = [
    "Box",
    "Connection",
    "LandingMarker",
    "LaunchState",
    "MarkerConfig",
    "MarkerState",
    "Plane",
    "PredictionResult",
    "RayCaster",
    "RayHit",
    "Scene",
    "SceneObject",
    "SimulationConfig",
    "Sphere",
    "Target",
    "TickSignal",
    "TrajectoryIntegrator",
    "first_target_within",
    "is_near_any_target",
    "predict",
]
