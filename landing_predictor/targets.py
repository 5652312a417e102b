"""Classify impact points against tracked targets."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .vector_math import Vector, distance, to_vector

DEFAULT_EPSILON = 0.2


@dataclass(slots=True)
class Target:
    reference_point: Vector
    reference_radius: float
    name: str = ""

    def __post_init__(self) -> None:
        self.reference_point = to_vector(self.reference_point)


def first_target_within(
    point: Vector,
    targets: Iterable[Target],
    epsilon: float = DEFAULT_EPSILON,
) -> Optional[Target]:
    """Return the first target whose reference point lies within its radius plus ``epsilon``.

    Targets are checked in the order given. The caller filters out its own
    entry if it should not count.
    """
    for target in targets:
        if distance(point, target.reference_point) <= target.reference_radius + epsilon:
            return target
    return None


def is_near_any_target(
    point: Vector,
    targets: Iterable[Target],
    epsilon: float = DEFAULT_EPSILON,
) -> bool:
    return first_target_within(point, targets, epsilon) is not None
