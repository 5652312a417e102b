"""In-memory scene geometry that answers ray casts."""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Collection, Iterable, Optional

import numpy as np
import structlog

from .simulation import RayHit
from .vector_math import Vector, normalize, to_vector

PARALLEL_EPSILON = 1e-12


class SceneObject(ABC):
    name: str

    @abstractmethod
    def intersect(self, origin: Vector, direction: Vector) -> Optional[float]:
        """Smallest ray parameter ``t >= 0`` where the ray meets the object, or None.

        A ray starting inside a solid object reports ``t = 0``.
        """


@dataclass(eq=False)
class Plane(SceneObject):
    point: Vector
    normal: Vector
    name: str = "plane"

    def __post_init__(self) -> None:
        self.point = to_vector(self.point)
        self.normal = normalize(to_vector(self.normal))

    def intersect(self, origin: Vector, direction: Vector) -> Optional[float]:
        denom = float(np.dot(self.normal, direction))
        if abs(denom) < PARALLEL_EPSILON:
            return None
        t = float(np.dot(self.normal, self.point - origin)) / denom
        if t < 0:
            return None
        return t


@dataclass(eq=False)
class Sphere(SceneObject):
    center: Vector
    radius: float
    name: str = "sphere"

    def __post_init__(self) -> None:
        self.center = to_vector(self.center)

    def intersect(self, origin: Vector, direction: Vector) -> Optional[float]:
        offset = origin - self.center
        a = float(np.dot(direction, direction))
        if a == 0:
            return None
        b = 2.0 * float(np.dot(offset, direction))
        c = float(np.dot(offset, offset)) - self.radius**2
        disc = b * b - 4 * a * c
        if disc < 0:
            return None
        root = math.sqrt(disc)
        near = (-b - root) / (2 * a)
        far = (-b + root) / (2 * a)
        if far < 0:
            return None
        return max(near, 0.0)


@dataclass(eq=False)
class Box(SceneObject):
    """Axis-aligned box."""

    minimum: Vector
    maximum: Vector
    name: str = "box"

    def __post_init__(self) -> None:
        self.minimum = to_vector(self.minimum)
        self.maximum = to_vector(self.maximum)

    def intersect(self, origin: Vector, direction: Vector) -> Optional[float]:
        t_near = -math.inf
        t_far = math.inf
        for axis in range(3):
            o = origin[axis]
            d = direction[axis]
            lo = self.minimum[axis]
            hi = self.maximum[axis]
            if abs(d) < PARALLEL_EPSILON:
                if o < lo or o > hi:
                    return None
                continue
            t1 = (lo - o) / d
            t2 = (hi - o) / d
            if t1 > t2:
                t1, t2 = t2, t1
            t_near = max(t_near, t1)
            t_far = min(t_far, t2)
            if t_near > t_far:
                return None
        if t_far < 0:
            return None
        return float(max(t_near, 0.0))


class Scene:
    """A flat collection of scene objects, usable directly as a ray caster."""

    def __init__(self, objects: Iterable[SceneObject] = ()) -> None:
        self.objects: list[SceneObject] = list(objects)
        self.logger = structlog.get_logger(__name__)

    def add(self, obj: SceneObject) -> SceneObject:
        self.objects.append(obj)
        self.logger.debug("Scene object added", name=obj.name, count=len(self.objects))
        return obj

    def remove(self, obj: SceneObject) -> None:
        self.objects.remove(obj)
        self.logger.debug("Scene object removed", name=obj.name, count=len(self.objects))

    def cast_ray(
        self,
        origin: Vector,
        direction: Vector,
        max_distance: float,
        exclude: Collection[Any] = (),
    ) -> Optional[RayHit]:
        """Nearest hit within ``max_distance`` along unit ``direction``.

        Objects in ``exclude`` are transparent. A zero distance never hits.
        """
        if max_distance <= 0:
            return None
        origin = to_vector(origin)
        direction = to_vector(direction)

        best_t: Optional[float] = None
        best_obj: Optional[SceneObject] = None
        for obj in self.objects:
            if obj in exclude:
                continue
            t = obj.intersect(origin, direction)
            if t is None or t > max_distance:
                continue
            if best_t is None or t < best_t:
                best_t = t
                best_obj = obj

        if best_obj is None:
            return None
        return RayHit(position=origin + direction * best_t, obj=best_obj)

    __call__ = cast_ray
