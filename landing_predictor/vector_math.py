"""Lightweight vector helpers for ballistic prediction."""
from __future__ import annotations

from typing import Iterable

import numpy as np

Vector = np.ndarray

UNIT_Y = np.array([0.0, 1.0, 0.0], dtype=np.float64)


def to_vector(value: Iterable[float] | Vector) -> Vector:
    """Convert any iterable to a float64 numpy vector."""
    return np.asarray(list(value), dtype=np.float64)


def magnitude(vec: Vector) -> float:
    return float(np.linalg.norm(vec))


def normalize(vec: Vector) -> Vector:
    norm = magnitude(vec)
    if norm == 0:
        raise ValueError("Cannot normalize the zero vector")
    return vec / norm


def distance(a: Vector, b: Vector) -> float:
    return magnitude(np.subtract(a, b))
