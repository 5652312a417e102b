from __future__ import annotations

import numpy as np

from landing_predictor.targets import Target, first_target_within, is_near_any_target


def head(x: float, y: float, z: float, radius: float = 1.0, name: str = "head") -> Target:
    return Target(reference_point=np.array([x, y, z]), reference_radius=radius, name=name)


def test_point_at_reference_is_near():
    assert is_near_any_target(np.array([3.0, 4.0, 5.0]), [head(3.0, 4.0, 5.0)])


def test_point_beyond_radius_and_leeway_is_not_near():
    target = head(0.0, 0.0, 0.0, radius=1.0)
    assert not is_near_any_target(np.array([0.0, 1.2 + 1e-6, 0.0]), [target])
    assert not is_near_any_target(np.array([5.0, 0.0, 0.0]), [target])


def test_leeway_extends_radius():
    target = head(0.0, 0.0, 0.0, radius=1.0)
    assert is_near_any_target(np.array([1.15, 0.0, 0.0]), [target])
    assert not is_near_any_target(np.array([1.15, 0.0, 0.0]), [target], epsilon=0.0)


def test_no_targets_is_never_near():
    assert not is_near_any_target(np.zeros(3), [])
    assert first_target_within(np.zeros(3), iter(())) is None


def test_result_does_not_depend_on_order():
    near = head(0.0, 0.0, 0.0, name="near")
    far = head(100.0, 0.0, 0.0, name="far")
    point = np.array([0.5, 0.0, 0.0])

    assert is_near_any_target(point, [near, far])
    assert is_near_any_target(point, [far, near])


def test_first_target_within_returns_first_match():
    first = head(0.0, 0.0, 0.0, radius=2.0, name="first")
    second = head(0.5, 0.0, 0.0, radius=2.0, name="second")

    assert first_target_within(np.zeros(3), [first, second]) is first
    assert first_target_within(np.zeros(3), [second, first]) is second


def test_reference_point_accepts_sequences():
    target = Target(reference_point=[1, 2, 3], reference_radius=0.5)
    assert target.reference_point.dtype == np.float64
    assert is_near_any_target(np.array([1.0, 2.0, 3.5]), [target])
