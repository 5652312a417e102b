from __future__ import annotations

import numpy as np
import pytest

from landing_predictor.scene import Box, Plane, Scene, Sphere

DOWN = np.array([0.0, -1.0, 0.0])
FORWARD = np.array([0.0, 0.0, 1.0])


def test_plane_hit_position():
    ground = Plane(point=(0.0, 0.0, 0.0), normal=(0.0, 2.0, 0.0), name="ground")
    scene = Scene([ground])

    hit = scene.cast_ray(np.array([3.0, 5.0, -1.0]), DOWN, 10.0)

    assert hit is not None
    assert hit.obj is ground
    np.testing.assert_allclose(hit.position, [3.0, 0.0, -1.0])


def test_parallel_and_backward_rays_miss_plane():
    scene = Scene([Plane(point=(0.0, 0.0, 0.0), normal=(0.0, 1.0, 0.0))])

    assert scene.cast_ray(np.array([0.0, 5.0, 0.0]), FORWARD, 100.0) is None
    assert scene.cast_ray(np.array([0.0, 5.0, 0.0]), -DOWN, 100.0) is None


def test_hit_beyond_max_distance_is_ignored():
    scene = Scene([Plane(point=(0.0, 0.0, 0.0), normal=(0.0, 1.0, 0.0))])

    assert scene.cast_ray(np.array([0.0, 5.0, 0.0]), DOWN, 4.9) is None
    assert scene.cast_ray(np.array([0.0, 5.0, 0.0]), DOWN, 5.0) is not None


def test_zero_distance_never_hits():
    scene = Scene([Box(minimum=(-1, -1, -1), maximum=(1, 1, 1))])

    assert scene.cast_ray(np.zeros(3), FORWARD, 0.0) is None
    assert scene.cast_ray(np.zeros(3), np.zeros(3), 0.0) is None


def test_nearest_object_wins():
    near = Box(minimum=(-1, -1, 4), maximum=(1, 1, 5), name="near")
    far = Box(minimum=(-1, -1, 9), maximum=(1, 1, 10), name="far")
    scene = Scene([far, near])

    hit = scene.cast_ray(np.zeros(3), FORWARD, 50.0)

    assert hit.obj is near
    np.testing.assert_allclose(hit.position, [0.0, 0.0, 4.0])


def test_excluded_objects_are_transparent():
    body = Box(minimum=(-1, -1, 1), maximum=(1, 1, 2), name="body")
    wall = Plane(point=(0.0, 0.0, 6.0), normal=(0.0, 0.0, -1.0), name="wall")
    scene = Scene([body, wall])

    hit = scene.cast_ray(np.zeros(3), FORWARD, 50.0, exclude={body})

    assert hit.obj is wall
    assert hit.position[2] == pytest.approx(6.0)


def test_sphere_hit_on_near_surface():
    head = Sphere(center=(0.0, 0.0, 10.0), radius=2.0, name="head")
    scene = Scene([head])

    hit = scene.cast_ray(np.zeros(3), FORWARD, 50.0)

    assert hit.obj is head
    np.testing.assert_allclose(hit.position, [0.0, 0.0, 8.0])
    assert scene.cast_ray(np.array([0.0, 3.0, 0.0]), FORWARD, 50.0) is None


def test_ray_starting_inside_solid_hits_at_origin():
    scene = Scene([Sphere(center=(0.0, 0.0, 0.0), radius=1.0)])

    hit = scene.cast_ray(np.array([0.2, 0.0, 0.0]), FORWARD, 5.0)

    np.testing.assert_allclose(hit.position, [0.2, 0.0, 0.0])


def test_box_slab_miss():
    scene = Scene([Box(minimum=(2, 2, 2), maximum=(3, 3, 3))])

    assert scene.cast_ray(np.zeros(3), FORWARD, 50.0) is None


def test_scene_is_callable_and_mutable():
    scene = Scene()
    crate = scene.add(Box(minimum=(-1, -1, 2), maximum=(1, 1, 3), name="crate"))

    assert scene(np.zeros(3), FORWARD, 10.0, ()).obj is crate
    scene.remove(crate)
    assert scene(np.zeros(3), FORWARD, 10.0, ()) is None
