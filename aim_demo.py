from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace

import numpy as np
import pygame
import structlog

from landing_predictor.marker import LandingMarker, MarkerState
from landing_predictor.scene import Box, Plane, Scene, Sphere
from landing_predictor.simulation import SimulationConfig
from landing_predictor.targets import Target
from landing_predictor.ticks import TickSignal
from landing_predictor.vector_math import UNIT_Y, Vector, normalize

WIDTH, HEIGHT = 1100, 720
BACKGROUND_TOP = np.array([12, 18, 45])
BACKGROUND_BOTTOM = np.array([3, 5, 15])
GRID_COLOR = (40, 90, 130)
PILLAR_COLOR = (60, 180, 200)
BODY_COLOR = (150, 150, 170)
HEAD_COLOR = (255, 120, 200)
ARC_COLOR = (120, 210, 255)
MARKER_COLOR = (255, 220, 140)
MARKER_ON_TARGET_COLOR = (255, 90, 90)
MARKER_MISS_COLOR = (120, 120, 140)

GRID_SIZE = 240
GRID_STEP = 20
FPS_TARGET = 120
GRAVITY_PRESETS = [227.0, 196.2, 98.1, 0.0]
SHOOTER_POSITION = np.array([0.0, 0.0, 0.0], dtype=np.float64)


def clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def configure_logging(level: int = logging.INFO) -> None:
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


@dataclass
class Camera:
    fov: float = 760.0
    radius: float = 60.0
    yaw: float = math.radians(-90.0)
    pitch: float = math.radians(18.0)
    focus: np.ndarray = field(default_factory=lambda: np.array([0.0, 8.0, 0.0]))
    _position: np.ndarray = field(init=False, default_factory=lambda: np.zeros(3))
    _right: np.ndarray = field(init=False, default_factory=lambda: np.array([1.0, 0.0, 0.0]))
    _up: np.ndarray = field(init=False, default_factory=lambda: np.array([0.0, 1.0, 0.0]))
    _forward: np.ndarray = field(init=False, default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    _basis_ready: bool = field(init=False, default=False)

    def position(self) -> np.ndarray:
        x = self.focus[0] + self.radius * math.cos(self.pitch) * math.cos(self.yaw)
        y = self.focus[1] + self.radius * math.sin(self.pitch)
        z = self.focus[2] + self.radius * math.cos(self.pitch) * math.sin(self.yaw)
        return np.array([x, y, z], dtype=np.float64)

    def _basis(self) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        if self._basis_ready:
            return self._position, self._right, self._up, self._forward

        position = self.position()
        forward = normalize(self.focus - position)
        right = normalize(np.cross(forward, UNIT_Y))
        up = normalize(np.cross(right, forward))

        self._position = position
        self._right = right
        self._up = up
        self._forward = forward
        self._basis_ready = True
        return position, right, up, forward

    def world_to_camera(self, point: np.ndarray) -> np.ndarray:
        position, right, up, forward = self._basis()
        relative = point - position
        return np.array([
            np.dot(relative, right),
            np.dot(relative, up),
            np.dot(relative, forward),
        ])

    def project(self, point: np.ndarray) -> tuple[int, int, float] | None:
        cam_point = self.world_to_camera(point)
        depth = cam_point[2]
        if depth <= 0.5:
            return None
        scale = self.fov / depth
        x = WIDTH / 2 + cam_point[0] * scale
        y = HEIGHT / 2 - cam_point[1] * scale
        return int(x), int(y), depth

    def screen_ray(self, screen_x: float, screen_y: float) -> tuple[Vector, Vector]:
        """World-space ray from the eye through a pixel."""
        position, right, up, forward = self._basis()
        x = (screen_x - WIDTH / 2) / self.fov
        y = -(screen_y - HEIGHT / 2) / self.fov
        return position.copy(), normalize(forward + right * x + up * y)

    def handle_input(self, dt: float) -> None:
        keys = pygame.key.get_pressed()
        orbit_speed = 1.8
        pitch_speed = 1.2
        zoom_speed = 40.0
        changed = False

        if keys[pygame.K_a]:
            self.yaw -= orbit_speed * dt
            changed = True
        if keys[pygame.K_d]:
            self.yaw += orbit_speed * dt
            changed = True
        if keys[pygame.K_w]:
            self.pitch = clamp(self.pitch + pitch_speed * dt, math.radians(-10), math.radians(85))
            changed = True
        if keys[pygame.K_s]:
            self.pitch = clamp(self.pitch - pitch_speed * dt, math.radians(-10), math.radians(85))
            changed = True
        if keys[pygame.K_q]:
            self.radius = clamp(self.radius - zoom_speed * dt, 20.0, 200.0)
            changed = True
        if keys[pygame.K_e]:
            self.radius = clamp(self.radius + zoom_speed * dt, 20.0, 200.0)
            changed = True

        if changed:
            self._basis_ready = False

    def reset_view(self) -> None:
        self.yaw = math.radians(-90.0)
        self.pitch = math.radians(18.0)
        self.radius = 60.0
        self._basis_ready = False


@dataclass
class Dummy:
    """A standing target: box body with a spherical head."""

    body: Box
    head: Sphere

    @classmethod
    def at(cls, x: float, z: float, name: str, height: float = 7.0, head_radius: float = 1.6) -> Dummy:
        body = Box(
            minimum=(x - 1.2, 0.0, z - 1.2),
            maximum=(x + 1.2, height, z + 1.2),
            name=f"{name} body",
        )
        head = Sphere(center=(x, height + head_radius, z), radius=head_radius, name=name)
        return cls(body=body, head=head)

    def as_target(self) -> Target:
        return Target(
            reference_point=self.head.center,
            reference_radius=self.head.radius,
            name=self.head.name,
        )


@dataclass
class ControlState:
    mouse: tuple[int, int] = (WIDTH // 2, HEIGHT // 2)
    gravity_index: int = 0


def build_scene() -> tuple[Scene, list[Dummy], Box]:
    scene = Scene()
    scene.add(Plane(point=(0.0, 0.0, 0.0), normal=(0.0, 1.0, 0.0), name="ground"))
    for x, z, h in [(-40.0, 80.0, 24.0), (35.0, 60.0, 16.0), (0.0, 140.0, 40.0)]:
        scene.add(Box(minimum=(x - 5.0, 0.0, z - 5.0), maximum=(x + 5.0, h, z + 5.0), name="pillar"))
    dummies = [
        Dummy.at(-15.0, 45.0, "alpha"),
        Dummy.at(20.0, 95.0, "bravo"),
        Dummy.at(-60.0, 120.0, "charlie"),
    ]
    for dummy in dummies:
        scene.add(dummy.body)
        scene.add(dummy.head)
    shooter = scene.add(
        Box(
            minimum=SHOOTER_POSITION + np.array([-1.5, 0.0, -1.5]),
            maximum=SHOOTER_POSITION + np.array([1.5, 9.0, 1.5]),
            name="shooter",
        )
    )
    return scene, dummies, shooter


def build_background() -> pygame.Surface:
    strip = pygame.Surface((1, HEIGHT))
    for y in range(HEIGHT):
        t = y / max(HEIGHT - 1, 1)
        color = BACKGROUND_TOP * (1 - t) + BACKGROUND_BOTTOM * t
        strip.set_at((0, y), tuple(color.astype(int)))
    return pygame.transform.smoothscale(strip, (WIDTH, HEIGHT))


def draw_line3d(
    surface: pygame.Surface,
    start: np.ndarray,
    end: np.ndarray,
    color: tuple[int, int, int],
    camera: Camera,
    width: int = 1,
    fade: bool = True,
) -> None:
    start_proj = camera.project(start)
    end_proj = camera.project(end)
    if not start_proj or not end_proj:
        return
    sx, sy, sd = start_proj
    ex, ey, ed = end_proj
    shade = 1.0
    if fade:
        depth = (sd + ed) / 2.0
        shade = clamp(1.3 - depth * 0.004, 0.25, 1.0)
    tinted = tuple(int(c * shade) for c in color)
    pygame.draw.line(surface, tinted, (sx, sy), (ex, ey), width)


def draw_floor_grid(surface: pygame.Surface, camera: Camera) -> None:
    for offset in range(-GRID_SIZE, GRID_SIZE + 1, GRID_STEP):
        draw_line3d(surface, np.array([offset, 0.0, -GRID_SIZE]), np.array([offset, 0.0, GRID_SIZE]), GRID_COLOR, camera)
        draw_line3d(surface, np.array([-GRID_SIZE, 0.0, offset]), np.array([GRID_SIZE, 0.0, offset]), GRID_COLOR, camera)


def draw_box(surface: pygame.Surface, camera: Camera, box: Box, color: tuple[int, int, int]) -> None:
    lo, hi = box.minimum, box.maximum
    corners = [
        np.array([x, y, z])
        for y in (lo[1], hi[1])
        for x, z in ((lo[0], lo[2]), (hi[0], lo[2]), (hi[0], hi[2]), (lo[0], hi[2]))
    ]
    for i in range(4):
        draw_line3d(surface, corners[i], corners[(i + 1) % 4], color, camera)
        draw_line3d(surface, corners[4 + i], corners[4 + (i + 1) % 4], color, camera)
        draw_line3d(surface, corners[i], corners[4 + i], color, camera)


def ring_points(center: np.ndarray, radius: float, segments: int, axes: tuple[int, int] = (0, 2)) -> np.ndarray:
    angles = np.linspace(0.0, math.tau, segments, endpoint=False)
    points = np.tile(center, (segments, 1))
    points[:, axes[0]] += np.cos(angles) * radius
    points[:, axes[1]] += np.sin(angles) * radius
    return points


def draw_ring(
    surface: pygame.Surface,
    camera: Camera,
    center: np.ndarray,
    radius: float,
    color: tuple[int, int, int],
    segments: int = 32,
    axes: tuple[int, int] = (0, 2),
) -> None:
    points = ring_points(center, radius, segments, axes)
    for i in range(segments):
        draw_line3d(surface, points[i], points[(i + 1) % segments], color, camera, 2)


def draw_dummy(surface: pygame.Surface, camera: Camera, dummy: Dummy) -> None:
    draw_box(surface, camera, dummy.body, BODY_COLOR)
    for axes in ((0, 2), (0, 1), (1, 2)):
        draw_ring(surface, camera, dummy.head.center, dummy.head.radius, HEAD_COLOR, axes=axes)


def draw_arc(surface: pygame.Surface, camera: Camera, marker: LandingMarker, origin: Vector, direction: Vector) -> None:
    result = marker.last_result
    if result is None:
        return
    path = []
    for elapsed, state in marker.integrator.trace(origin, direction):
        if elapsed > result.elapsed:
            break
        projected = camera.project(state.position)
        if projected:
            path.append(projected[:2])
    end = camera.project(result.point)
    if end:
        path.append(end[:2])
    if len(path) >= 2:
        pygame.draw.lines(surface, ARC_COLOR, False, path, 1)


def draw_marker(surface: pygame.Surface, camera: Camera, state: MarkerState, font: pygame.font.Font) -> None:
    if not state.attached:
        return
    if state.on_target:
        color = MARKER_ON_TARGET_COLOR
    elif state.hit:
        color = MARKER_COLOR
    else:
        color = MARKER_MISS_COLOR
    draw_ring(surface, camera, state.position, 1.2, color, segments=24)
    draw_ring(surface, camera, state.position, 1.2, color, segments=24, axes=(0, 1))
    projected = camera.project(state.position)
    if projected:
        px, py, _ = projected
        text = font.render(state.label, True, color)
        surface.blit(text, (px - text.get_width() // 2, py - 34))


def draw_hud(
    surface: pygame.Surface,
    marker: LandingMarker,
    camera: Camera,
    font: pygame.font.Font,
    fps: float | None = None,
) -> None:
    config = marker.integrator.config
    state = marker.state
    hud_lines = [
        "Landing Predictor",
        "Mouse aims | T toggle marker | G gravity preset",
        "A/D yaw | W/S pitch | Q/E zoom | C reset",
        f"Speed: {config.speed:.1f} u/s | g: {config.gravity:.1f} u/s^2 | dt: 1/{1 / config.time_step:.0f} s",
        f"Cam r={camera.radius:.0f} pitch={math.degrees(camera.pitch):.1f}°",
        f"Marker: {'ON' if marker.enabled else 'OFF'}",
    ]
    if marker.enabled:
        outcome = "on target" if state.on_target else ("impact" if state.hit else "no impact in horizon")
        hud_lines.append(f"Prediction: {outcome}")
    if fps is not None:
        hud_lines.append(f"FPS: {fps:.0f}/{FPS_TARGET}")
    for idx, text in enumerate(hud_lines):
        surface.blit(font.render(text, True, (230, 235, 245)), (16, 16 + idx * 20))


def handle_keydown(
    event: pygame.event.Event,
    marker: LandingMarker,
    camera: Camera,
    control_state: ControlState,
) -> bool:
    if event.key == pygame.K_ESCAPE:
        return False
    if event.key == pygame.K_t:
        marker.toggle()
    if event.key == pygame.K_c:
        camera.reset_view()
    if event.key == pygame.K_g:
        control_state.gravity_index = (control_state.gravity_index + 1) % len(GRAVITY_PRESETS)
        gravity = GRAVITY_PRESETS[control_state.gravity_index]
        marker.integrator.config = replace(marker.integrator.config, gravity=gravity)
    return True


def handle_events(marker: LandingMarker, camera: Camera, control_state: ControlState) -> bool:
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.MOUSEMOTION:
            control_state.mouse = event.pos
        if event.type == pygame.KEYDOWN:
            if not handle_keydown(event, marker, camera, control_state):
                return False
    return True


def main() -> None:
    configure_logging()
    pygame.init()
    pygame.font.init()
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    pygame.display.set_caption("Landing Predictor")
    font = pygame.font.SysFont("JetBrains Mono", 18)
    clock = pygame.time.Clock()

    background = build_background()
    scene, dummies, shooter = build_scene()
    camera = Camera()
    control_state = ControlState()
    ticks = TickSignal()

    def aim_ray() -> tuple[Vector, Vector]:
        return camera.screen_ray(*control_state.mouse)

    marker = LandingMarker(
        ticks=ticks,
        ray_source=aim_ray,
        cast_ray=scene,
        targets=lambda: [dummy.as_target() for dummy in dummies],
        exclude=[shooter],
        simulation=SimulationConfig(),
    )
    marker.enable()

    running = True
    while running:
        dt = clock.tick(FPS_TARGET) / 1000.0

        running = handle_events(marker, camera, control_state)
        if not running:
            break

        camera.handle_input(dt)
        ticks.fire(dt)
        fps_display = clock.get_fps()

        screen.blit(background, (0, 0))
        draw_floor_grid(screen, camera)
        for obj in scene.objects:
            if isinstance(obj, Box) and obj.name == "pillar":
                draw_box(screen, camera, obj, PILLAR_COLOR)
        draw_box(screen, camera, shooter, BODY_COLOR)
        for dummy in dummies:
            draw_dummy(screen, camera, dummy)
        if marker.enabled:
            draw_arc(screen, camera, marker, *aim_ray())
        draw_marker(screen, camera, marker.state, font)
        draw_hud(screen, marker, camera, font, fps_display)

        pygame.display.flip()

    marker.disable()
    pygame.quit()


if __name__ == "__main__":
    main()
