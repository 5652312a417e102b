"""Per-frame tick source with disconnectable subscriptions."""
from __future__ import annotations

from typing import Callable, Protocol

TickCallback = Callable[[float], None]


class Connection:
    def __init__(self, signal: TickSignal, callback: TickCallback) -> None:
        self._signal = signal
        self.callback = callback

    @property
    def connected(self) -> bool:
        return self in self._signal.connections

    def disconnect(self) -> None:
        if self.connected:
            self._signal.connections.remove(self)


class TickSource(Protocol):
    def connect(self, callback: TickCallback) -> Connection:
        ...


class TickSignal:
    """Calls every connected callback with the frame's ``dt`` when fired."""

    def __init__(self) -> None:
        self.connections: list[Connection] = []

    def connect(self, callback: TickCallback) -> Connection:
        connection = Connection(self, callback)
        self.connections.append(connection)
        return connection

    def fire(self, dt: float) -> None:
        # Snapshot so callbacks may disconnect while firing.
        for connection in list(self.connections):
            if connection.connected:
                connection.callback(dt)
