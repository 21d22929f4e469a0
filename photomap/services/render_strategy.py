"""Client map rendering strategy.

The browser map switches between two renderers depending on how many points
the server returned: individually positioned thumbnail markers for small
results, and a WebGL circle-cluster layer once the count passes a threshold.
``MapViewState`` is the client's fetch/render state machine, kept here so the
mode switching and request supersession can be exercised without a browser.

There is no hysteresis around the threshold: a viewport whose
point count hovers near it flips modes on each refresh, which shows up in
``MapViewState.mode_history``.
"""

import enum
from collections import deque
from dataclasses import dataclass, field

from photomap.config import settings

FLY_TO_MAX_ZOOM = 14  # markers clicked below this zoom move the camera first
MODE_HISTORY_SIZE = 32


class RenderMode(str, enum.Enum):
    MARKERS = "markers"
    WEBGL_CLUSTERS = "webgl_clusters"


class Phase(str, enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    RENDERING = "rendering"


def select_render_mode(point_count: int, threshold: int | None = None) -> RenderMode:
    """Markers up to and including ``threshold`` points, WebGL clusters above it."""
    if threshold is None:
        threshold = settings.render_mode_threshold
    if point_count > threshold:
        return RenderMode.WEBGL_CLUSTERS
    return RenderMode.MARKERS


@dataclass
class PendingRequest:
    request_id: int
    bounds: tuple[float, float, float, float]
    zoom: float
    due_at: float  # seconds; dispatched once the debounce window has passed
    dispatched: bool = False


@dataclass
class MarkerClick:
    point_id: str
    fly_to: tuple[float, float] | None  # (lat, lng) when the camera should move


@dataclass
class MapViewState:
    """Idle -> Fetching -> Rendering(mode), with last-request-wins semantics."""

    threshold: int = field(default_factory=lambda: settings.render_mode_threshold)
    debounce_seconds: float = field(default_factory=lambda: settings.map_debounce_ms / 1000)

    phase: Phase = Phase.IDLE
    mode: RenderMode | None = None
    zoom: float = 3
    points: list = field(default_factory=list)
    selected_point_id: str | None = None
    pending: PendingRequest | None = None
    last_cancelled: int | None = None
    mode_history: deque[RenderMode] = field(default_factory=lambda: deque(maxlen=MODE_HISTORY_SIZE))
    _next_id: int = 0

    def viewport_changed(
        self,
        bounds: tuple[float, float, float, float],
        zoom: float,
        now: float,
    ) -> int:
        """Schedule a fetch for the new viewport, superseding any earlier one."""
        if self.pending is not None:
            self.last_cancelled = self.pending.request_id
        self._next_id += 1
        self.zoom = zoom
        self.pending = PendingRequest(
            request_id=self._next_id,
            bounds=bounds,
            zoom=zoom,
            due_at=now + self.debounce_seconds,
        )
        self.phase = Phase.FETCHING
        return self._next_id

    def due_request(self, now: float) -> PendingRequest | None:
        """The request to send now, if its debounce window has elapsed."""
        pending = self.pending
        if pending is None or pending.dispatched or now < pending.due_at:
            return None
        pending.dispatched = True
        return pending

    def result_received(self, request_id: int, points: list) -> bool:
        """Apply a response; responses for superseded requests are dropped."""
        if self.pending is None or self.pending.request_id != request_id:
            return False
        self.pending = None
        self.points = points
        self.mode = select_render_mode(len(points), self.threshold)
        self.mode_history.append(self.mode)
        self.phase = Phase.RENDERING
        return True

    def request_failed(self, request_id: int) -> None:
        if self.pending is not None and self.pending.request_id == request_id:
            self.pending = None
            self.phase = Phase.RENDERING if self.mode is not None else Phase.IDLE

    def click_marker(self, point_id: str, lat: float, lng: float) -> MarkerClick:
        """Highlight a point, flying toward it first when zoomed out."""
        self.selected_point_id = point_id
        fly_to = (lat, lng) if self.zoom < FLY_TO_MAX_ZOOM else None
        return MarkerClick(point_id=point_id, fly_to=fly_to)

    def click_empty(self) -> None:
        self.selected_point_id = None
