"""Session state and the controllers that mutate it.

Everything the page remembers between reruns lives on one ``GlobeSession``:
the active elevation mode, the zooming flag, the highlight handle, legend
visibility and the rotation loop. Handlers receive the session explicitly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set

from camera import Camera, CameraTransition, altitude_for_zoom, eye_to_camera
from queries import EarthquakeRecord
from scene import ELEVATION_MODES, VIEW, ElevationInfo, ViewConfig

logger = logging.getLogger(__name__)

ROTATION_STEP_DEG = 0.1
ZOOM_TO_LEVEL = 4
ZOOM_TO_SPEED_FACTOR = 0.5

LEGEND_HIDE_LABEL = "Hide explanation"
LEGEND_SHOW_LABEL = "Show explanation"


class GlobeView:
    def __init__(self, config: ViewConfig = VIEW):
        self.config = config
        pose = config.camera
        self._camera = Camera(
            longitude=pose.longitude,
            latitude=pose.latitude,
            altitude=pose.altitude,
            heading=pose.heading,
            tilt=pose.tilt,
        )
        self.interacting = False
        self.ready = False
        self.updating = True
        self.revision = 1
        self.transition: Optional[CameraTransition] = None
        self._on_transition_end: List[Callable[[], None]] = []

    @property
    def camera(self) -> Camera:
        return self._camera.clone()

    @camera.setter
    def camera(self, value: Camera) -> None:
        # Same revision: plotly keeps a camera the user has moved by hand.
        self._camera = value.clone()

    def on_transition_end(self, callback: Callable[[], None]) -> None:
        self._on_transition_end.append(callback)

    def go_to(self, record: EarthquakeRecord, zoom: float, speed_factor: float = 1.0) -> None:
        start = self.camera
        target = Camera(
            longitude=record.longitude,
            latitude=record.latitude,
            altitude=altitude_for_zoom(zoom),
            heading=start.heading,
            tilt=start.tilt,
        )
        self.transition = CameraTransition(start, target, speed_factor=speed_factor)
        # New revision so the figure drops any hand-moved camera for the flight.
        self.revision += 1

    def advance(self) -> bool:
        """Step the active transition; return True while one is in flight."""
        if self.transition is None:
            return False
        self.camera = self.transition.step()
        if self.transition.done:
            self.transition = None
            for callback in list(self._on_transition_end):
                callback()
            return False
        return True


class HighlightHandle:
    def __init__(self, layer_view: "LayerView", object_id: int):
        self._layer_view = layer_view
        self.object_id = object_id
        self.removed = False

    def remove(self) -> None:
        if self.removed:
            return
        self._layer_view._release(self)
        self.removed = True


class LayerView:
    def __init__(self):
        self._active: Set[HighlightHandle] = set()

    def highlight(self, record: EarthquakeRecord) -> HighlightHandle:
        handle = HighlightHandle(self, record.object_id)
        self._active.add(handle)
        return handle

    def _release(self, handle: HighlightHandle) -> None:
        self._active.discard(handle)

    @property
    def highlighted_ids(self) -> List[int]:
        return sorted(handle.object_id for handle in self._active)


class RotationLoop:
    IDLE = "idle"
    RUNNING = "running"

    def __init__(self):
        self.state = self.IDLE
        self.triggered = False

    @property
    def running(self) -> bool:
        return self.state == self.RUNNING

    def start_when_settled(self, view: GlobeView) -> bool:
        if self.triggered or not view.ready or view.updating:
            return False
        self.triggered = True
        self.state = self.RUNNING
        logger.info("Auto-rotation started")
        return True

    def step(self, view: GlobeView, session: "GlobeSession") -> bool:
        if self.state != self.RUNNING:
            return False
        if view.interacting or session.zooming:
            self.state = self.IDLE
            logger.info("Auto-rotation stopped")
            return False
        camera = view.camera
        camera.longitude -= ROTATION_STEP_DEG
        view.camera = camera
        return True


@dataclass
class GlobeSession:
    elevation_mode: str = "exaggerated"
    zooming: bool = False
    highlight: Optional[HighlightHandle] = None
    legend_visible: bool = True
    popup_record: Optional[EarthquakeRecord] = None
    last_event: Any = None
    events_key: int = 0
    view: GlobeView = field(default_factory=GlobeView)
    layer_view: Optional[LayerView] = None
    rotation: RotationLoop = field(default_factory=RotationLoop)

    def __post_init__(self):
        self.view.on_transition_end(self._finish_zoom)

    def _finish_zoom(self) -> None:
        self.zooming = False

    @property
    def elevation(self) -> ElevationInfo:
        return ELEVATION_MODES[self.elevation_mode]

    @property
    def legend_label(self) -> str:
        return LEGEND_HIDE_LABEL if self.legend_visible else LEGEND_SHOW_LABEL

    @property
    def highlighted_id(self) -> Optional[int]:
        if self.highlight is None or self.highlight.removed:
            return None
        return self.highlight.object_id


def zoom_to(session: GlobeSession, record: EarthquakeRecord) -> None:
    session.zooming = True
    session.view.go_to(record, zoom=ZOOM_TO_LEVEL, speed_factor=ZOOM_TO_SPEED_FACTOR)
    if session.layer_view is not None:
        if session.highlight is not None:
            session.highlight.remove()
        session.highlight = session.layer_view.highlight(record)


def toggle_elevation(session: GlobeSession) -> ElevationInfo:
    session.elevation_mode = "real" if session.elevation_mode == "exaggerated" else "exaggerated"
    return session.elevation


def toggle_legend(session: GlobeSession) -> bool:
    session.legend_visible = not session.legend_visible
    return session.legend_visible


def show_popup(session: GlobeSession, record: Optional[EarthquakeRecord]) -> None:
    session.popup_record = record


def close_popup(session: GlobeSession) -> None:
    session.popup_record = None
    # A new component key drops the replayed click so the same point can reopen it.
    session.last_event = None
    session.events_key += 1


def take_fresh_events(session: GlobeSession, events: Any) -> Any:
    """Return ``events`` only when they differ from the last payload seen.

    The chart component replays its last value on every rerun.
    """
    if not events or events == session.last_event:
        return None
    session.last_event = events
    return events


def mark_layer_view_ready(session: GlobeSession) -> LayerView:
    if session.layer_view is None:
        session.layer_view = LayerView()
        logger.debug("Earthquake layer view ready")
    return session.layer_view


def mark_view_settled(session: GlobeSession) -> None:
    session.view.ready = True
    session.view.updating = False
    session.rotation.start_when_settled(session.view)


def record_interaction(
    session: GlobeSession, scene_camera: Optional[Dict[str, Any]], clicked: bool = False
) -> None:
    view = session.view
    view.interacting = clicked or scene_camera is not None
    if scene_camera and "eye" in scene_camera:
        view.camera = eye_to_camera(
            scene_camera["eye"],
            scene_camera.get("up"),
            base=view.camera,
            clip_far=view.config.clip_far,
        )


def tick(
    session: GlobeSession,
    scene_camera: Optional[Dict[str, Any]] = None,
    clicked: bool = False,
) -> bool:
    """Run one frame: record interaction, advance any transition, rotate.

    ``clicked`` marks a fresh event from the globe this frame. Returns True
    when the camera changed.
    """
    before = session.view.camera
    record_interaction(session, scene_camera, clicked)
    session.view.advance()
    session.rotation.step(session.view, session)
    return session.view.camera != before
