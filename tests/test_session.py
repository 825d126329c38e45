import pytest

from queries import get_record
from scene import EXAGGERATED_ELEVATION, REAL_ELEVATION
from session import (
    ROTATION_STEP_DEG,
    GlobeSession,
    RotationLoop,
    close_popup,
    mark_layer_view_ready,
    mark_view_settled,
    show_popup,
    take_fresh_events,
    tick,
    toggle_elevation,
    toggle_legend,
    zoom_to,
)


@pytest.fixture
def session():
    session = GlobeSession()
    mark_layer_view_ready(session)
    return session


def test_zoom_to_replaces_highlight(session, quakes_df):
    first = get_record(quakes_df, 0)
    second = get_record(quakes_df, 2)

    zoom_to(session, first)
    previous = session.highlight
    zoom_to(session, second)

    assert previous.removed
    assert session.layer_view.highlighted_ids == [second.object_id]
    assert session.highlighted_id == second.object_id


def test_zoom_to_same_record_twice_keeps_one_highlight(session, quakes_df):
    record = get_record(quakes_df, 0)
    zoom_to(session, record)
    zoom_to(session, record)
    assert session.layer_view.highlighted_ids == [record.object_id]


def test_zoom_without_layer_view_skips_highlight(quakes_df):
    session = GlobeSession()
    zoom_to(session, get_record(quakes_df, 0))
    assert session.zooming
    assert session.highlight is None
    assert session.view.transition is not None


def test_highlight_remove_is_idempotent(session, quakes_df):
    handle = session.layer_view.highlight(get_record(quakes_df, 1))
    handle.remove()
    handle.remove()
    assert session.layer_view.highlighted_ids == []


def test_toggle_elevation_is_an_involution(session):
    assert session.elevation is EXAGGERATED_ELEVATION
    assert toggle_elevation(session) is REAL_ELEVATION
    assert toggle_elevation(session) is EXAGGERATED_ELEVATION
    assert session.elevation_mode == "exaggerated"


def test_legend_label_describes_next_action(session):
    assert session.legend_visible
    assert session.legend_label == "Hide explanation"
    toggle_legend(session)
    assert not session.legend_visible
    assert session.legend_label == "Show explanation"
    toggle_legend(session)
    assert session.legend_visible
    assert session.legend_label == "Hide explanation"


def test_popup_show_and_close(session, quakes_df):
    record = get_record(quakes_df, 0)
    show_popup(session, record)
    assert session.popup_record == record
    close_popup(session)
    assert session.popup_record is None


def test_rotation_waits_for_settled_view(session):
    loop = session.rotation
    assert loop.state == RotationLoop.IDLE
    assert not loop.start_when_settled(session.view)

    session.view.ready = True
    assert not loop.start_when_settled(session.view)

    session.view.updating = False
    assert loop.start_when_settled(session.view)
    assert loop.running


def test_rotation_trigger_fires_once(session):
    mark_view_settled(session)
    assert session.rotation.running
    session.view.interacting = True
    session.rotation.step(session.view, session)
    assert session.rotation.state == RotationLoop.IDLE

    session.view.interacting = False
    assert not session.rotation.start_when_settled(session.view)
    mark_view_settled(session)
    assert session.rotation.state == RotationLoop.IDLE
    assert not session.rotation.step(session.view, session)


def test_rotation_step_moves_longitude(session):
    mark_view_settled(session)
    start = session.view.camera
    assert tick(session)
    assert session.view.camera.longitude == pytest.approx(start.longitude - ROTATION_STEP_DEG)
    assert tick(session)
    assert session.view.camera.longitude == pytest.approx(start.longitude - 2 * ROTATION_STEP_DEG)


def test_rotation_never_moves_camera_while_interacting(session):
    mark_view_settled(session)
    session.view.interacting = True
    revision = session.view.revision
    before = session.view.camera

    assert not session.rotation.step(session.view, session)
    assert session.view.revision == revision
    assert session.view.camera == before
    assert session.rotation.state == RotationLoop.IDLE


def test_rotation_never_moves_camera_while_zooming(session):
    mark_view_settled(session)
    session.zooming = True
    revision = session.view.revision
    assert not session.rotation.step(session.view, session)
    assert session.view.revision == revision
    assert not session.rotation.running


def test_user_drag_stops_rotation_for_good(session):
    mark_view_settled(session)
    tick(session)
    user_camera = {"eye": {"x": 0.0, "y": 1.2, "z": 0.0}, "up": {"x": 0, "y": 0, "z": 1}}

    tick(session, user_camera)
    assert not session.rotation.running
    assert session.view.camera.longitude == pytest.approx(90.0)

    revision = session.view.revision
    for _ in range(5):
        assert not tick(session)
    assert session.view.revision == revision
    assert not session.view.interacting


def test_zoom_stops_rotation_and_clears_flag_on_arrival(session, quakes_df):
    mark_view_settled(session)
    record = get_record(quakes_df, 2)
    zoom_to(session, record)

    tick(session)
    assert not session.rotation.running
    assert session.zooming

    while session.view.transition is not None:
        tick(session)
    assert not session.zooming
    assert not session.rotation.running
    assert session.view.camera.longitude == pytest.approx(record.longitude)

    revision = session.view.revision
    tick(session)
    assert session.view.revision == revision


def test_globe_click_stops_rotation(session):
    mark_view_settled(session)
    tick(session)
    before = session.view.camera

    assert not tick(session, clicked=True)
    assert not session.rotation.running
    assert session.view.camera == before
    for _ in range(3):
        assert not tick(session)


def test_rotation_keeps_revision_so_hand_moved_camera_survives(session):
    mark_view_settled(session)
    revision = session.view.revision
    for _ in range(5):
        assert tick(session)
    assert session.view.revision == revision


def test_replayed_events_are_not_fresh(session):
    events = [{"curveNumber": 0, "pointIndex": 0}]
    assert take_fresh_events(session, events) == events
    assert take_fresh_events(session, events) is None
    assert take_fresh_events(session, None) is None
    other = [{"curveNumber": 0, "pointIndex": 1}]
    assert take_fresh_events(session, other) == other


def test_close_popup_lets_same_point_reopen(session, quakes_df):
    events = [{"curveNumber": 0, "pointIndex": 0}]
    key = session.events_key
    assert take_fresh_events(session, events) == events
    show_popup(session, get_record(quakes_df, 0))

    close_popup(session)
    assert session.popup_record is None
    assert session.events_key == key + 1
    assert take_fresh_events(session, events) == events
