"""Client render mode selection and the map view state machine."""

from photomap.services.render_strategy import (
    MODE_HISTORY_SIZE,
    MapViewState,
    Phase,
    RenderMode,
    select_render_mode,
)

BOX = (13.0, 14.0, 100.0, 101.0)


def test_threshold_switches_to_webgl_above_150():
    assert select_render_mode(149, threshold=150) is RenderMode.MARKERS
    assert select_render_mode(150, threshold=150) is RenderMode.MARKERS
    assert select_render_mode(151, threshold=150) is RenderMode.WEBGL_CLUSTERS
    assert select_render_mode(0) is RenderMode.MARKERS


def test_debounce_waits_before_dispatch():
    state = MapViewState(threshold=150, debounce_seconds=0.3)
    request_id = state.viewport_changed(BOX, zoom=6, now=10.0)

    assert state.phase is Phase.FETCHING
    assert state.due_request(now=10.1) is None
    request = state.due_request(now=10.5)
    assert request.request_id == request_id
    assert state.due_request(now=11.0) is None  # only dispatched once


def test_newer_viewport_supersedes_in_flight_request():
    state = MapViewState(threshold=150, debounce_seconds=0.3)
    first = state.viewport_changed(BOX, zoom=6, now=0.0)
    state.due_request(now=0.5)
    second = state.viewport_changed(BOX, zoom=7, now=0.6)

    assert state.last_cancelled == first
    assert state.result_received(first, [object()] * 10) is False
    assert state.phase is Phase.FETCHING

    assert state.result_received(second, [object()] * 10) is True
    assert state.phase is Phase.RENDERING
    assert state.mode is RenderMode.MARKERS


def test_mode_flaps_around_threshold():
    state = MapViewState(threshold=150, debounce_seconds=0.3)
    for now, count in enumerate([149, 151, 149]):
        request_id = state.viewport_changed(BOX, zoom=9, now=float(now))
        state.result_received(request_id, [object()] * count)

    assert list(state.mode_history) == [
        RenderMode.MARKERS,
        RenderMode.WEBGL_CLUSTERS,
        RenderMode.MARKERS,
    ]


def test_failed_request_keeps_previous_render():
    state = MapViewState(threshold=150, debounce_seconds=0.3)
    ok = state.viewport_changed(BOX, zoom=4, now=0.0)
    state.result_received(ok, [object()] * 200)
    failed = state.viewport_changed(BOX, zoom=5, now=1.0)
    state.request_failed(failed)

    assert state.phase is Phase.RENDERING
    assert state.mode is RenderMode.WEBGL_CLUSTERS
    assert state.pending is None


def test_marker_click_flies_when_zoomed_out_and_empty_click_clears():
    state = MapViewState(threshold=150, debounce_seconds=0.3)
    state.viewport_changed(BOX, zoom=10, now=0.0)

    click = state.click_marker("pho_1", 13.75, 100.5)
    assert click.fly_to == (13.75, 100.5)
    assert state.selected_point_id == "pho_1"

    state.viewport_changed(BOX, zoom=15, now=1.0)
    assert state.click_marker("pho_2", 13.75, 100.5).fly_to is None
    assert state.selected_point_id == "pho_2"

    state.click_empty()
    assert state.selected_point_id is None


def test_long_sessions_keep_bounded_history():
    state = MapViewState(threshold=150, debounce_seconds=0.3)
    for now in range(MODE_HISTORY_SIZE + 10):
        request_id = state.viewport_changed(BOX, zoom=9, now=float(now))
        state.result_received(request_id, [object()] * 10)
    state.viewport_changed(BOX, zoom=9, now=100.0)
    superseding = state.viewport_changed(BOX, zoom=9, now=101.0)

    assert len(state.mode_history) == MODE_HISTORY_SIZE
    assert state.last_cancelled == superseding - 1
