import logging
import sys
from pathlib import Path

import pandas as pd
import streamlit as st
from streamlit_plotly_events import plotly_events

app_dir = Path(__file__).resolve().parent
repo_root = app_dir.parent
for path in (repo_root, app_dir):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from config.app_metadata import PAGE_TITLE  # noqa: E402
from events import build_event_list  # noqa: E402
from layers import load_base_layer  # noqa: E402
from queries import EarthquakeDataError, get_record, load_earthquakes  # noqa: E402
from scene import COUNTRY_BORDERS, PLATE_BOUNDARIES, POPUP_TITLE, VIEW  # noqa: E402
from session import (  # noqa: E402
    GlobeSession,
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
from settings import configure_logging, load_settings  # noqa: E402
from views.legend import render_legend  # noqa: E402
from viz import (  # noqa: E402
    build_globe_figure,
    extract_camera,
    extract_click,
    figure_state,
    quake_trace_index,
)

logger = logging.getLogger(__name__)

settings = load_settings()
configure_logging(settings.log_level)

st.set_page_config(page_title=PAGE_TITLE, layout="wide")


@st.cache_data(show_spinner=False)
def _load_earthquakes(path: str) -> pd.DataFrame:
    return load_earthquakes(path)


@st.cache_data(ttl=3600, show_spinner=False)
def _load_base_layers(countries_url: str, plates_url: str, timeout_s: float):
    return [
        load_base_layer(COUNTRY_BORDERS, url=countries_url, timeout=timeout_s),
        load_base_layer(PLATE_BOUNDARIES, url=plates_url, timeout=timeout_s),
    ]


def _get_session() -> GlobeSession:
    session = st.session_state.get("globe_session")
    if session is None:
        session = GlobeSession()
        st.session_state["globe_session"] = session
    return session


def _render_popup(session: GlobeSession) -> None:
    record = session.popup_record
    if record is None:
        st.caption("Click an earthquake on the globe to see its image.")
        return
    st.markdown(f"**{POPUP_TITLE}**")
    if record.image:
        st.image(record.image, caption=record.place, use_container_width=True)
    else:
        st.caption(f"No image available for {record.place}.")
    st.write(f"timestamp: {record.time}")
    st.button("Close", key="popup-close", on_click=close_popup, args=(session,))


def _globe_figure(df: pd.DataFrame, session: GlobeSession, base_layers):
    # Idle frames reuse the last figure so the chart component is not redrawn.
    state = figure_state(session)
    cached = st.session_state.get("globe_figure")
    if cached is not None and cached[0] == state:
        return cached[1]
    fig = build_globe_figure(df, session, base_layers, VIEW)
    st.session_state["globe_figure"] = (state, fig)
    return fig


@st.fragment(run_every=settings.frame_interval_s)
def _globe_frame(df: pd.DataFrame, base_layers) -> None:
    session = _get_session()
    fig = _globe_figure(df, session, base_layers)
    plot_key = f"globe-plot_{session.events_key}"
    globe_col, popup_col = st.columns([4, 1])
    with globe_col:
        try:
            events = plotly_events(
                fig,
                click_event=True,
                hover_event=False,
                select_event=False,
                override_height=VIEW.height,
                override_width="100%",
                key=plot_key,
                relayout_event=True,
            )
        except TypeError:
            events = plotly_events(
                fig,
                click_event=True,
                hover_event=False,
                select_event=False,
                override_height=VIEW.height,
                override_width="100%",
                key=plot_key,
            )
    fresh = take_fresh_events(session, events)
    clicked = extract_click(fresh, df, quake_trace_index(fig))
    if clicked is not None:
        show_popup(session, get_record(df, clicked))
    with popup_col:
        _render_popup(session)
    if not session.view.ready:
        mark_view_settled(session)
    tick(session, extract_camera(fresh), clicked=fresh is not None)


st.title(PAGE_TITLE)

try:
    quakes_df = _load_earthquakes(str(settings.csv_path))
except EarthquakeDataError as exc:
    logger.exception("Earthquake layer failed to load")
    st.error(f"Failed to load earthquakes: {exc}")
    st.stop()

session = _get_session()
mark_layer_view_ready(session)

with st.spinner("Loading base layers..."):
    base_layers = _load_base_layers(
        settings.countries_url, settings.plates_url, settings.layer_timeout_s
    )
for layer in base_layers:
    if layer.empty:
        st.caption(f"{layer.config.name} layer unavailable.")

entries_key = f"event_entries:{settings.list_where}"
if entries_key not in st.session_state:
    st.session_state[entries_key] = build_event_list(
        quakes_df, where=settings.list_where, tz=settings.display_tz or None
    )
entries = st.session_state[entries_key]

with st.sidebar:
    st.header("Major earthquakes")
    st.caption(f"Filter: {settings.list_where}")
    if not entries:
        st.info("No earthquakes to list.")
    for entry in entries:
        with st.container(border=True):
            st.markdown(f"### {entry.title}")
            st.markdown(f"*{entry.date_label}*")
            st.write(entry.summary)
            st.button(
                entry.action_label,
                key=entry.key,
                on_click=zoom_to,
                args=(session, entry.record),
            )

controls_col, legend_col = st.columns([1, 3])
with controls_col:
    st.button(
        "Toggle exaggeration",
        key="toggle-exaggeration",
        on_click=toggle_elevation,
        args=(session,),
    )
    st.caption(f"Depth: {session.elevation.name} ({session.elevation.expression} km)")
with legend_col:
    render_legend(session, toggle_legend)

_globe_frame(quakes_df, base_layers)
