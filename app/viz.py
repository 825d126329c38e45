from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from camera import EARTH_RADIUS_KM, SURFACE_EYE_DISTANCE, camera_to_eye
from layers import BaseLayerData
from scene import EARTHQUAKE_RENDERER, ViewConfig, interpolate_stops

# Pixels a sphere as wide as the camera altitude would cover on screen.
VIEWPORT_PIXELS = 600
MIN_MARKER_PIXELS = 2.0
HIGHLIGHT_SCALE = 1.6

# Axis half-range, in km, that puts the surface at SURFACE_EYE_DISTANCE.
SCENE_EXTENT_KM = EARTH_RADIUS_KM / (2 * SURFACE_EYE_DISTANCE)


def _rgba(color: Sequence[float]) -> str:
    r, g, b = (int(round(c)) for c in color[:3])
    alpha = color[3] if len(color) > 3 else 1
    return f"rgba({r},{g},{b},{alpha})"


def latlon_to_xyz(lat, lon, radius):
    lat_rad = np.radians(lat)
    lon_rad = np.radians(lon)
    x = radius * np.cos(lat_rad) * np.cos(lon_rad)
    y = radius * np.cos(lat_rad) * np.sin(lon_rad)
    z = radius * np.sin(lat_rad)
    return x, y, z


def marker_pixels(size_m: float, altitude_m: float) -> float:
    return max(MIN_MARKER_PIXELS, size_m / max(altitude_m, 1.0) * VIEWPORT_PIXELS)


def marker_colors(mags: Sequence[float]) -> list[str]:
    stops = EARTHQUAKE_RENDERER.variable("color").stops
    alpha = EARTHQUAKE_RENDERER.material[3]
    return [_rgba((*interpolate_stops(stops, float(m)), alpha)) for m in mags]


def marker_sizes(mags: Sequence[float], altitude_m: float) -> list[float]:
    stops = EARTHQUAKE_RENDERER.variable("size").stops
    return [marker_pixels(interpolate_stops(stops, float(m)), altitude_m) for m in mags]


def build_layer_trace(layer: BaseLayerData) -> go.Scatter3d:
    lons = np.array([np.nan if v is None else v for v in layer.lons], dtype=float)
    lats = np.array([np.nan if v is None else v for v in layer.lats], dtype=float)
    x, y, z = latlon_to_xyz(lats, lons, EARTH_RADIUS_KM)
    # NaN gaps break the line between parts
    return go.Scatter3d(
        x=x,
        y=y,
        z=z,
        mode="lines",
        line={"color": _rgba(layer.config.color), "width": layer.config.width},
        hoverinfo="skip",
        name=layer.config.name,
        showlegend=False,
        connectgaps=False,
    )


def build_ground_trace(opacity: float, resolution: int = 50) -> go.Mesh3d:
    phi, theta = np.meshgrid(np.linspace(0, np.pi, resolution), np.linspace(0, 2 * np.pi, resolution))
    return go.Mesh3d(
        x=(EARTH_RADIUS_KM * np.sin(phi) * np.cos(theta)).flatten(),
        y=(EARTH_RADIUS_KM * np.sin(phi) * np.sin(theta)).flatten(),
        z=(EARTH_RADIUS_KM * np.cos(phi)).flatten(),
        alphahull=0,
        opacity=opacity,
        color="black",
        hoverinfo="skip",
        name="Ground",
    )


def quake_positions(df: pd.DataFrame, elevation) -> tuple:
    radius = EARTH_RADIUS_KM + elevation.height(df["depth"].fillna(0).to_numpy(dtype=float))
    return latlon_to_xyz(df["latitude"].to_numpy(dtype=float), df["longitude"].to_numpy(dtype=float), radius)


def build_quake_trace(df: pd.DataFrame, elevation, altitude_m: float) -> go.Scatter3d:
    x, y, z = quake_positions(df, elevation)
    hover_text = [
        f"{place}<br>Magnitude {mag:g}<br>Depth {depth:g} km"
        for place, mag, depth in zip(df["place"], df["mag"].fillna(0), df["depth"].fillna(0))
    ]
    return go.Scatter3d(
        x=x,
        y=y,
        z=z,
        mode="markers",
        marker={
            "size": marker_sizes(df["mag"].fillna(0), altitude_m),
            "color": marker_colors(df["mag"].fillna(0)),
            "line": {"width": 0},
        },
        text=hover_text,
        hoverinfo="text",
        customdata=df["object_id"].tolist(),
        name="Earthquakes",
        showlegend=False,
    )


def build_highlight_trace(
    df: pd.DataFrame, object_id: int, elevation, altitude_m: float, color: str
) -> Optional[go.Scatter3d]:
    row = df[df["object_id"] == object_id]
    if row.empty:
        return None
    x, y, z = quake_positions(row, elevation)
    size = marker_sizes(row["mag"].fillna(0), altitude_m)[0] * HIGHLIGHT_SCALE
    return go.Scatter3d(
        x=x,
        y=y,
        z=z,
        mode="markers",
        marker={"size": size, "color": color, "opacity": 0.5, "line": {"width": 0}},
        hoverinfo="skip",
        name="Highlight",
        showlegend=False,
    )


def figure_state(session) -> tuple:
    """Everything the globe figure is drawn from; unchanged state means an unchanged figure."""
    camera = session.view.camera
    return (
        session.view.revision,
        (camera.longitude, camera.latitude, camera.altitude, camera.heading, camera.tilt),
        session.elevation_mode,
        session.highlighted_id,
    )


def build_globe_figure(
    df: pd.DataFrame,
    session,
    base_layers: Sequence[BaseLayerData],
    view_config: ViewConfig,
) -> go.Figure:
    camera = session.view.camera
    elevation = session.elevation
    traces = []
    if view_config.ground_opacity > 0:
        traces.append(build_ground_trace(view_config.ground_opacity))
    traces.extend(build_layer_trace(layer) for layer in base_layers if not layer.empty)
    if not df.empty:
        traces.append(build_quake_trace(df, elevation, camera.altitude))
    highlighted = session.highlighted_id
    if highlighted is not None:
        trace = build_highlight_trace(
            df, highlighted, elevation, camera.altitude, view_config.highlight_color
        )
        if trace is not None:
            traces.append(trace)

    axis = {
        "visible": False,
        "showbackground": False,
        "range": [-SCENE_EXTENT_KM, SCENE_EXTENT_KM],
    }
    background = _rgba(view_config.background)
    fig = go.Figure(data=traces)
    fig.update_layout(
        paper_bgcolor=background,
        plot_bgcolor=background,
        height=view_config.height,
        margin={"l": 0, "r": 0, "t": 0, "b": view_config.padding_bottom},
        showlegend=False,
        scene={
            "xaxis": axis,
            "yaxis": axis,
            "zaxis": axis,
            "aspectmode": "cube",
            "bgcolor": background,
            "camera": camera_to_eye(camera, clip_far=view_config.clip_far),
            "dragmode": "orbit",
            "uirevision": session.view.revision,
        },
    )
    return fig


def quake_trace_index(fig: go.Figure) -> Optional[int]:
    for idx, trace in enumerate(fig.data):
        if trace.name == "Earthquakes":
            return idx
    return None


def extract_click(events: Any, df: pd.DataFrame, quake_curve: Optional[int]) -> Optional[int]:
    """Return the object id of a clicked earthquake, if the events hold one."""
    if not events or df.empty or quake_curve is None:
        return None
    event_list = events if isinstance(events, list) else [events]
    for event in event_list:
        if not isinstance(event, dict):
            continue
        if event.get("curveNumber") != quake_curve:
            continue
        if "pointIndex" in event:
            idx = event.get("pointIndex")
        elif "pointNumber" in event:
            idx = event.get("pointNumber")
        else:
            continue
        try:
            return int(df.iloc[int(idx)]["object_id"])
        except (IndexError, TypeError, ValueError):
            continue
    return None


def extract_camera(events: Any) -> Optional[Dict[str, Any]]:
    """Return the scene camera from a relayout event, if the user moved it."""
    if not events:
        return None
    event_list = events if isinstance(events, list) else [events]
    for event in event_list:
        if not isinstance(event, dict):
            continue
        relayout = event.get("relayoutData", event)
        if not isinstance(relayout, dict):
            continue
        camera = relayout.get("scene.camera")
        if isinstance(camera, dict) and "eye" in camera:
            return camera
        eye = {
            axis: relayout.get(f"scene.camera.eye.{axis}") for axis in ("x", "y", "z")
        }
        if all(value is not None for value in eye.values()):
            return {"eye": eye}
    return None
