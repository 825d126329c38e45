from __future__ import annotations

import streamlit as st

from config.app_metadata import ABOUT_NOTES, LEGEND_EXPLANATION
from scene import EARTHQUAKE_RENDERER


def _swatch(color, size_px: int = 14) -> str:
    r, g, b = (int(c) for c in color[:3])
    return (
        f'<span style="display:inline-block;width:{size_px}px;height:{size_px}px;'
        f'border-radius:50%;background:rgb({r},{g},{b});margin-right:6px;"></span>'
    )


def render_legend(session, on_toggle) -> None:
    st.button(session.legend_label, key="legend-control", on_click=on_toggle, args=(session,))
    if not session.legend_visible:
        return
    with st.container(border=True):
        for paragraph in LEGEND_EXPLANATION:
            st.markdown(paragraph)
        color_var = EARTHQUAKE_RENDERER.variable("color")
        st.markdown(f"**{color_var.legend_title}**")
        for stop in color_var.stops:
            st.markdown(f"{_swatch(stop.output)}{stop.label}", unsafe_allow_html=True)
        st.markdown("**Size**")
        size_stops = EARTHQUAKE_RENDERER.variable("size").stops
        largest = max(stop.output for stop in size_stops)
        for stop in size_stops:
            px = max(6, int(round(22 * stop.output / largest)))
            st.markdown(
                f"{_swatch(EARTHQUAKE_RENDERER.material, px)}{stop.label}",
                unsafe_allow_html=True,
            )
        with st.expander("About this map"):
            for note in ABOUT_NOTES:
                st.markdown(f"- {note}")
