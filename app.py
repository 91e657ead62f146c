# app.py
import logging
import time

import streamlit as st
from streamlit.components.v1 import html as st_html

from wildfire_map.config import HEIGHT, MapConfig
from wildfire_map.controller import MapController
from wildfire_map.loader import DataLoadError, load_boundary, load_fires
from wildfire_map.render import DISPLAY_DATE_FORMAT

st.set_page_config(page_title="California Wildfires", layout="wide")
st.markdown("#### California Wildfires")

config = MapConfig()
logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# ───────────────────────── Data (fetched once) ─────────────────────────
@st.cache_resource(show_spinner="Loading fire records and state boundary…")
def load_datasets(fires_source: str, atlas_source: str, id_field: str):
    dataset = load_fires(fires_source, id_field=id_field)
    boundary = load_boundary(atlas_source)
    return dataset, boundary

try:
    dataset, boundary = load_datasets(config.fires_source, config.atlas_source, config.id_field)
except DataLoadError as e:
    logger.error(f"Map not initialised: {e}")
    st.error(f"Could not load map data: {e}")
    st.stop()

if "controller" not in st.session_state:
    st.session_state["controller"] = MapController(dataset, boundary, config)
ctl: MapController = st.session_state["controller"]

# Callbacks (a Pause click included) have already run; only now apply the pending tick
ctl.advance_if_due()

# ─────────────────────── Widget callbacks ───────────────────────
def _cause_key(cause):
    return f"cause::{cause}"

def on_slider():
    ctl.set_day_index(st.session_state["day_slider"])

def on_date():
    ctl.set_date(st.session_state["date_picker"])

def on_cause(cause):
    ctl.set_cause_active(cause, st.session_state[_cause_key(cause)])

def on_search():
    ctl.set_query(st.session_state["search"])

# Widgets mirror the controller; the selected day index is the one source of truth
st.session_state["day_slider"] = ctl.day_index
st.session_state["date_picker"] = ctl.selected_day.date()
st.session_state["search"] = ctl.query
for cause in ctl.dataset.causes:
    st.session_state[_cause_key(cause)] = ctl.is_cause_active(cause)

# ─────────────────────────── Controls ───────────────────────────
st.markdown(f"**{ctl.selected_day.strftime(DISPLAY_DATE_FORMAT)}**")

c_slider, c_date, c_play = st.columns([6, 2, 1])
with c_slider:
    st.slider(
        "Day",
        min_value=0,
        max_value=ctl.last_index,
        step=1,
        key="day_slider",
        on_change=on_slider,
        label_visibility="collapsed",
    )
with c_date:
    st.date_input(
        "Date",
        min_value=ctl.dataset.first_day.date(),
        max_value=ctl.dataset.last_day.date(),
        key="date_picker",
        on_change=on_date,
        label_visibility="collapsed",
    )
with c_play:
    st.button(ctl.animation.button_label, on_click=ctl.toggle_play)

st.markdown("Filter by Cause:")
cause_cols = st.columns(max(1, min(len(ctl.dataset.causes), 4)))
for i, cause in enumerate(ctl.dataset.causes):
    with cause_cols[i % len(cause_cols)]:
        st.checkbox(cause, key=_cause_key(cause), on_change=on_cause, args=(cause,))

st.text_input(
    "Search by Fire Name:",
    key="search",
    placeholder="Search fire name...",
    on_change=on_search,
)

# ─────────────────────────── Map ───────────────────────────
frame = ctl.update()
st_html(ctl.render(frame), height=HEIGHT + 20, scrolling=False)

c_sum, c_dl = st.columns([3, 1])
with c_sum:
    st.caption(f"Showing {len(frame.visible)} of {len(ctl.dataset)} fires")
with c_dl:
    st.download_button(
        "Download visible fires (CSV)",
        data=ctl.visible_table().to_csv(index=False),
        file_name=f"fires_{ctl.selected_day.strftime('%Y-%m-%d')}.csv",
        mime="text/csv",
    )

# ─────────────────────────── Playback ───────────────────────────
# One pending tick at a time: sleep, schedule, rerun. The day advances at the
# top of the next run, so a Pause clicked during the sleep wins.
if ctl.is_playing:
    time.sleep(config.tick_seconds)
    ctl.schedule_tick()
    st.rerun()
