import json
import logging
import os

import streamlit as st

from court_data import get_data_path, load_court_geojson, prepare_court_features
from components.map import PlotlyMapSink
from components.filters import create_filters
from components.court_info import StreamlitListSink, StreamlitDetailSink
from filter_engine import FilterEngine, FilterState
from geolocation import geocode_address

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Initial view: Portland, OR
DEFAULT_CENTER = [-122.6784, 45.5152]
DEFAULT_ZOOM = 9


def get_initial_view():
    """Initial map view from the environment, as {'center': [lng, lat], 'zoom': zoom}"""
    try:
        center = [
            float(os.environ.get('MAP_CENTER_LNG', DEFAULT_CENTER[0])),
            float(os.environ.get('MAP_CENTER_LAT', DEFAULT_CENTER[1])),
        ]
        zoom = float(os.environ.get('MAP_ZOOM', DEFAULT_ZOOM))
    except ValueError as e:
        logger.warning(f"Invalid map settings, using defaults: {str(e)}")
        center, zoom = list(DEFAULT_CENTER), DEFAULT_ZOOM
    return {'center': center, 'zoom': zoom}


@st.cache_data
def load_dataset(path):
    return load_court_geojson(path)


def selection_signature(event):
    try:
        points = event['selection']['points']
    except (KeyError, TypeError):
        return None
    if not points:
        return None
    point = points[0]
    return json.dumps([point.get('curve_number'), point.get('point_index'), point.get('lat'), point.get('lon')])


def select_from_list(feature):
    st.session_state.pending_selection = feature


def close_court_details():
    st.session_state.selected_court = None


# Page configuration
st.set_page_config(
    page_title="Pickleball Court Finder",
    page_icon="🏓",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Initialize session state
if 'court_features' not in st.session_state:
    # cache_data hands back a copy, so each session annotates its own features
    st.session_state.court_features = prepare_court_features(load_dataset(get_data_path())['features'])
if 'reference_location' not in st.session_state:
    st.session_state.reference_location = None
if 'map_view' not in st.session_state:
    st.session_state.map_view = get_initial_view()
if 'selected_court' not in st.session_state:
    st.session_state.selected_court = None
if 'pending_selection' not in st.session_state:
    st.session_state.pending_selection = None
if 'last_map_selection' not in st.session_state:
    st.session_state.last_map_selection = None

st.title("Pickleball Court Finder")
st.markdown("Find pickleball courts near you and filter by distance, court type and number of courts")

features = st.session_state.court_features
if not features:
    logger.error("Failed to load pickleball court data")
    st.error("Could not load court data.")
    st.stop()

inputs = create_filters(has_location=st.session_state.reference_location is not None)

if inputs['clear_location']:
    st.session_state.reference_location = None

col1, col2 = st.columns([7, 3])
with col2:
    detail_container = st.container()
    list_container = st.container(height=600)

map_view = st.session_state.map_view
map_sink = PlotlyMapSink(map_view['center'], map_view['zoom'], st.session_state.reference_location)
engine = FilterEngine(
    features,
    map_sink=map_sink,
    list_sink=StreamlitListSink(list_container, on_select=select_from_list),
    detail_sink=StreamlitDetailSink(detail_container, on_close=close_court_details)
)

state = FilterState.from_inputs(
    distance_km=inputs['distance_km'],
    court_type=inputs['court_type'],
    min_courts=inputs['min_courts'],
    reference_location=st.session_state.reference_location
)

if inputs['find_nearby']:
    engine.locate_and_filter(lambda: geocode_address(inputs['address']), state, map_sink.zoom)
    st.session_state.reference_location = engine.reference_location
    map_sink.set_user_location(engine.reference_location)
else:
    engine.apply_filters_and_refresh(state)

# A map click from the previous run shows up here; handle each click once
map_event = st.session_state.get('court_map')
signature = selection_signature(map_event)
if signature is not None and signature != st.session_state.last_map_selection:
    clicked = map_sink.feature_for_event(map_event)
    if clicked is not None:
        st.session_state.pending_selection = clicked
st.session_state.last_map_selection = signature

if st.session_state.pending_selection is not None:
    selected = st.session_state.pending_selection
    st.session_state.pending_selection = None
    if engine.select_court(selected, map_sink.zoom) is not None:
        st.session_state.selected_court = selected
elif st.session_state.selected_court is not None:
    selected = st.session_state.selected_court
    engine.detail_sink.display_court_details(
        selected.get('properties') or {},
        list(selected['geometry']['coordinates']),
        engine.reference_location
    )

st.session_state.map_view = map_sink.view()

with col1:
    map_sink.render(key='court_map')
