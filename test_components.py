import pytest
from streamlit.testing.v1 import AppTest

from components.court_info import (
    NO_RESULTS_MESSAGE,
    build_directions_url,
    court_detail_fields,
    court_list_entries,
    format_distance,
)
from components.map import (
    PlotlyMapSink,
    create_court_map,
    group_features_by_type,
    marker_color,
    marker_size,
    selected_feature,
)
from filter_engine import FilterEngine, FilterState
from geo import LatLng


@pytest.mark.parametrize("count, size", [(0, 5), (None, 5), (1, 6), (2, 6), (3, 8), (4, 8), (5, 10), (12, 10)])
def test_marker_size(count, size):
    assert marker_size(count) == size


@pytest.mark.parametrize("court_type, color", [
    ('indoor', '#3498db'),
    ('outdoor', '#2ecc71'),
    ('both', '#9b59b6'),
    ('unknown', '#95a5a6'),
    (None, '#95a5a6'),
])
def test_marker_color(court_type, color):
    assert marker_color(court_type) == color


def test_group_features_by_type_skips_invalid_points(court_features):
    groups = group_features_by_type(court_features)

    assert [court_type for court_type, _ in groups] == ['indoor', 'outdoor', 'both']
    outdoor = dict(groups)['outdoor']
    assert [f['properties']['name'] for f in outdoor] == ['Court B', 'Court D']


def test_create_court_map(court_features):
    fig = create_court_map({'type': 'FeatureCollection', 'features': court_features},
                           center=[-122.6784, 45.5152], zoom=9, user_location=LatLng(45.5, -122.7))

    assert [trace.name for trace in fig.data] == ['Indoor', 'Outdoor', 'Indoor/Outdoor', 'Your location']
    outdoor = fig.data[1]
    assert list(outdoor.lat) == [45.6, 45.4]
    assert list(outdoor.marker.size) == [12, 12]
    assert fig.layout.map.zoom == 9
    assert fig.layout.map.center.lat == 45.5152


def test_create_court_map_empty():
    fig = create_court_map({'type': 'FeatureCollection', 'features': []}, center=[-122.6784, 45.5152], zoom=9)
    assert len(fig.data) == 0


def test_selected_feature(court_features):
    trace_features = [group for _, group in group_features_by_type(court_features)]
    event = {'selection': {'points': [{'curve_number': 1, 'point_index': 1}]}}

    assert selected_feature(event, trace_features) is court_features[3]


@pytest.mark.parametrize("event", [
    None,
    {},
    {'selection': {'points': []}},
    {'selection': {'points': [{'curve_number': 3, 'point_index': 0}]}},
    {'selection': {'points': [{'curve_number': 0, 'point_index': 7}]}},
    {'selection': {'points': [{'point_index': 0}]}},
])
def test_selected_feature_no_match(court_features, event):
    trace_features = [group for _, group in group_features_by_type(court_features)]
    assert selected_feature(event, trace_features) is None


def test_plotly_map_sink_tracks_engine_updates(court_features, user_location):
    sink = PlotlyMapSink(center=[-122.6784, 45.5152], zoom=9)
    engine = FilterEngine(court_features, map_sink=sink)

    engine.locate_and_filter(lambda: user_location, FilterState(court_type='indoor'), current_zoom=sink.zoom)

    assert sink.view() == {'center': [-122.7, 45.5], 'zoom': 11}
    assert sink.user_location == user_location
    assert [f['properties']['name'] for f in sink.feature_collection['features']] == ['Court A', 'Court C']

    event = {'selection': {'points': [{'curve_number': 1, 'point_index': 0}]}}
    assert sink.feature_for_event(event) is court_features[2]


@pytest.mark.parametrize("distance, text", [
    (1.23456, "1.23 km"),
    (0, "0.00 km"),
    (None, None),
    (float('inf'), None),
    (float('nan'), None),
    ("5", None),
])
def test_format_distance(distance, text):
    assert format_distance(distance) == text


def test_build_directions_url_without_location():
    assert build_directions_url([-122.7, 45.5]) == "https://www.google.com/maps/search/?api=1&query=45.5,-122.7"


def test_build_directions_url_with_location():
    url = build_directions_url([-122.8, 45.6], LatLng(45.5, -122.7))
    assert url == ("https://www.google.com/maps/dir/?api=1"
                   "&origin=45.5,-122.7&destination=45.6,-122.8")


def test_court_list_entries_with_location(court_features, user_location):
    engine = FilterEngine(court_features)
    features = engine.apply_filters_and_refresh(FilterState(max_distance_km=15, reference_location=user_location))

    entries = court_list_entries(features, user_location)

    assert entries[0] == {'name': 'Court A', 'location': None, 'distance': '0.00 km'}
    assert all(entry['distance'].endswith(' km') for entry in entries)


def test_court_list_entries_without_location_hide_distance(court_features):
    court_features[0]['properties']['calculated_distance'] = 3.0

    entries = court_list_entries(court_features, None)

    assert all(entry['distance'] is None for entry in entries)


def test_court_detail_fields_defaults():
    assert court_detail_fields({}) == {'Name': 'N/A', 'Location': 'N/A', 'Number of Courts': 'N/A'}
    assert court_detail_fields({'name': 'Court A', 'number of courts': '3 Indoor courts'})['Number of Courts'] == \
        '3 Indoor courts'



def court_list_app():
    import streamlit as st

    from components.court_info import StreamlitListSink
    from filter_engine import FilterEngine, FilterState
    from geo import LatLng

    features = [
        {'type': 'Feature', 'geometry': {'type': 'Point', 'coordinates': [-122.7, 45.5]},
         'properties': {'name': 'Court A', 'location': 'Here', 'parsed_num_courts': 3,
                        'parsed_court_type': 'indoor'}},
        {'type': 'Feature', 'geometry': {'type': 'Point', 'coordinates': [-122.8, 45.6]},
         'properties': {'name': 'Court B', 'location': 'Nearby', 'parsed_num_courts': 2,
                        'parsed_court_type': 'outdoor'}},
    ]
    reference_location = LatLng(45.5, -122.7) if st.session_state.get('located') else None
    state = FilterState(min_courts=st.session_state.get('min_courts', 0), reference_location=reference_location)

    engine = FilterEngine(features, list_sink=StreamlitListSink(st.container()))
    engine.apply_filters_and_refresh(state)


def run_court_list_app(**session_values):
    at = AppTest.from_function(court_list_app)
    for key, value in session_values.items():
        at.session_state[key] = value
    at.run()
    assert not at.exception
    return at


def test_court_list_renders_no_results():
    at = run_court_list_app(min_courts=10)

    assert [info.value for info in at.info] == [NO_RESULTS_MESSAGE]
    assert len(at.button) == 0
    assert any(md.value == "### Courts (0)" for md in at.markdown)


def test_court_list_hides_distance_without_location():
    at = run_court_list_app()

    assert len(at.info) == 0
    markdown = [md.value for md in at.markdown]
    assert "**Court A**" in markdown
    assert "**Court B**" in markdown
    assert not any("Distance:" in value for value in markdown)


def test_court_list_shows_distance_with_location():
    at = run_court_list_app(located=True)

    markdown = [md.value for md in at.markdown]
    assert "**Distance:** 0.00 km" in markdown
    distances = [value for value in markdown if value.startswith("**Distance:**")]
    assert len(distances) == 2
    # Closest court is listed first
    assert markdown.index("**Court A**") < markdown.index("**Court B**")
