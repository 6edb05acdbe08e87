import copy

import pytest

from geo import LatLng

SAMPLE_COURT_FEATURES = [
    {
        'type': 'Feature',
        'geometry': {'type': 'Point', 'coordinates': [-122.7, 45.5]},  # At the user location
        'properties': {'name': 'Court A', 'number of courts': '3 Indoor courts',
                       'parsed_num_courts': 3, 'parsed_court_type': 'indoor'}
    },
    {
        'type': 'Feature',
        'geometry': {'type': 'Point', 'coordinates': [-122.8, 45.6]},  # About 13.6 km
        'properties': {'name': 'Court B', 'number of courts': '2 Outdoor courts',
                       'parsed_num_courts': 2, 'parsed_court_type': 'outdoor'}
    },
    {
        'type': 'Feature',
        'geometry': {'type': 'Point', 'coordinates': [-122.9, 45.7]},  # About 27 km
        'properties': {'name': 'Court C', 'number of courts': '4 Indoor/Outdoor courts',
                       'parsed_num_courts': 4, 'parsed_court_type': 'both'}
    },
    {
        'type': 'Feature',
        'geometry': {'type': 'Point', 'coordinates': [-122.6, 45.4]},  # About 13.6 km
        'properties': {'name': 'Court D', 'number of courts': '1 Outdoor court',
                       'parsed_num_courts': 1, 'parsed_court_type': 'outdoor'}
    },
    {
        'type': 'Feature',
        'geometry': {'type': 'Point', 'coordinates': [None, None]},
        'properties': {'name': 'Court E (Bad Coords)', 'number of courts': '1 Outdoor court',
                       'parsed_num_courts': 1, 'parsed_court_type': 'outdoor'}
    },
]


@pytest.fixture
def court_features():
    return copy.deepcopy(SAMPLE_COURT_FEATURES)


@pytest.fixture
def user_location():
    return LatLng(45.5, -122.7)
