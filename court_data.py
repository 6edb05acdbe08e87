import json
import logging
import os
import re
from typing import Dict, List, Optional

import pandas as pd

# Set up logging
logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = 'data/portland_pickleball_courts.geojson'

COURT_TYPES = ['indoor', 'outdoor', 'both', 'unknown']

EXPORT_COLUMNS = ['name', 'location', 'number of courts', 'court_type', 'num_courts', 'distance_km']

_DIGITS = re.compile(r'([0-9]+)')


def empty_feature_collection() -> Dict:
    return {'type': 'FeatureCollection', 'features': []}


def parse_court_string(court_string) -> Dict:
    """Turn a free-text 'number of courts' value into a count and a court type.

    "4 Indoor/Outdoor courts" -> {'count': 4, 'type': 'both'}
    Anything that isn't a non-empty string -> {'count': 0, 'type': 'unknown'}
    """
    if not court_string or not isinstance(court_string, str):
        return {'count': 0, 'type': 'unknown'}

    count_match = _DIGITS.search(court_string)
    count = int(count_match.group(1), 10) if count_match else 0

    lower_case_string = court_string.lower()
    is_indoor = 'indoor' in lower_case_string
    is_outdoor = 'outdoor' in lower_case_string

    court_type = 'unknown'
    if is_indoor and is_outdoor:
        court_type = 'both'
    elif is_indoor:
        court_type = 'indoor'
    elif is_outdoor:
        court_type = 'outdoor'

    return {'count': count, 'type': court_type}


def prepare_court_features(features: List[Dict]) -> List[Dict]:
    """Attach parsed court count and type to each feature, in place"""
    for feature in features:
        if not isinstance(feature, dict):
            logger.warning(f"Skipping malformed court record: {feature!r}")
            continue
        properties = feature.get('properties')
        if properties is None:
            properties = {}
            feature['properties'] = properties
        elif not isinstance(properties, dict):
            logger.warning(f"Skipping court record with malformed properties: {properties!r}")
            continue

        court_info = parse_court_string(properties.get('number of courts'))
        properties['parsed_num_courts'] = court_info['count']
        properties['parsed_court_type'] = court_info['type']

    logger.info(f"Prepared {len(features)} court features")
    return features


def get_data_path() -> str:
    return os.environ.get('COURT_DATA_PATH', DEFAULT_DATA_PATH)


def load_court_geojson(path: Optional[str] = None) -> Dict:
    """Load the court FeatureCollection from disk"""
    path = path or get_data_path()
    try:
        logger.info(f"Loading court data from {path}")
        with open(path, encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict) or not isinstance(data.get('features'), list):
            logger.error(f"Court data at {path} is not a GeoJSON FeatureCollection")
            return empty_feature_collection()

        logger.info(f"Loaded {len(data['features'])} courts from {path}")
        return data
    except FileNotFoundError:
        logger.error(f"Court data file not found: {path}")
        return empty_feature_collection()
    except Exception as e:
        logger.error(f"Error loading court data from {path}: {str(e)}")
        return empty_feature_collection()


def load_court_features(path: Optional[str] = None) -> List[Dict]:
    """Load the dataset and return its features with parsed court info"""
    data = load_court_geojson(path)
    return prepare_court_features(data['features'])


def courts_to_dataframe(features: List[Dict]) -> pd.DataFrame:
    """Flatten court features into a table for export"""
    if not features:
        return pd.DataFrame(columns=EXPORT_COLUMNS)

    rows = []
    for feature in features:
        properties = feature.get('properties') or {}
        distance = properties.get('calculated_distance')
        if distance is not None and distance == float('inf'):
            distance = None
        rows.append({
            'name': properties.get('name'),
            'location': properties.get('location'),
            'number of courts': properties.get('number of courts'),
            'court_type': properties.get('parsed_court_type', 'unknown'),
            'num_courts': properties.get('parsed_num_courts', 0),
            'distance_km': round(distance, 2) if distance is not None else None,
        })
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)
