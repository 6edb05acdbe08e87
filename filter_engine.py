import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional

from geo import LatLng, calculate_distance, point_coordinates
from geolocation import LocationError

logger = logging.getLogger(__name__)

COURT_TYPE_FILTERS = ['any', 'indoor', 'outdoor', 'both']

SELECTED_COURT_MIN_ZOOM = 14
USER_LOCATION_MIN_ZOOM = 11

LOCATION_FAILED_MESSAGE = "Could not get your location. Please check the address and try again."


@dataclass(frozen=True)
class FilterState:
    """Current filter selections, as read from the UI"""
    max_distance_km: float = math.inf
    court_type: str = 'any'
    min_courts: int = 0
    reference_location: Optional[LatLng] = None

    def __post_init__(self):
        court_type = str(self.court_type).lower()
        if court_type not in COURT_TYPE_FILTERS:
            logger.warning(f"Unknown court type filter {self.court_type!r}, using 'any'")
            court_type = 'any'
        object.__setattr__(self, 'court_type', court_type)

    @classmethod
    def from_inputs(cls, distance_km=None, court_type=None, min_courts=None,
                    reference_location: Optional[LatLng] = None) -> 'FilterState':
        """Build a state from raw widget values, falling back to defaults for anything unusable"""
        max_distance_km = math.inf
        if reference_location is not None and distance_km is not None:
            try:
                max_distance_km = float(distance_km)
                if math.isnan(max_distance_km):
                    raise ValueError("distance is NaN")
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid distance value: {distance_km!r}")
                max_distance_km = math.inf

        if court_type is None:
            court_type = 'any'

        parsed_min_courts = 0
        if min_courts is not None:
            try:
                parsed_min_courts = max(int(min_courts), 0)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring invalid minimum courts value: {min_courts!r}")

        return cls(
            max_distance_km=max_distance_km,
            court_type=court_type,
            min_courts=parsed_min_courts,
            reference_location=reference_location,
        )


class MapSink:
    """Receives map updates from the filter engine. The base class does nothing."""

    def set_data(self, feature_collection: Dict) -> None:
        logger.warning("Map sink not initialized, skipping map update")

    def fly_to(self, center: List[float], zoom: float) -> None:
        logger.warning("Map sink not initialized, skipping map move")

    def set_user_location(self, location: Optional[LatLng]) -> None:
        pass


class ListSink:
    """Receives the sorted court list. The base class does nothing."""

    def update_court_list(self, features: List[Dict], reference_location: Optional[LatLng]) -> None:
        logger.warning("List sink not initialized, skipping list update")

    def notify(self, message: str) -> None:
        logger.warning(f"List sink not initialized, notice dropped: {message}")


class DetailSink:
    """Shows a single selected court. The base class does nothing."""

    def display_court_details(self, properties: Dict, coordinates: List[float],
                              reference_location: Optional[LatLng]) -> None:
        logger.warning("Detail sink not initialized, skipping court details")


def _passes_type_gate(court_type: str, selected_type: str) -> bool:
    if selected_type == 'any':
        return True
    if selected_type == 'indoor':
        return court_type in ('indoor', 'both')
    if selected_type == 'outdoor':
        return court_type in ('outdoor', 'both')
    if selected_type == 'both':
        return court_type == 'both'
    return False


def filter_courts(features: List[Dict], state: FilterState) -> List[Dict]:
    """Apply the distance, type and minimum-count gates.

    Distances are written to each feature's 'calculated_distance' property
    during the pass (inf for features with unusable geometry) and cleared
    when no reference location is set. Returns the surviving features in
    their original order.
    """
    location = state.reference_location
    filtered = []

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

        if location is not None:
            point = point_coordinates(feature)
            if point is None:
                properties['calculated_distance'] = math.inf
                continue
            distance = calculate_distance(location.lat, location.lng, point.lat, point.lng)
            properties['calculated_distance'] = distance
            if distance > state.max_distance_km:
                continue
        else:
            properties['calculated_distance'] = None

        if not _passes_type_gate(properties.get('parsed_court_type', 'unknown'), state.court_type):
            continue

        num_courts = properties.get('parsed_num_courts', 0)
        if not isinstance(num_courts, (int, float)) or num_courts < state.min_courts:
            continue

        filtered.append(feature)

    return filtered


def _distance_key(feature: Dict) -> float:
    distance = (feature.get('properties') or {}).get('calculated_distance')
    return math.inf if distance is None else distance


def sort_by_distance(features: List[Dict]) -> List[Dict]:
    return sorted(features, key=_distance_key)


class FilterEngine:
    """Filters the full court set and keeps the map and the list in sync."""

    def __init__(self, features: List[Dict], map_sink: Optional[MapSink] = None,
                 list_sink: Optional[ListSink] = None, detail_sink: Optional[DetailSink] = None):
        self.features = features
        self.map_sink = map_sink or MapSink()
        self.list_sink = list_sink or ListSink()
        self.detail_sink = detail_sink or DetailSink()
        self.reference_location: Optional[LatLng] = None

    def apply_filters_and_refresh(self, state: Optional[FilterState] = None) -> List[Dict]:
        """Run one filter pass and push the result to both sinks"""
        state = state or FilterState()
        self.reference_location = state.reference_location

        try:
            filtered = filter_courts(self.features or [], state)
        except Exception as e:
            logger.error(f"Error filtering courts: {str(e)}")
            filtered = []

        features_for_list = filtered
        if state.reference_location is not None:
            features_for_list = sort_by_distance(filtered)

        logger.info(
            f"Filter pass: {len(filtered)} of {len(self.features or [])} courts "
            f"(type={state.court_type}, min_courts={state.min_courts}, "
            f"max_distance_km={state.max_distance_km}, located={state.reference_location is not None})"
        )

        # Map markers are based on the unsorted filtered set
        try:
            self.map_sink.set_data({'type': 'FeatureCollection', 'features': list(filtered)})
        except Exception as e:
            logger.error(f"Error updating map: {str(e)}")

        try:
            self.list_sink.update_court_list(features_for_list, state.reference_location)
        except Exception as e:
            logger.error(f"Error updating court list: {str(e)}")

        return features_for_list

    def locate_and_filter(self, locate: Callable[[], LatLng], state: Optional[FilterState] = None,
                          current_zoom: float = 0) -> List[Dict]:
        """Look up the reference location, then run a filter pass from it.

        If the lookup fails the user is notified and the pass runs without a
        reference location.
        """
        state = state or FilterState()
        try:
            location = locate()
            if location is None:
                raise LocationError("No location returned")
            location = LatLng(float(location[0]), float(location[1]))
            if not (math.isfinite(location.lat) and math.isfinite(location.lng)):
                raise LocationError(f"Invalid location: {location!r}")
        except Exception as e:
            logger.error(f"Error getting user location: {str(e)}")
            try:
                self.list_sink.notify(LOCATION_FAILED_MESSAGE)
            except Exception as notify_error:
                logger.error(f"Error showing location notice: {str(notify_error)}")
            return self.apply_filters_and_refresh(
                replace(state, reference_location=None, max_distance_km=math.inf)
            )

        logger.info(f"User location set to {location.lat:.5f}, {location.lng:.5f}")

        try:
            self.map_sink.set_user_location(location)
            self.map_sink.fly_to([location.lng, location.lat], max(current_zoom, USER_LOCATION_MIN_ZOOM))
        except Exception as e:
            logger.error(f"Error moving map to user location: {str(e)}")

        return self.apply_filters_and_refresh(replace(state, reference_location=location))

    def select_court(self, feature: Optional[Dict], current_zoom: float = 0) -> Optional[Dict]:
        """Show a court's details and move the map to it.

        Returns the new map view, or None for a feature without coordinates.
        """
        geometry = feature.get('geometry') if isinstance(feature, dict) else None
        if not geometry or not geometry.get('coordinates'):
            logger.error(f"Invalid feature passed to select_court: {feature!r}")
            return None

        coordinates = list(geometry['coordinates'])
        view = {'center': coordinates, 'zoom': max(current_zoom, SELECTED_COURT_MIN_ZOOM)}

        try:
            self.map_sink.fly_to(view['center'], view['zoom'])
        except Exception as e:
            logger.error(f"Error moving map to selected court: {str(e)}")

        try:
            self.detail_sink.display_court_details(
                feature.get('properties') or {}, coordinates, self.reference_location
            )
        except Exception as e:
            logger.error(f"Error displaying court details: {str(e)}")

        return view
