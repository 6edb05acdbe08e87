
import plotly.graph_objects as go
import streamlit as st

from filter_engine import MapSink
from geo import point_coordinates


# Marker colors by parsed court type
COURT_TYPE_COLORS = {
    'indoor': '#3498db',  # Blue
    'outdoor': '#2ecc71',  # Green
    'both': '#9b59b6',  # Purple
}
UNKNOWN_TYPE_COLOR = '#95a5a6'
USER_LOCATION_COLOR = '#007bff'

COURT_TYPE_LABELS = {
    'indoor': 'Indoor',
    'outdoor': 'Outdoor',
    'both': 'Indoor/Outdoor',
    'unknown': 'Unknown',
}


def marker_size(count):
    """Marker size steps up with the number of courts"""
    if not isinstance(count, (int, float)) or count < 1:
        return 5
    if count >= 5:
        return 10
    if count >= 3:
        return 8
    return 6


def marker_color(court_type):
    return COURT_TYPE_COLORS.get(court_type, UNKNOWN_TYPE_COLOR)


def group_features_by_type(features):
    """Split plottable features into one group per court type, in legend order"""
    groups = {court_type: [] for court_type in COURT_TYPE_LABELS}
    for feature in features:
        if point_coordinates(feature) is None:
            continue
        court_type = (feature.get('properties') or {}).get('parsed_court_type', 'unknown')
        groups.setdefault(court_type, []).append(feature)
    return [(court_type, group) for court_type, group in groups.items() if group]


def create_court_map(feature_collection, center, zoom, user_location=None):
    """Build the court map. center is [lng, lat]."""
    fig = go.Figure()

    features = feature_collection.get('features') or []
    for court_type, group in group_features_by_type(features):
        points = [point_coordinates(feature) for feature in group]
        properties = [feature.get('properties') or {} for feature in group]

        fig.add_trace(go.Scattermap(
            lat=[point.lat for point in points],
            lon=[point.lng for point in points],
            text=[p.get('name', 'Unnamed court') for p in properties],
            customdata=[[p.get('location') or '', p.get('number of courts') or 'N/A'] for p in properties],
            mode='markers',
            name=COURT_TYPE_LABELS.get(court_type, court_type.title()),
            marker=dict(
                # marker_size is a radius, plotly wants a diameter
                size=[marker_size(p.get('parsed_num_courts', 0)) * 2 for p in properties],
                color=marker_color(court_type),
                opacity=0.85,
            ),
            hovertemplate="<b>%{text}</b><br>" +
                          "%{customdata[0]}<br>" +
                          "Courts: %{customdata[1]}<extra></extra>"
        ))

    if user_location is not None:
        fig.add_trace(go.Scattermap(
            lat=[user_location.lat],
            lon=[user_location.lng],
            text=['Your location'],
            mode='markers',
            name='Your location',
            marker=dict(size=16, color=USER_LOCATION_COLOR),
            hovertemplate="<b>%{text}</b><extra></extra>",
            showlegend=False
        ))

    fig.update_layout(
        map=dict(
            style='open-street-map',
            center=dict(lon=center[0], lat=center[1]),
            zoom=zoom
        ),
        margin={"r": 0, "t": 0, "l": 0, "b": 0},
        height=600,
        showlegend=True,
        legend_title="Court Type",
        # Keep the user's pan/zoom until the view is moved on purpose
        uirevision=f"{center[0]:.5f},{center[1]:.5f},{zoom}"
    )

    return fig


def selected_feature(event, trace_features):
    """Map a plotly selection event back to the clicked court feature"""
    if not event:
        return None
    try:
        points = event['selection']['points']
    except (KeyError, TypeError):
        return None
    if not points:
        return None

    point = points[0]
    curve_number = point.get('curve_number')
    point_index = point.get('point_index', point.get('point_number'))
    if curve_number is None or point_index is None:
        return None
    if not 0 <= curve_number < len(trace_features):
        # Clicks on the user-location marker land here
        return None

    features = trace_features[curve_number]
    if not 0 <= point_index < len(features):
        return None
    return features[point_index]


class PlotlyMapSink(MapSink):
    """Collects the engine's map updates and draws them with plotly"""

    def __init__(self, center, zoom, user_location=None):
        self.feature_collection = {'type': 'FeatureCollection', 'features': []}
        self.center = list(center)
        self.zoom = zoom
        self.user_location = user_location

    def set_data(self, feature_collection):
        self.feature_collection = feature_collection

    def fly_to(self, center, zoom):
        self.center = list(center)
        self.zoom = zoom

    def set_user_location(self, location):
        self.user_location = location

    def view(self):
        return {'center': list(self.center), 'zoom': self.zoom}

    def trace_features(self):
        features = self.feature_collection.get('features') or []
        return [group for _, group in group_features_by_type(features)]

    def feature_for_event(self, event):
        """Court clicked in a selection event, matched against the current data"""
        return selected_feature(event, self.trace_features())

    def render(self, key='court_map'):
        """Draw the map and return the plotly selection event"""
        fig = create_court_map(self.feature_collection, self.center, self.zoom, self.user_location)
        return st.plotly_chart(
            fig,
            use_container_width=True,
            on_select="rerun",
            selection_mode="points",
            key=key
        )
