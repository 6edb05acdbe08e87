import math

import streamlit as st

from court_data import courts_to_dataframe
from filter_engine import DetailSink, ListSink

NO_RESULTS_MESSAGE = "No courts found matching your criteria."


def format_distance(distance):
    if distance is None or not isinstance(distance, (int, float)):
        return None
    if math.isinf(distance) or math.isnan(distance):
        return None
    return f"{distance:.2f} km"


def build_directions_url(coordinates, reference_location=None):
    """Google Maps link for a court; directions when we know where the user is"""
    court_lng, court_lat = coordinates[0], coordinates[1]
    if reference_location is not None:
        return (f"https://www.google.com/maps/dir/?api=1"
                f"&origin={reference_location.lat},{reference_location.lng}"
                f"&destination={court_lat},{court_lng}")
    return f"https://www.google.com/maps/search/?api=1&query={court_lat},{court_lng}"


def court_list_entries(features, reference_location):
    """What the list shows for each court"""
    entries = []
    for feature in features:
        properties = feature.get('properties') or {}
        distance = None
        if reference_location is not None:
            distance = format_distance(properties.get('calculated_distance'))
        entries.append({
            'name': properties.get('name') or 'Unnamed court',
            'location': properties.get('location'),
            'distance': distance,
        })
    return entries


def court_detail_fields(properties):
    return {
        'Name': properties.get('name') or 'N/A',
        'Location': properties.get('location') or 'N/A',
        'Number of Courts': properties.get('number of courts') or 'N/A',
    }


class StreamlitListSink(ListSink):
    """Renders the filtered courts as a clickable list"""

    def __init__(self, container, on_select=None):
        self.container = container
        self.on_select = on_select

    def update_court_list(self, features, reference_location):
        with self.container:
            st.markdown(f"### Courts ({len(features)})")

            if not features:
                st.info(NO_RESULTS_MESSAGE)
                return

            entries = court_list_entries(features, reference_location)
            for index, (feature, entry) in enumerate(zip(features, entries)):
                with st.container(border=True):
                    st.markdown(f"**{entry['name']}**")
                    if entry['location']:
                        st.caption(entry['location'])
                    if entry['distance']:
                        st.markdown(f"**Distance:** {entry['distance']}")
                    st.button(
                        "Show on map",
                        key=f"court-list-{index}-{entry['name']}",
                        on_click=self.on_select,
                        args=(feature,),
                        disabled=self.on_select is None
                    )

            st.download_button(
                "Download List as CSV",
                courts_to_dataframe(features).to_csv(index=False).encode('utf-8'),
                "pickleball_courts.csv",
                "text/csv",
                key='download-court-list'
            )

    def notify(self, message):
        with self.container:
            st.warning(message)


class StreamlitDetailSink(DetailSink):
    """Detail panel for the selected court"""

    def __init__(self, container, on_close=None):
        self.container = container
        self.on_close = on_close

    def display_court_details(self, properties, coordinates, reference_location):
        with self.container:
            st.markdown("### Court Details")
            for label, value in court_detail_fields(properties).items():
                st.markdown(f"**{label}:** {value}")

            st.link_button("Get Directions", build_directions_url(coordinates, reference_location))

            if self.on_close is not None:
                st.button("Close", key='close-court-detail', on_click=self.on_close)
