import streamlit as st

COURT_TYPE_OPTIONS = {
    'Any': 'any',
    'Indoor': 'indoor',
    'Outdoor': 'outdoor',
}

MIN_COURTS_OPTIONS = {
    'Any': 0,
    '1+': 1,
    '2+': 2,
    '3+': 3,
    '5+': 5,
}


def create_filters(has_location):
    """Sidebar filter widgets. Returns the raw values for FilterState.from_inputs."""
    with st.sidebar:
        st.markdown("## Find Courts")

        # Location search
        st.markdown("### Near")
        address = st.text_input("Address or place", "", placeholder="e.g. Laurelhurst Park, Portland")
        col1, col2 = st.columns(2)
        with col1:
            find_nearby = st.button("Find Nearby", use_container_width=True)
        with col2:
            clear_location = st.button("Clear Location", use_container_width=True, disabled=not has_location)

        # Distance only applies once we have a location
        st.markdown("### Distance")
        distance_km = st.slider(
            "Maximum distance (km)",
            min_value=1,
            max_value=100,
            value=10,
            disabled=not has_location
        )

        st.markdown("### Court Type")
        court_type_label = st.selectbox("Court type", list(COURT_TYPE_OPTIONS.keys()))

        st.markdown("### Min. Courts")
        min_courts_label = st.radio("Minimum number of courts", list(MIN_COURTS_OPTIONS.keys()), horizontal=True)

        return {
            'address': address,
            'find_nearby': find_nearby,
            'clear_location': clear_location,
            'distance_km': distance_km,
            'court_type': COURT_TYPE_OPTIONS.get(court_type_label, 'any'),
            'min_courts': MIN_COURTS_OPTIONS.get(min_courts_label, 0),
        }
