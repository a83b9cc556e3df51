import os

import requests
import streamlit as st
import streamlit.components.v1 as components

BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")

VIEWS = ("preferences", "calendar", "dashboard", "email-preview")
CURRENCIES = ["USD", "EUR", "GBP", "JPY"]
ACTIVITY_LEVELS = ["Relaxed", "Moderate", "Active"]
DECLINE_REASONS = {
    "Price": "Too Expensive",
    "Dates": "Dates don't work",
    "Destination": "Don't like the destination",
    "Activity": "Activities not interesting",
    "Other": "Other",
}
DEFAULT_PREFERENCES = {
    "originCity": "",
    "preferredAirport": "SFO",
    "budget": 2000,
    "currency": "USD",
    "activityLevel": "Moderate",
    "interests": [],
    "excludedDestinations": [],
}


def error_message(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    if response is None:
        return str(exc)
    try:
        detail = response.json().get("detail")
    except ValueError:
        return response.text or str(exc)
    if isinstance(detail, list):
        return "; ".join(item.get("msg", "").removeprefix("Value error, ") for item in detail)
    return str(detail)


def api(method: str, path: str, timeout: float | None = 60, **kwargs):
    resp = requests.request(method, f"{BACKEND_URL}{path}", timeout=timeout, **kwargs)
    resp.raise_for_status()
    if resp.headers.get("content-type", "").startswith("application/json"):
        return resp.json()
    return resp.text


def comma_list(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def resolve_view(requested: str | None, has_preferences: bool) -> str:
    if not requested:
        return "dashboard" if has_preferences else "preferences"
    return requested if requested in VIEWS else "preferences"


def go(view: str) -> None:
    st.query_params["view"] = view
    st.rerun()


def preferences_view(session: dict) -> None:
    st.header("Travel preferences")
    prefs = session.get("preferences") or DEFAULT_PREFERENCES
    with st.form("preferences_form"):
        col1, col2 = st.columns(2)
        origin = col1.text_input("Origin city", value=prefs["originCity"], placeholder="e.g. New York")
        airport = col2.text_input("Preferred airport", value=prefs["preferredAirport"], placeholder="e.g. JFK")
        col3, col4 = st.columns(2)
        budget = col3.number_input("Budget", min_value=100.0, value=float(prefs["budget"]), step=50.0)
        currency = col4.selectbox(
            "Currency", CURRENCIES, index=CURRENCIES.index(prefs["currency"]) if prefs["currency"] in CURRENCIES else 0
        )
        activity = st.radio(
            "Activity level", ACTIVITY_LEVELS, index=ACTIVITY_LEVELS.index(prefs["activityLevel"]), horizontal=True
        )
        interests = st.text_input(
            "Interests (comma-separated)", value=", ".join(prefs["interests"]), placeholder="e.g. Hiking, Museums, Food"
        )
        excluded = st.text_input(
            "Excluded destinations (comma-separated)", value=", ".join(prefs["excludedDestinations"])
        )
        submitted = st.form_submit_button("Save preferences")

    if submitted:
        payload = {
            "originCity": origin,
            "preferredAirport": airport.upper(),
            "budget": float(budget),
            "currency": currency,
            "activityLevel": activity,
            "interests": comma_list(interests),
            "excludedDestinations": comma_list(excluded),
        }
        try:
            api("PUT", "/preferences", json=payload)
        except requests.RequestException as exc:
            st.error(error_message(exc))
            return
        go("calendar")


def calendar_view(session: dict) -> None:
    st.header("Calendar")
    if not session.get("preferences"):
        st.warning("User preferences are missing. Please return to settings.")
        if st.button("Set preferences"):
            go("preferences")
        return

    if not session["calendarConnected"]:
        if session.get("connectionError"):
            st.error(session["connectionError"])
        label = "Retry Connection" if session.get("connectionError") else "Connect Google Calendar"
        if st.button(label):
            with st.spinner("Connecting to your calendar..."):
                try:
                    api("POST", "/calendar/connect")
                except requests.RequestException as exc:
                    st.session_state["connection_error"] = error_message(exc)
                else:
                    st.session_state.pop("connection_error", None)
            st.rerun()
        return

    windows = session["travelWindows"]
    if not windows:
        st.info("No upcoming travel events found. Add an event starting with 'Travel' to your calendar.")
        return

    labels = {e["id"]: f"{e['title']} ({e['start']} to {e['end']})" for e in windows}
    ids = list(labels)
    selected = session.get("selectedEventId")
    choice = st.radio(
        "Detected travel windows",
        ids,
        format_func=labels.get,
        index=ids.index(selected) if selected in ids else None,
    )
    if session.get("generationError"):
        st.error(session["generationError"])

    if st.button("Find trips", disabled=choice is None):
        with st.spinner("Searching flights and hotels..."):
            try:
                api("POST", "/calendar/select", json={"eventId": choice})
                result = api("POST", "/trips/generate", timeout=None)
            except requests.RequestException as exc:
                st.session_state["generation_error"] = error_message(exc)
                st.rerun()
        st.session_state.pop("generation_error", None)
        if result.get("emailError"):
            st.session_state["email_warning"] = result["emailError"]
        go("dashboard")


def feedback_form(trip: dict) -> None:
    with st.form(f"feedback_{trip['id']}"):
        action = st.radio("Your call", ["Accept", "Decline"], horizontal=True, key=f"action_{trip['id']}")
        reason = st.selectbox(
            "Reason (when declining)",
            list(DECLINE_REASONS),
            format_func=DECLINE_REASONS.get,
            key=f"reason_{trip['id']}",
        )
        text = st.text_area(
            "Feedback (required when declining)",
            placeholder="E.g., I prefer warmer climates...",
            key=f"text_{trip['id']}",
        )
        submitted = st.form_submit_button("Submit")

    if submitted:
        accepted = action == "Accept"
        if not accepted and not text.strip():
            st.error("Please provide some feedback so we can improve next time.")
            return
        body = {"accepted": accepted, "feedbackText": text or None}
        if not accepted:
            body["reason"] = reason
        try:
            api("POST", f"/trips/{trip['id']}/feedback", json=body)
        except requests.RequestException as exc:
            st.error(error_message(exc))
            return
        st.rerun()


def dashboard_view(session: dict) -> None:
    st.header("Your trip options")
    warning = st.session_state.pop("email_warning", None) or session.get("emailError")
    if warning:
        st.warning(f"Email preview unavailable: {warning}")

    trips = session["trips"]
    if not trips:
        st.info("No active trip suggestions. Pick a travel window to get new ones.")
        if st.button("Go to Calendar"):
            go("calendar")
        return

    st.caption(f"{len(trips)} Options")
    for trip in trips:
        flight = trip["flight"]
        hotel = trip["hotel"]
        with st.expander(f"{trip['destination']} | {trip.get('dates', '')} | {trip['totalPrice']:.0f} {trip['currency']}"):
            st.write(trip["summary"])
            if trip.get("highlights"):
                st.markdown("\n".join(f"- {h}" for h in trip["highlights"]))
            cols = st.columns(2)
            cols[0].markdown(
                f"**Flight** {flight['airline']} {flight['flightNumber']}  \n"
                f"{flight['departureAirport']} -> {flight['arrivalAirport']}  \n"
                f"{flight['departureTime']} to {flight['arrivalTime']}  \n"
                f"{flight['price']:.0f} {trip['currency']}"
            )
            rating = hotel.get("rating")
            cols[1].markdown(
                f"**Hotel** {hotel['name']}" + (f" ({rating:.1f}/5)" if rating is not None else "") + "  \n"
                f"{hotel.get('address', '')}  \n"
                f"{hotel['pricePerNight']:.0f} {trip['currency']} per night"
            )
            feedback_form(trip)


def email_preview_view(session: dict) -> None:
    st.header("Email preview")
    if not session["emailAvailable"]:
        st.info("No email has been generated yet.")
        return
    try:
        html = api("GET", "/email/preview")
    except requests.RequestException as exc:
        st.error(error_message(exc))
        return
    components.html(html, height=900, scrolling=True)


RENDERERS = {
    "preferences": preferences_view,
    "calendar": calendar_view,
    "dashboard": dashboard_view,
    "email-preview": email_preview_view,
}

st.set_page_config(page_title="Wanderlust AI", layout="wide")
st.title("Wanderlust AI")

try:
    current_session = api("GET", "/session")
except requests.RequestException as exc:
    st.error(f"Backend unavailable: {error_message(exc)}")
    st.stop()

if st.session_state.get("generation_error"):
    current_session["generationError"] = st.session_state.pop("generation_error")
if st.session_state.get("connection_error"):
    current_session["connectionError"] = st.session_state.pop("connection_error")

view = resolve_view(st.query_params.get("view"), bool(current_session.get("preferences")))
if st.query_params.get("view") != view:
    st.query_params["view"] = view

with st.sidebar:
    for name in VIEWS:
        if name == "email-preview" and not current_session["emailAvailable"]:
            continue
        if st.button(name.replace("-", " ").title(), disabled=name == view):
            go(name)

RENDERERS[view](current_session)
