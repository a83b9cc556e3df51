from __future__ import annotations

import html
import json
import logging
import re
from datetime import date, datetime, timedelta
from typing import List, Tuple

from app.llm.client import CompletionRequest, EmailContext, SuggestionContext
from app.llm.tools.search_tool import SearchTool

logger = logging.getLogger(__name__)

_DATED_ID = re.compile(r"^(?P<slug>.+)-\d{4}-\d{2}-\d{2}$")


def _slug(value: str) -> str:
    return "-".join(value.lower().split())


def _destination_slug(trip_id: str) -> str:
    match = _DATED_ID.match(trip_id)
    return match.group("slug") if match else trip_id


class MockGenerationBackend:
    """
    A deterministic stand-in for the generation service. Trips are priced
    from the static catalog, excluded and previously declined destinations
    are skipped, and the five best matches for the traveller's activity level
    and interests are returned, cheapest first within equal matches.
    """

    def __init__(self, search_tool: SearchTool | None = None):
        self.search_tool = search_tool or SearchTool()

    def complete(self, request: CompletionRequest) -> str:
        if isinstance(request.context, SuggestionContext):
            return json.dumps({"suggestions": self._suggestions(request.context)})
        if isinstance(request.context, EmailContext):
            return self._email(request.context)
        return ""

    def _suggestions(self, context: SuggestionContext) -> List[dict]:
        prefs = context.preferences
        start, end = self._dates(context.travel_event.start, context.travel_event.end)
        nights = max((end - start).days, 1)
        excluded = {e.lower() for e in prefs.excluded_destinations}
        declined = {_destination_slug(f.trip_id) for f in context.feedback_history if not f.accepted}

        ranked = []
        for destination in self.search_tool.destinations():
            if destination.lower() in excluded or _slug(destination) in declined:
                continue
            data = self.search_tool.lookup_destination(destination)
            trip = self._trip(destination, data, prefs, start, end, nights)
            ranked.append((-self._match_score(data, prefs), trip["totalPrice"], trip))
        ranked.sort(key=lambda r: (r[0], r[1]))
        trips = [trip for _, _, trip in ranked]
        logger.info("Mock backend priced %d trips, returning up to 5", len(trips))
        return trips[:5]

    @staticmethod
    def _match_score(data: dict, prefs) -> int:
        score = 1 if data["activity"] == prefs.activity_level.value else 0
        tags = set(data["tags"])
        return score + sum(1 for interest in prefs.interests if interest.lower() in tags)

    @staticmethod
    def _dates(start: str, end: str) -> Tuple[date, date]:
        try:
            return date.fromisoformat(start), date.fromisoformat(end)
        except ValueError:
            today = date.today()
            return today, today + timedelta(days=3)

    def _trip(self, destination, data, prefs, start: date, end: date, nights: int) -> dict:
        flight = data["flight"]
        hotel = data["hotel"]
        departure = datetime.combine(start, datetime.min.time()) + timedelta(hours=8, minutes=30)
        arrival = departure + timedelta(hours=flight["duration_hours"])
        total = flight["price"] + hotel["price_per_night"] * nights
        fits = "within" if total <= prefs.budget else "slightly above"
        return {
            "id": f"{_slug(destination)}-{start.isoformat()}",
            "destination": destination,
            "dates": f"{start.isoformat()} to {end.isoformat()}",
            "totalPrice": round(total, 2),
            "currency": prefs.currency,
            "summary": (
                f"{nights} nights in {destination} from {prefs.preferred_airport}, "
                f"{fits} your {prefs.budget:.0f} {prefs.currency} budget."
            ),
            "highlights": list(data["highlights"]),
            "flight": {
                "airline": flight["airline"],
                "flightNumber": f"{flight['code']}{100 + len(destination) * 7}",
                "departureAirport": prefs.preferred_airport,
                "arrivalAirport": data["airport"],
                "departureTime": departure.isoformat(timespec="minutes"),
                "arrivalTime": arrival.isoformat(timespec="minutes"),
                "price": flight["price"],
            },
            "hotel": {
                "name": hotel["name"],
                "rating": hotel["rating"],
                "address": hotel["address"],
                "pricePerNight": hotel["price_per_night"],
            },
        }

    @staticmethod
    def _email(context: EmailContext) -> str:
        rows = []
        sections = []
        for trip in context.suggestions:
            dest = html.escape(trip.destination)
            price = f"{trip.total_price:.0f} {html.escape(trip.currency)}"
            rows.append(
                f"<tr><td style='padding:6px'>{dest}</td>"
                f"<td style='padding:6px'>{html.escape(trip.dates)}</td>"
                f"<td style='padding:6px'>{price}</td></tr>"
            )
            route = f"{trip.flight.departure_airport} -> {trip.flight.arrival_airport}"
            sections.append(
                "<div style='border:1px solid #cbd5e1;border-radius:8px;padding:16px;margin:16px 0'>"
                f"<h2 style='color:#0f766e;margin:0 0 8px'>{dest}</h2>"
                f"<p><strong>Total:</strong> {price}</p>"
                f"<p><strong>Flight:</strong> {html.escape(trip.flight.airline)} "
                f"{html.escape(trip.flight.flight_number)}, {html.escape(route)}, "
                f"{html.escape(trip.flight.departure_time)} to {html.escape(trip.flight.arrival_time)}</p>"
                f"<p><strong>Hotel:</strong> {html.escape(trip.hotel.name)}, "
                f"{trip.hotel.price_per_night:.0f} {html.escape(trip.currency)} per night</p>"
                "<a href='#' style='background:#0d9488;color:#fff;padding:8px 16px;"
                "border-radius:6px;text-decoration:none;margin-right:8px'>Accept</a>"
                "<a href='#' style='background:#e2e8f0;color:#1e3a8a;padding:8px 16px;"
                "border-radius:6px;text-decoration:none'>Decline</a>"
                "</div>"
            )
        return (
            "<!DOCTYPE html><html><head><meta name='viewport' "
            "content='width=device-width, initial-scale=1'>"
            "<title>Your Top 5 Travel Recommendations</title></head>"
            "<body style='font-family:Arial,sans-serif;color:#1e293b;max-width:640px;margin:auto'>"
            f"<h1 style='color:#1d4ed8'>Hi {html.escape(context.recipient_name)},</h1>"
            "<p>Here are the trips we picked for you.</p>"
            "<table style='width:100%;border-collapse:collapse'>"
            "<tr style='background:#dbeafe'><th>Destination</th><th>Dates</th><th>Total</th></tr>"
            + "".join(rows)
            + "</table>"
            + "".join(sections)
            + "</body></html>"
        )
