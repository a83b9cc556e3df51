import json
from typing import List, Sequence

from app.models.schemas import CalendarEvent, TripFeedback, TripSuggestion, UserPreferences

SUGGESTION_SYSTEM_INSTRUCTION = (
    "You are a helpful travel assistant focusing on budget optimization and personalization."
)

SUGGESTION_COUNT = 5


def feedback_digest(history: Sequence[TripFeedback]) -> str:
    """Summarize past accepts/declines so new suggestions lean away from dislikes."""
    declined = [
        {"tripId": f.trip_id, "reason": f.reason.value if f.reason else None, "feedbackText": f.feedback_text}
        for f in history
        if not f.accepted
    ]
    accepted = [{"tripId": f.trip_id, "feedbackText": f.feedback_text} for f in history if f.accepted]

    lines: List[str] = []
    if declined:
        lines.append(
            "Avoid suggestions similar to these declined ones (user feedback included): "
            f"{json.dumps(declined)}."
        )
    if accepted:
        lines.append(f"The user previously liked these types of trips: {json.dumps(accepted)}.")
    return "\n".join(lines)


def build_suggestion_prompt(
    prefs: UserPreferences, event: CalendarEvent, history: Sequence[TripFeedback]
) -> str:
    return f"""You are an expert travel agent.
User Preferences:
- Origin City: {prefs.origin_city}
- Preferred Departure Airport: {prefs.preferred_airport}
- Budget: {prefs.budget:g} {prefs.currency}
- Activity Level: {prefs.activity_level.value}
- Interests: {", ".join(prefs.interests)}
- Excluded: {", ".join(prefs.excluded_destinations)}

Calendar Event Trigger:
- Event: "{event.title}"
- Dates: {event.start} to {event.end}

Task:
Find the {SUGGESTION_COUNT} best value (cheapest but comfortable) flight and hotel combinations for this specific date range and user profile.
{feedback_digest(history)}

IMPORTANT:
- Flights must originate from the user's preferred airport ({prefs.preferred_airport}).
- Ensure flight times and duration are realistic for the destination.
- Ensure the total price is within or close to the budget.
- Generate realistic mock data for specific airlines, flight numbers, and hotels.
"""


def build_email_prompt(suggestions: Sequence[TripSuggestion], recipient_name: str) -> str:
    data = json.dumps([s.to_wire() for s in suggestions])
    return f"""Create a professional, responsive HTML email template.
Subject: Your Top {len(suggestions)} Travel Recommendations

Content:
- Greeting to {recipient_name}.
- A brief summary table of the {len(suggestions)} suggestions provided below.
- Detailed sections for each suggestion (Destination, Price, Flight, Hotel, Dates).
- Explicitly mention the flight route formatted as ORIGIN -> DESTINATION (e.g. SFO -> LHR) and times.
- For EACH suggestion, include a simulated "Accept" and "Decline" button/link.
  (These links do not work without a backend, but style them to look functional.)
- Use inline CSS for styling. Theme: Clean, Modern, Blue/Teal.
- Return only the complete HTML document.

Suggestions Data:
{data}
"""
