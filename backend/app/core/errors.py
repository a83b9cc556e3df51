"""Failure classes shared by the stores, the AI layer and the HTTP routes.

Every class carries the HTTP status the API answers with; none of them is
fatal to the process.
"""


class PlannerError(Exception):
    """Base class for recoverable planner failures."""

    status_code = 500


class InputValidationError(PlannerError, ValueError):
    """User input rejected at the form that produced it."""

    status_code = 422


class InvalidTransitionError(PlannerError):
    """Action not allowed in the current session stage."""

    status_code = 409


class CalendarConnectionError(PlannerError, ConnectionError):
    """Calendar connect attempt failed; callers may retry without limit."""

    status_code = 503


class ConfigurationError(PlannerError):
    """AI credential missing or provider misconfigured."""

    status_code = 500


class ServiceError(PlannerError):
    """The AI service could not be reached or answered with an error."""

    status_code = 502


class GenerationError(PlannerError):
    status_code = 502


class SuggestionDecodeError(GenerationError):
    """The AI reply did not match the suggestion schema."""


NO_SUITABLE_TRIPS_MESSAGE = (
    "No suitable trips found. Please try adjusting your preferences."
)


class NoSuitableTripsError(GenerationError):
    status_code = 404

    def __init__(self, message: str = NO_SUITABLE_TRIPS_MESSAGE):
        super().__init__(message)


class CompositionError(PlannerError):
    status_code = 502
