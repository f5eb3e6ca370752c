"""
Centralized error handling for the live-state and offers engine.
Typed exceptions for services plus a rule table so routes stay thin and new error types are easy to add.

Eligibility failures on redemption are NOT exceptions: they come back as
reki.services.offers.eligibility.EligibilityError values on the redemption result.
"""
from __future__ import annotations

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Exceptions raised by services
# ---------------------------------------------------------------------------


class RekiError(Exception):
    """Base class for expected engine errors (mapped to HTTP by error_to_http)."""


class NotFoundError(RekiError):
    entity = "Record"

    def __init__(self, entity_id: object):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} {entity_id} not found")


class CityNotFoundError(NotFoundError):
    entity = "City"


class VenueNotFoundError(NotFoundError):
    entity = "Venue"


class LiveStateNotFoundError(NotFoundError):
    entity = "Live state for venue"


class ScheduleRuleNotFoundError(NotFoundError):
    entity = "Vibe schedule"


class OfferNotFoundError(NotFoundError):
    entity = "Offer"


class InvalidInputError(RekiError):
    """Malformed rule, offer window, enum value or scenario. Raised before anything is persisted."""


class RedemptionUnavailableError(RekiError):
    """Store failed during redemption. Retryable: a retry re-runs the full eligibility check."""


# ---------------------------------------------------------------------------
# Status codes and error rules: (exception type, status_code). First match wins.
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_SERVICE_UNAVAILABLE = 503  # store down; client may retry
STATUS_INTERNAL_ERROR = 500

ERROR_RULES: list[tuple[type[Exception], int]] = [
    (NotFoundError, STATUS_NOT_FOUND),
    (InvalidInputError, STATUS_BAD_REQUEST),
    (RedemptionUnavailableError, STATUS_SERVICE_UNAVAILABLE),
]


def error_to_http(exc: Exception) -> HTTPException:
    """
    Map a service exception into an HTTPException.
    Uses ERROR_RULES for known error types; otherwise returns 500 with the exception message.
    """
    for exc_type, status_code in ERROR_RULES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))
