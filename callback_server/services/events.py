"""Decide whether an authenticated callback should settle anything."""

from enum import Enum
from typing import Any

PAYMENT_STATUS_EVENT = "payment_status"
PAID_STATUS = "PAID"


class EventDecision(str, Enum):
    ACTIONABLE = "actionable"
    IGNORED = "ignored"


def classify_event(event_type: str | None, payload: Any) -> EventDecision:
    if event_type != PAYMENT_STATUS_EVENT:
        return EventDecision.IGNORED
    if not isinstance(payload, dict) or payload.get("status") != PAID_STATUS:
        return EventDecision.IGNORED
    return EventDecision.ACTIONABLE
