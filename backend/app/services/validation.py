"""Input validation for event and performance creation.

Each rule contributes its own error string so every violation is reported
at once.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from app.utils.dates import ensure_utc, utcnow


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def _provided(value: Any) -> bool:
    return value is not None and value != ""


def event_date_errors(event_date: Optional[datetime], now: Optional[datetime] = None) -> list[str]:
    if event_date is None:
        return ["Event date is required"]
    if ensure_utc(event_date) <= ensure_utc(now or utcnow()):
        return ["Event date must be in the future"]
    return []


def venue_mode_errors(venue_id: Optional[str], external_venue_name: Optional[str]) -> list[str]:
    """Exactly one of an internal venue or an external venue name."""
    if not venue_id and not external_venue_name:
        return ["Either venue ID or external venue name is required"]
    if venue_id and external_venue_name:
        return ["Cannot specify both internal venue and external venue"]
    return []


def validate_event_creation(data: Mapping[str, Any], now: Optional[datetime] = None) -> ValidationResult:
    """Validate event-creation fields (title, future date, creator, venue mode, numerics)."""
    errors: list[str] = []

    title = data.get("title")
    if not title or not str(title).strip():
        errors.append("Title is required")

    errors.extend(event_date_errors(data.get("event_date"), now))

    if not data.get("created_by"):
        errors.append("Creator ID is required")

    errors.extend(venue_mode_errors(data.get("venue_id"), data.get("external_venue_name")))

    total_hours = data.get("total_hours")
    if _provided(total_hours) and total_hours <= 0:
        errors.append("Total hours must be positive")

    total_budget = data.get("total_budget")
    if _provided(total_budget) and total_budget <= 0:
        errors.append("Total budget must be positive")

    return ValidationResult(valid=not errors, errors=errors)


def validate_performance(data: Mapping[str, Any]) -> ValidationResult:
    """Validate performance-creation fields."""
    errors: list[str] = []

    if not data.get("event_id"):
        errors.append("Event ID is required")
    if not data.get("artist_id"):
        errors.append("Artist ID is required")

    proposed_fee = data.get("proposed_fee")
    if _provided(proposed_fee) and proposed_fee < 0:
        errors.append("Proposed fee cannot be negative")

    agreed_fee = data.get("agreed_fee")
    if _provided(agreed_fee) and agreed_fee < 0:
        errors.append("Agreed fee cannot be negative")

    hours = data.get("hours")
    if _provided(hours) and hours <= 0:
        errors.append("Performance hours must be positive")

    return ValidationResult(valid=not errors, errors=errors)
