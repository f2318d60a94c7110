"""
Shared Validators Module.

Common parsing and validation utilities for request input.
"""
import re
from datetime import datetime, date, time
from typing import Optional, Any
from uuid import UUID

from django.core.exceptions import ValidationError


DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
CLOCK_PATTERN = re.compile(r'^\d{2}:\d{2}$')


# =============================================================================
# UUID VALIDATORS
# =============================================================================

def validate_uuid(value: Any, field_name: str = "value") -> UUID:
    """Validate and convert a value to UUID."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (ValueError, TypeError):
        raise ValidationError(f"Invalid UUID format for {field_name}")


def parse_uuid(value: Any) -> Optional[UUID]:
    """Lenient variant of ``validate_uuid`` that returns None on bad input."""
    try:
        return validate_uuid(value)
    except ValidationError:
        return None


# =============================================================================
# DATE/TIME VALIDATORS
# =============================================================================

def validate_iso_date(value: Any, field_name: str = "date") -> date:
    """Parse a strict ``YYYY-MM-DD`` string."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValidationError(f"{field_name} must use the YYYY-MM-DD format")
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid date")


def validate_clock_time(value: Any, field_name: str = "time") -> time:
    """Parse a strict ``HH:MM`` string."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not CLOCK_PATTERN.match(value):
        raise ValidationError(f"{field_name} must use the HH:MM format")
    try:
        return datetime.strptime(value, '%H:%M').time()
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid time")


def validate_time_range(
    start: time,
    end: time,
    field_name: str = "time range"
) -> None:
    """Validate that a clock range is non-empty."""
    if start >= end:
        raise ValidationError(f"Start time must be before end time for {field_name}")

