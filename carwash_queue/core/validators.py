"""
Input Validators and Parsers

This module provides the parsing and validation helpers used before any
store interaction:
- Localized currency strings ("R$ 1.234,56") to numbers
- Car model length
- Wash status values
- Timestamp normalization to server-local time
"""

import re
from datetime import date, datetime, time
from typing import Optional, Union

from carwash_queue.core.exceptions import ValidationError
from carwash_queue.core.setting import settings
from carwash_queue.db.models import WashStatus

CURRENCY_PREFIX = "R$"

# Either grouped thousands ("1.234.567,89") or a plain run of digits ("1234,5")
PRICE_PATTERN = re.compile(r"^(\d{1,3}(\.\d{3})+|\d+)(,\d+)?$")


def parse_price(text: Optional[Union[str, float]]) -> float:
    """
    Parse a Brazilian-formatted currency string into a number.

    The format is an optional "R$" prefix, "." as thousands separator and
    "," as decimal separator. Absent or empty input is a price of zero.

    Args:
        text: Price as typed by the operator

    Returns:
        The amount as a float

    Raises:
        ValidationError: If the text is not a valid amount

    Example:
        parse_price("R$ 1.234,56") -> 1234.56
        parse_price("50,00") -> 50.0
        parse_price("") -> 0.0
    """
    if text is None:
        return 0.0
    if isinstance(text, (int, float)):
        return float(text)

    cleaned = text.strip()
    if cleaned.upper().startswith(CURRENCY_PREFIX):
        cleaned = cleaned[len(CURRENCY_PREFIX):].strip()
    if not cleaned:
        return 0.0

    if not PRICE_PATTERN.match(cleaned):
        raise ValidationError(f"Invalid price: '{text}'", field="washPrice")

    return float(cleaned.replace(".", "").replace(",", "."))


def validate_car_model(car_model: Optional[str], max_length: Optional[int] = None) -> None:
    """
    Reject car models longer than the configured limit.

    Args:
        car_model: Car model text (None is accepted)
        max_length: Override for settings.CAR_MODEL_MAX_LENGTH

    Raises:
        ValidationError: If the car model is too long
    """
    limit = max_length if max_length is not None else settings.CAR_MODEL_MAX_LENGTH
    if car_model and len(car_model) > limit:
        raise ValidationError(
            f"Car model must have at most {limit} characters.",
            field="carModel"
        )


def parse_status(value) -> WashStatus:
    """
    Convert a raw status value into a WashStatus.

    Raises:
        ValidationError: If the value is not one of the known states
    """
    if isinstance(value, WashStatus):
        return value
    try:
        return WashStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in WashStatus)
        raise ValidationError(
            f"Unknown status '{value}'. Expected one of: {allowed}",
            field="status"
        )


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive server-local time; naive input is kept."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return the local 00:00:00.000 and 23:59:59.999 instants of a calendar day."""
    start = datetime.combine(day, time.min)
    end = datetime.combine(day, time(23, 59, 59, 999000))
    return start, end

