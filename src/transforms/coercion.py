"""Field coercion helpers for raw sheet cells.

Every helper takes a raw cell (string or None) and either returns a typed
value or raises ``MappingError`` naming the offending column.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation

from core.asset_url import is_asset_url
from core.errors import MappingError

_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%Y/%m/%d")
_DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
)


def optional_text(value: str | None) -> str | None:
    """Trim text and collapse blank values to None."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def required_text(value: str | None, column: str) -> str:
    text = optional_text(value)
    if text is None:
        raise MappingError(f"missing required column '{column}'", field_name=column)
    return text


def parse_decimal(value: str | None, column: str) -> Decimal | None:
    """Parse a numeric cell, accepting thousands separators.

    Returns:
        Parsed decimal, or None for blank cells.

    Raises:
        MappingError: If the cell holds non-numeric text.
    """
    text = optional_text(value)
    if text is None:
        return None
    cleaned = text.replace(" ", "").replace(",", "")
    try:
        parsed = Decimal(cleaned)
    except InvalidOperation as error:
        raise MappingError(
            f"column '{column}' is not numeric: {text!r}", field_name=column
        ) from error
    if not parsed.is_finite():
        raise MappingError(f"column '{column}' is not a finite number: {text!r}", field_name=column)
    return parsed


def float_or_default(value: str | None, column: str, default: float | None) -> float | None:
    """Parse a float, falling back to ``default`` for blank or invalid cells."""
    try:
        parsed = parse_decimal(value, column)
    except MappingError:
        return default
    return default if parsed is None else float(parsed)


def int_or_default(value: str | None, column: str, default: int | None) -> int | None:
    """Parse an int (truncating decimals), falling back to ``default``."""
    try:
        parsed = parse_decimal(value, column)
    except MappingError:
        return default
    return default if parsed is None else int(parsed)


def required_float(value: str | None, column: str) -> float:
    parsed = parse_decimal(value, column)
    if parsed is None:
        raise MappingError(f"missing required column '{column}'", field_name=column)
    return float(parsed)


def required_int(value: str | None, column: str) -> int:
    parsed = parse_decimal(value, column)
    if parsed is None:
        raise MappingError(f"missing required column '{column}'", field_name=column)
    return int(parsed)


def optional_date(value: str | None, column: str) -> date | None:
    """Parse an ISO or day-first date cell.

    Raises:
        MappingError: If the cell is not blank and matches no known format.
    """
    text = optional_text(value)
    if text is None:
        return None
    for date_format in _DATE_FORMATS:
        try:
            return datetime.strptime(text, date_format).date()
        except ValueError:
            continue
    try:
        return _parse_datetime(text, column).date()
    except MappingError as error:
        raise MappingError(
            f"column '{column}' is not a date: {text!r}", field_name=column
        ) from error


def required_date(value: str | None, column: str) -> date:
    parsed = optional_date(value, column)
    if parsed is None:
        raise MappingError(f"missing required column '{column}'", field_name=column)
    return parsed


def optional_timestamp(value: str | None, column: str) -> datetime | None:
    """Parse a timestamp cell into an aware UTC datetime."""
    text = optional_text(value)
    if text is None:
        return None
    return _parse_datetime(text, column)


def optional_url(value: str | None, column: str) -> str | None:
    """Validate an asset reference cell.

    Raises:
        MappingError: If the cell is not blank and not a fully-qualified URL.
    """
    text = optional_text(value)
    if text is None:
        return None
    if not is_asset_url(text):
        raise MappingError(
            f"column '{column}' is not a fully-qualified URL: {text!r}", field_name=column
        )
    return text


def _parse_datetime(text: str, column: str) -> datetime:
    parsed: datetime | None = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for datetime_format in _DATETIME_FORMATS + _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, datetime_format)
                break
            except ValueError:
                continue
    if parsed is None:
        raise MappingError(f"column '{column}' is not a timestamp: {text!r}", field_name=column)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
