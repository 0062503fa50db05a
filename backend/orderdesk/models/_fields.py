"""
Helpers for reading loosely-typed Airtable field bags.
"""
import json
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Optional

from pydantic import PlainSerializer

from orderdesk.core.logging import get_logger

logger = get_logger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Dollar amounts: exact in Python, plain numbers on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def first_of(fields: dict[str, Any], *names: str, default: Any = None) -> Any:
    """Return the first non-empty value among several column spellings."""
    for name in names:
        value = fields.get(name)
        if value not in (None, ""):
            return value
    return default


def as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def as_decimal(value: Any, default: str = "0") -> Decimal:
    """Parse a price-like value, ignoring currency symbols and separators."""
    if value is None or value == "":
        return Decimal(default)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    cleaned = "".join(ch for ch in str(value) if ch.isdigit() or ch in ".-")
    try:
        return Decimal(cleaned) if cleaned else Decimal(default)
    except InvalidOperation:
        return Decimal(default)


def as_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable timestamp", value=value)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def load_json(value: Any, default: Any, *, field: str) -> Any:
    """Decode a JSON text column, falling back to ``default`` on bad data."""
    if value in (None, ""):
        return default
    if isinstance(value, (list, dict)):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError) as e:
        logger.warning("Malformed JSON column", field=field, error=str(e))
        return default
