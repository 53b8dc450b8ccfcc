"""Custom SQLAlchemy column types."""

import re
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.types import Text, TypeDecorator

_FRACTION = re.compile(r"\.(\d+)")


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime stored as an RFC 3339 string in UTC.

    Values are written with a fixed width (microsecond precision, ``+00:00``
    offset) so that ``ORDER BY`` on the text column sorts chronologically.
    Naive datetimes are rejected rather than guessed at.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return value
        if not isinstance(value, datetime):
            raise TypeError(f"expected datetime, got {type(value).__name__}")
        if value.tzinfo is None:
            raise ValueError("naive datetimes cannot be stored")
        return value.astimezone(timezone.utc).isoformat(timespec="microseconds")

    def process_result_value(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return value
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        # fromisoformat wants exactly 6 fraction digits; other writers may
        # use anything from 1 to 9
        text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            raise ValueError(f"stored timestamp {value!r} has no UTC offset")
        return parsed.astimezone(timezone.utc)
