from datetime import datetime, timezone
from typing import Any, Optional
import time

from dateutil import parser as date_parser


class DateUtils:
    """
    Timestamp helpers for the TEXT date columns (createdat, updatedat, publishat)

    All stored timestamps are ISO 8601 strings in UTC.
    """

    UTC = timezone.utc

    @classmethod
    def now_utc(cls) -> datetime:
        """Get current UTC datetime - always use this for database storage"""
        return datetime.now(cls.UTC)

    @classmethod
    def now_iso(cls) -> str:
        """ISO 8601 UTC timestamp with millisecond precision and a Z suffix"""
        return cls.now_utc().isoformat(timespec='milliseconds').replace('+00:00', 'Z')

    @staticmethod
    def now_millis() -> int:
        """Epoch milliseconds, the unit used by the credential cache"""
        return int(time.time() * 1000)

    @classmethod
    def parse_iso_string(cls, value: Any) -> Optional[datetime]:
        """
        Parse a stored timestamp, returning None when it is empty or invalid

        Naive values are assumed to be UTC.
        """
        if not value or not isinstance(value, str):
            return None
        try:
            parsed = date_parser.isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=cls.UTC)
        return parsed.astimezone(cls.UTC)

    @classmethod
    def is_past(cls, value: Any, now: Optional[datetime] = None) -> bool:
        """True when the timestamp is set and not in the future"""
        parsed = cls.parse_iso_string(value)
        if parsed is None:
            return False
        return parsed <= (now or cls.now_utc())
