from datetime import datetime
from zoneinfo import ZoneInfo

from ..config import get_settings

VENUE_TZ = ZoneInfo(get_settings().venue_timezone)


def now_local() -> datetime:
    """Naive wall-clock time at the venue; the engine works in venue-local hours."""
    return datetime.now(VENUE_TZ).replace(tzinfo=None)
