from datetime import date, datetime
from zoneinfo import ZoneInfo

from ..config import settings


def get_today() -> date:
    """Calendar date in the reference zone; validity periods compare on this.

    Used as a FastAPI dependency and overridden in tests to pin the calendar.
    """
    return datetime.now(ZoneInfo(settings.timezone)).date()
