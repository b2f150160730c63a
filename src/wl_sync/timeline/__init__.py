from .service import CAL_DATE_END_KEY, CAL_DATE_START_KEY, TimelineService

__all__ = ["TimelineService", "CAL_DATE_START_KEY", "CAL_DATE_END_KEY"]
