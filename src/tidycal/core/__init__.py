"""Calendar document persistence and the scheduling engine."""

from .calendar_store import CalendarStore, InvalidUpload, decode_upload, resolve_calendar_file
from .conflicts import overlaps, resolve_conflict
from .ics_codec import MalformedDocument, decode_calendar, encode_calendar
from .matcher import find_event, find_index
from .mutators import create_event, delete, resize, update_start
from .scheduler import auto_space, rebalance_week, week_days
from .views import list_events, summarize

__all__ = [
    "CalendarStore",
    "InvalidUpload",
    "MalformedDocument",
    "auto_space",
    "create_event",
    "decode_calendar",
    "decode_upload",
    "delete",
    "encode_calendar",
    "find_event",
    "find_index",
    "list_events",
    "overlaps",
    "rebalance_week",
    "resize",
    "resolve_calendar_file",
    "resolve_conflict",
    "summarize",
    "update_start",
    "week_days",
]
