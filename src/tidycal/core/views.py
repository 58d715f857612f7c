from __future__ import annotations

from typing import Dict, List, Union

from ..domain import CalendarDocument

EventRow = Dict[str, Union[str, int]]


def summarize(document: CalendarDocument) -> str:
    """Human-readable agenda grouped by day, all-day events included."""

    events = sorted(document.events, key=lambda event: event.starts_at)
    lines = ["Calendar summary:"]
    current_day = None
    for event in events:
        day = event.day.isoformat()
        if day != current_day:
            current_day = day
            lines.extend(["", day])
        title = event.title or "(untitled)"
        if event.all_day:
            lines.append(f"  (all-day) {title}")
        else:
            lines.append(f"  {event.starts_at:%H:%M}-{event.ends_at:%H:%M} {title}")
    lines.extend(["", f"Total events: {len(events)}"])
    return "\n".join(lines) + "\n"


def list_events(document: CalendarDocument) -> List[EventRow]:
    rows: List[EventRow] = []
    for event in document.events:
        if event.all_day:
            continue
        rows.append(
            {
                "title": event.title or "(untitled)",
                "date": event.starts_at.strftime("%Y-%m-%d"),
                "start": event.starts_at.strftime("%H:%M"),
                "end": event.ends_at.strftime("%H:%M"),
                "durationMinutes": max(0, round((event.ends_at - event.starts_at).total_seconds() / 60)),
            }
        )
    rows.sort(key=lambda row: f"{row['date']} {row['start']}")
    return rows
