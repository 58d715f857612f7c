from __future__ import annotations

from datetime import date
from typing import Sequence

ACTION_SCHEMA = """{
  "actions": [
    { "type": "create_event", "title": "...", "date": "yyyy-MM-dd", "time": "HH:mm", "durationMinutes": 60, "recurring": "non-recurring|daily|weekly|monthly|yearly" },
    { "type": "update_event", "title": "...", "date": "oldDate", "time": "oldTime", "newDate": "yyyy-MM-dd", "newTime": "HH:mm" },
    { "type": "resize_event", "title": "...", "date": "yyyy-MM-dd", "time": "HH:mm", "newDurationMinutes": 240 },
    { "type": "delete_event", "title": "...", "date": "yyyy-MM-dd", "time": "HH:mm" },
    { "type": "auto_space", "minGapMinutes": 60 },
    { "type": "bulk_update", "moves": [ { "title": "...", "date": "yyyy-MM-dd", "time": "HH:mm", "newDate": "yyyy-MM-dd", "newTime": "HH:mm" } ] },
    { "type": "rebalance_week" },
    { "type": "ask_clarification", "question": "..." },
    { "type": "respond", "message": "...", "includeSummary": false }
  ],
  "suggestions": [ { "note": "Optional human readable suggestion" } ]
}"""

RULES = (
    "Give every event a meaningful title (for example 'Dentist Appointment').",
    "When no time is given, use 10:00 local time.",
    "Prefer later slots in the day and days that already have fewer events.",
    "Do not create duplicates (same title and start); use update_event when the user implies a reschedule.",
    "Use resize_event with newDurationMinutes when the user changes how long an event lasts.",
    "Set durationMinutes on create_event when a duration is given; it defaults to 60.",
    "Move several events with one bulk_update action; each move may change both date and time.",
    "For 'free up <date>' or 'clear <date>' move events to later days with bulk_update unless the user says delete or remove.",
    "If it is unclear which event or which target is meant, use ask_clarification instead of guessing.",
    "Answer direct questions with a respond action; set includeSummary=true only when the user asks for a summary or overview.",
    "Without includeSummary, respond.message stays short (at most two sentences) and does not list events.",
    "Use rebalance_week when the user asks to spread events across the week.",
    "Use auto_space when the user asks for breaks or gaps between events.",
    "When the user confirms an earlier suggestion ('yes', 'do that'), turn it into concrete actions.",
    "When suggesting concrete time slots, phrase each note as: Create '<title>' on <yyyy-MM-dd> at <HH:mm>.",
    "Do not give medical advice; ask a clarification or suggest consulting a professional instead.",
    "Return JSON only, without Markdown or prose. With nothing to do, return {\"actions\":[],\"suggestions\":[]}.",
)


def build_instruction(today: date, week_start: date, week_end: date) -> str:
    lines = [
        "You are a calendar assistant. Convert the user's request into JSON only.",
        f"Today's date: {today.isoformat()}. Current week (ISO Monday-Sunday): {week_start.isoformat()} to {week_end.isoformat()}.",
        "The existing calendar (iCalendar text) is included below; use it to find events to update and to avoid duplicates.",
        "Use the conversation context to resolve pronouns and confirmations such as 'yes', 'move it' or 'the previous one'.",
        "For 'this week', pick a date in the current week that is not in the past, preferring the first available weekday.",
        "Never schedule before the current moment unless the user explicitly asks to backdate; otherwise move to the next reasonable future slot.",
        "Schema:",
        ACTION_SCHEMA,
        "Rules:",
        *(f"- {rule}" for rule in RULES),
    ]
    return "\n".join(lines)


def build_prompt(
    instruction: str,
    *,
    calendar_text: str,
    history: Sequence[str],
    request: str,
    history_window: int = 6,
) -> str:
    context = ""
    if history:
        recent = list(history)[-history_window:]
        context = "Conversation context (most recent first):\n" + "\n".join(reversed(recent)) + "\n"
    return f"{instruction}\n\nExisting calendar ICS:\n{calendar_text}\n\n{context}User request:\n{request}"
