from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path
from typing import Callable, Optional, TypeVar

from ..config import StorageSettings, get_settings
from ..domain import CalendarDocument
from .ics_codec import MalformedDocument, decode_calendar, encode_calendar, parse_calendar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InvalidUpload(ValueError):
    """Raised when a replacement document is not a parseable calendar."""


def decode_upload(payload: bytes) -> str:
    """Decode an uploaded document as UTF-8, rejecting anything that is not."""

    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidUpload(f"Uploaded calendar is not UTF-8 text: {exc}") from exc


def resolve_calendar_file(storage: StorageSettings) -> Path:
    """Prefer the configured calendar file; otherwise fall back to the user data directory."""

    if storage.calendar_file.exists():
        return storage.calendar_file
    storage.data_dir.mkdir(parents=True, exist_ok=True)
    return storage.fallback_file


class CalendarStore:
    """Whole-document persistence for the calendar file.

    Nothing is cached between calls: every ``load`` reads the file again and
    every ``save`` rewrites it in full.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        storage: Optional[StorageSettings] = None,
        default_duration: timedelta = timedelta(minutes=60),
    ) -> None:
        self._explicit_path = path
        self._storage = storage
        self._default_duration = default_duration

    @property
    def path(self) -> Path:
        if self._explicit_path is not None:
            return self._explicit_path
        return resolve_calendar_file(self._storage or get_settings().storage)

    def load(self) -> CalendarDocument:
        path = self.path
        if not path.exists():
            return CalendarDocument()
        try:
            text = path.read_text(encoding="utf-8")
            return decode_calendar(text, default_duration=self._default_duration)
        except (UnicodeDecodeError, MalformedDocument) as exc:
            logger.warning("Calendar file %s is unreadable, starting from an empty calendar: %s", path, exc)
            return CalendarDocument()

    def save(self, document: CalendarDocument) -> None:
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(encode_calendar(document), encoding="utf-8")
        logger.debug("Saved %d event(s) to %s", len(document.events), path)

    def mutate(self, callback: Callable[[CalendarDocument], T]) -> T:
        """Load, apply ``callback`` and save only when it reports a change (truthy result)."""

        document = self.load()
        result = callback(document)
        if result:
            self.save(document)
        return result

    def read_raw_document(self) -> str:
        path = self.path
        if not path.exists():
            return ""
        # Undecodable bytes are shown as U+FFFD; the file itself is never rewritten here.
        return path.read_text(encoding="utf-8", errors="replace")

    def replace_whole_document(self, raw_text: str) -> None:
        try:
            parse_calendar(raw_text or "")
        except MalformedDocument as exc:
            raise InvalidUpload(f"Uploaded calendar is invalid: {exc}") from exc
        path = self.path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(raw_text, encoding="utf-8")
        logger.info("Replaced calendar document at %s", path)


__all__ = ["CalendarStore", "InvalidUpload", "decode_upload", "resolve_calendar_file"]
