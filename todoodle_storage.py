#!/usr/bin/env python3
"""
Persistent storage for todoodles.

The whole list lives in memory and is mirrored to a single JSON file. The
file is rewritten in full after every mutation, so a retried save is always
safe. Concurrent edits to the file from other processes are not supported
and are overwritten by the next save.
"""

import asyncio
import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

ONE_MILLISECOND = timedelta(milliseconds=1)


class PersistenceError(Exception):
    """Raised when the todoodles file could not be written"""


class TodoItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    text: str
    created_at: datetime = Field(alias="createdAt")
    completed: bool = False
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")
    time_to_complete: Optional[int] = Field(default=None, alias="timeToComplete", ge=0)

    @field_validator("created_at", "completed_at")
    @classmethod
    def assume_local_time(cls, value: Optional[datetime]) -> Optional[datetime]:
        # Naive timestamps are read as local time
        if value is not None and value.tzinfo is None:
            return value.astimezone()
        return value

    @model_validator(mode="after")
    def check_completion_fields(self) -> "TodoItem":
        if not self.completed:
            self.completed_at = None
            self.time_to_complete = None
            return self

        if self.completed_at is None:
            raise ValueError("completed todoodle is missing completedAt")
        if self.time_to_complete is None:
            self.time_to_complete = elapsed_ms(self.created_at, self.completed_at)
        return self

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def elapsed_ms(start: datetime, end: datetime) -> int:
    return max(0, (end - start) // ONE_MILLISECOND)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TodoodleStore:
    """Handles the todoodle list and its JSON file"""

    def __init__(self, file_path, clock: Callable[[], datetime] = None):
        self.file_path = Path(file_path)
        self.todoodles: List[TodoItem] = []
        self.last_id = 0
        self._clock = clock or _utc_now
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Loading and saving
    # ------------------------------------------------------------------

    async def initialize(self):
        """Load todoodles from file, falling back to an empty list"""
        async with self._lock:
            try:
                self._load()
            except (OSError, ValueError) as e:
                logger.error(f"❌ Error loading todoodles: {e}")
                self.todoodles = []
                self.last_id = 0
                try:
                    self._write()
                except OSError as save_error:
                    logger.error(f"❌ Failed to save empty todoodles state: {save_error}")

    def _load(self):
        logger.info(f"📁 Loading todoodles from {self.file_path}")

        directory = self.file_path.parent
        if not directory.exists():
            logger.info(f"📁 Directory {directory} does not exist, creating it...")
            directory.mkdir(parents=True, exist_ok=True)

        try:
            data = json.loads(self.file_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.info(f"📁 No existing todoodles file found at {self.file_path}, creating new file")
            self._reset_file()
        except json.JSONDecodeError:
            logger.warning("❌ Invalid JSON in todoodles file, initializing with empty list")
            self._reset_file()
        else:
            if isinstance(data, list):
                self.todoodles = self._validate_items(data)
            else:
                logger.warning("❌ Invalid todoodles data format, initializing with empty list")
                self._reset_file()

        self.last_id = self._highest_id()
        logger.info(f"📁 Loaded {len(self.todoodles)} todoodles, last ID: {self.last_id}")

    def _reset_file(self):
        self.todoodles = []
        self._write()

    @staticmethod
    def _validate_items(data: List[Any]) -> List[TodoItem]:
        items = []
        seen_ids = set()
        for position, raw_item in enumerate(data):
            try:
                item = TodoItem.model_validate(raw_item)
            except ValidationError as e:
                logger.warning(
                    f"⚠️ Skipping invalid todoodle at position {position}: "
                    f"{e.error_count()} validation error(s)"
                )
                continue

            if item.id in seen_ids:
                logger.warning(f"⚠️ Skipping todoodle at position {position}: duplicate ID {item.id}")
                continue
            seen_ids.add(item.id)
            items.append(item)
        return items

    def _highest_id(self) -> int:
        highest = 0
        for todoodle in self.todoodles:
            try:
                numeric_id = int(todoodle.id)
            except ValueError:
                continue
            highest = max(highest, numeric_id)
        return highest

    def _write(self):
        """Write the full list to a temporary file, then rename it over the target"""
        payload = json.dumps([todoodle.to_json() for todoodle in self.todoodles], indent=2, ensure_ascii=False)
        temp_file = self.file_path.with_name(self.file_path.name + ".tmp")
        temp_file.write_text(payload, encoding="utf-8")
        try:
            temp_file.replace(self.file_path)
        except OSError:
            temp_file.unlink(missing_ok=True)
            raise

    def _save(self):
        try:
            logger.debug(f"💾 Saving {len(self.todoodles)} todoodles to {self.file_path}")
            self._write()
        except OSError as e:
            logger.error(f"❌ Error saving todoodles: {e}")
            raise PersistenceError(f"Failed to save todoodles to {self.file_path}: {e}") from e
        logger.info(f"💾 Saved {len(self.todoodles)} todoodles to {self.file_path}")

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add(self, text: str) -> TodoItem:
        """Add a new todoodle"""
        async with self._lock:
            self.last_id += 1
            todoodle = TodoItem(id=str(self.last_id), text=text, created_at=self._clock())
            self.todoodles.append(todoodle)
            self._save()

        logger.info(f"📝 Added new todoodle with ID {todoodle.id}: \"{todoodle.text}\"")
        return todoodle

    async def complete_by_id(self, todoodle_id: str) -> Optional[TodoItem]:
        """Mark a todoodle completed; None if it is missing or already completed"""
        async with self._lock:
            return self._complete(self._find(todoodle_id))

    async def complete_by_text(self, text: str) -> Optional[TodoItem]:
        """Complete the first todoodle, in list order, matching the search text"""
        async with self._lock:
            matches = self.search(text)
            if not matches:
                return None
            return self._complete(matches[0])

    def _find(self, todoodle_id: str) -> Optional[TodoItem]:
        for todoodle in self.todoodles:
            if todoodle.id == todoodle_id:
                return todoodle
        return None

    def _complete(self, todoodle: Optional[TodoItem]) -> Optional[TodoItem]:
        if todoodle is None or todoodle.completed:
            return None

        now = self._clock()
        todoodle.completed = True
        todoodle.completed_at = now
        todoodle.time_to_complete = elapsed_ms(todoodle.created_at, now)
        self._save()

        logger.info(f"🎉 Completed todoodle {todoodle.id} after {todoodle.time_to_complete} ms")
        return todoodle

    async def delete_by_id(self, todoodle_id: str) -> bool:
        """Delete a todoodle, saving only when something was removed"""
        async with self._lock:
            remaining = [todoodle for todoodle in self.todoodles if todoodle.id != todoodle_id]
            if len(remaining) == len(self.todoodles):
                return False

            self.todoodles = remaining
            self._save()

        logger.info(f"🗑️ Deleted todoodle {todoodle_id}")
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search(self, query: str) -> List[TodoItem]:
        """Case-insensitive search; every term must appear in the text"""
        terms = query.lower().split()
        return [
            todoodle for todoodle in self.todoodles
            if all(term in todoodle.text.lower() for term in terms)
        ]

    def list(self) -> List[TodoItem]:
        """All todoodles, newest first"""
        return sorted(self.todoodles, key=lambda todoodle: todoodle.created_at, reverse=True)

    def list_today(self) -> List[TodoItem]:
        start_of_today = self._clock().astimezone().replace(hour=0, minute=0, second=0, microsecond=0)
        return [todoodle for todoodle in self.list() if todoodle.created_at >= start_of_today]

    def list_incomplete(self) -> List[TodoItem]:
        return [todoodle for todoodle in self.list() if not todoodle.completed]

    def get_stats(self) -> dict:
        """Get storage statistics"""
        completed = sum(1 for todoodle in self.todoodles if todoodle.completed)
        return {
            'total_todoodles': len(self.todoodles),
            'completed_todoodles': completed,
            'incomplete_todoodles': len(self.todoodles) - completed,
            'last_id': self.last_id,
            'storage_location': str(self.file_path.absolute()),
            'file_size_bytes': self.file_path.stat().st_size if self.file_path.exists() else 0,
        }
