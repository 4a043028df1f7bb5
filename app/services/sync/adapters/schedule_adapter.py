"""Shared persistence for schedule fetchers.

Every schedule source resolves its rows against stored games with
ScheduleMatcher before upserting, so the same game reported by two providers
ends up as one games_schedule row.
"""
from datetime import date, datetime
from typing import Any, Optional

from app.repositories.schedule_repository import ScheduleRepository
from app.services.core.base_api_adapter import BaseAPIAdapter, FetchResult
from app.services.sync.matchers.schedule_matcher import ScheduleMatcher


def parse_game_date(value: Any, default: date) -> date:
    """Accept date objects, "YYYY-MM-DD" and ISO timestamps; fall back to `default`."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            return default
    return default


def parse_score(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class BaseScheduleAdapter(BaseAPIAdapter):
    """Schedule fetcher base: subclasses implement fetch()."""

    def persist(self, result: FetchResult) -> int:
        matcher = ScheduleMatcher(self.db)
        rows, methods = matcher.resolve_batch(result.rows)
        repo = ScheduleRepository(self.db)
        count = repo.upsert_games(rows)
        repo.save()
        self._record_upsert("games_schedule", result, count)
        result.message = result.message or f"Match methods: {methods}"
        return count
