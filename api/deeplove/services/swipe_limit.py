"""
Daily swipe quota for free-tier users.

The gate keeps ``(quota_date, used_count)`` per user behind a ``QuotaStore``.
The stored count resets to 0 in the same write that moves the date forward,
and is clamped at the daily limit when written.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Protocol
from zoneinfo import ZoneInfo

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..config import FREE_DAILY_SWIPE_LIMIT, SWIPE_TIMEZONE
from ..database import SessionLocal

logger = logging.getLogger(__name__)


class QuotaStoreError(Exception):
    """Raised by a quota store when the underlying persistence fails."""


class QuotaUnavailable(Exception):
    """A swipe could not be counted because the quota write failed."""


@dataclass(frozen=True)
class SwipeQuotaState:
    quota_date: str
    used_count: int


class QuotaStore(Protocol):
    def get(self, user_id: str) -> SwipeQuotaState | None: ...

    def reset(self, user_id: str, day: str) -> SwipeQuotaState:
        """Move the row to ``day`` with a zero count unless it is already on ``day``; return the stored state."""
        ...

    def increment(self, user_id: str, day: str, cap: int) -> int | None:
        """Count one swipe on ``day``; return the new count, or None once ``cap`` is reached."""
        ...


def local_today(tz: str = SWIPE_TIMEZONE) -> str:
    if tz:
        return datetime.now(ZoneInfo(tz)).date().isoformat()
    return date.today().isoformat()


class InMemoryQuotaStore:
    def __init__(self) -> None:
        self._rows: dict[str, SwipeQuotaState] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> SwipeQuotaState | None:
        with self._lock:
            return self._rows.get(user_id)

    def set(self, user_id: str, state: SwipeQuotaState) -> None:
        with self._lock:
            self._rows[user_id] = state

    def reset(self, user_id: str, day: str) -> SwipeQuotaState:
        with self._lock:
            row = self._rows.get(user_id)
            if row is None or row.quota_date != day:
                row = SwipeQuotaState(quota_date=day, used_count=0)
                self._rows[user_id] = row
            return row

    def increment(self, user_id: str, day: str, cap: int) -> int | None:
        with self._lock:
            row = self._rows.get(user_id)
            used = row.used_count if row and row.quota_date == day else 0
            if used >= cap:
                return None
            self._rows[user_id] = SwipeQuotaState(quota_date=day, used_count=used + 1)
            return used + 1


class SqlQuotaStore:
    """Quota rows in the ``swipe_quota`` table.

    ``increment`` is one conditional UPDATE, so concurrent requests from the
    same user cannot lose updates or push the count past ``cap``.
    """

    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def get(self, user_id: str) -> SwipeQuotaState | None:
        try:
            with self._session_factory() as db:
                row = db.execute(
                    text("SELECT quota_date, used_count FROM swipe_quota WHERE user_id=:user_id"),
                    {"user_id": user_id},
                ).mappings().first()
        except SQLAlchemyError as exc:
            raise QuotaStoreError(str(exc)) from exc
        if not row:
            return None
        return SwipeQuotaState(quota_date=str(row["quota_date"]), used_count=int(row["used_count"] or 0))

    def reset(self, user_id: str, day: str) -> SwipeQuotaState:
        params = {"user_id": user_id, "day": day}
        try:
            with self._session_factory() as db:
                # A row already on ``day`` keeps its count.
                db.execute(
                    text("UPDATE swipe_quota SET quota_date=:day, used_count=0 WHERE user_id=:user_id AND quota_date != :day"),
                    params,
                )
                row = db.execute(
                    text("SELECT quota_date, used_count FROM swipe_quota WHERE user_id=:user_id"),
                    params,
                ).mappings().first()
                if not row:
                    db.execute(
                        text("INSERT INTO swipe_quota (user_id, quota_date, used_count) VALUES (:user_id, :day, 0)"),
                        params,
                    )
                db.commit()
        except IntegrityError:
            # Row was inserted concurrently; the UPDATE path now applies.
            return self.reset(user_id, day)
        except SQLAlchemyError as exc:
            raise QuotaStoreError(str(exc)) from exc
        if not row:
            return SwipeQuotaState(quota_date=day, used_count=0)
        return SwipeQuotaState(quota_date=str(row["quota_date"]), used_count=int(row["used_count"] or 0))

    def increment(self, user_id: str, day: str, cap: int) -> int | None:
        params = {"user_id": user_id, "day": day, "cap": cap}
        try:
            with self._session_factory() as db:
                result = db.execute(
                    text(
                        """
                        UPDATE swipe_quota
                        SET used_count = CASE WHEN quota_date = :day THEN used_count + 1 ELSE 1 END,
                            quota_date = :day
                        WHERE user_id = :user_id
                          AND (quota_date != :day OR used_count < :cap)
                        """
                    ),
                    params,
                )
                if result.rowcount == 0:
                    exists = db.execute(
                        text("SELECT 1 FROM swipe_quota WHERE user_id=:user_id"),
                        {"user_id": user_id},
                    ).first()
                    if exists:
                        db.rollback()
                        return None
                    if cap <= 0:
                        return None
                    db.execute(
                        text("INSERT INTO swipe_quota (user_id, quota_date, used_count) VALUES (:user_id, :day, 1)"),
                        {"user_id": user_id, "day": day},
                    )
                    db.commit()
                    return 1
                row = db.execute(
                    text("SELECT used_count FROM swipe_quota WHERE user_id=:user_id"),
                    {"user_id": user_id},
                ).mappings().first()
                db.commit()
        except IntegrityError:
            return self.increment(user_id, day, cap)
        except SQLAlchemyError as exc:
            raise QuotaStoreError(str(exc)) from exc
        return int(row["used_count"]) if row else None


class SwipeLimitGate:
    """Per-user daily swipe gate.

    States are Available (``used < limit``) and Exhausted. Pro users bypass
    the gate: nothing is counted and ``swipes_remaining`` is None.
    """

    def __init__(
        self,
        store: QuotaStore,
        user_id: str,
        *,
        daily_limit: int = FREE_DAILY_SWIPE_LIMIT,
        is_pro: bool = False,
        today: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self.user_id = user_id
        self.daily_limit = daily_limit
        self.is_pro = is_pro
        self._today = today or local_today
        self._state = SwipeQuotaState(quota_date=self._today(), used_count=0)
        try:
            stored = store.get(user_id)
        except QuotaStoreError:
            logger.warning("[swipe] quota read failed user_id=%s; assuming full quota", user_id, exc_info=True)
            stored = None
        if stored is not None:
            self._state = stored
        self.check_and_reset_if_new_day()

    @property
    def state(self) -> SwipeQuotaState:
        return self._state

    @property
    def used_count(self) -> int:
        return self._state.used_count

    def check_and_reset_if_new_day(self) -> bool:
        """Move to today when the held date is stale.

        A count another gate already stored for today is kept, never zeroed.
        Returns True if the held date changed.
        """
        today = self._today()
        if self._state.quota_date == today:
            return False
        previous = self._state
        try:
            self._state = self._store.reset(self.user_id, today)
        except QuotaStoreError:
            logger.warning("[swipe] quota reset write failed user_id=%s", self.user_id, exc_info=True)
            self._state = SwipeQuotaState(quota_date=today, used_count=0)
        logger.debug("[swipe] day rollover user_id=%s %s -> %s", self.user_id, previous.quota_date, today)
        return True

    def swipes_remaining(self) -> int | None:
        if self.is_pro:
            return None
        return max(0, self.daily_limit - self._state.used_count)

    def is_exhausted(self) -> bool:
        if self.is_pro:
            return False
        return self._state.used_count >= self.daily_limit

    def register_swipe(self) -> bool:
        """Count one swipe. Returns False, counting nothing, once the quota is exhausted.

        Raises QuotaUnavailable if the count could not be persisted; the
        swipe is then not granted.
        """
        if self.is_pro:
            return True
        self.check_and_reset_if_new_day()
        if self.is_exhausted():
            return False
        day = self._state.quota_date
        try:
            new_count = self._store.increment(self.user_id, day, self.daily_limit)
        except QuotaStoreError as exc:
            logger.error("[swipe] quota write failed user_id=%s; swipe denied", self.user_id)
            raise QuotaUnavailable("Swipe quota is temporarily unavailable") from exc
        if new_count is None:
            self._state = SwipeQuotaState(quota_date=day, used_count=self.daily_limit)
            return False
        self._state = SwipeQuotaState(quota_date=day, used_count=min(new_count, self.daily_limit))
        return True
