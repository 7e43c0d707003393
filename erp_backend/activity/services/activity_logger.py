# activity/services/activity_logger.py

"""
======================================================
PATH: activity/services/activity_logger.py
======================================================
ACTIVITY LOGGER

Two write paths:

1) record_activity(...)
   Direct insert inside the caller's transaction. Used by the stock
   consumers (purchase / direct sale / production) whose audit row must
   commit or roll back together with the movements.

2) activity_logger.log(...)  (fire-and-forget queue)
   Entries are queued only after the caller's transaction commits
   (transaction.on_commit), so a rolled-back operation leaves no audit
   row and a flush never runs inside a business transaction.
   Queued entries are written with bulk_create when either:
   - the queue reaches ERP_ACTIVITY_LOG_BATCH_SIZE, or
   - ERP_ACTIVITY_LOG_FLUSH_SECONDS elapsed since the last flush
     (checked on the next log call; there is no background thread).
   Each write runs in its own atomic block. A failed batch is retried
   entry by entry; an entry that keeps failing is dropped (logged) after
   ERP_ACTIVITY_LOG_MAX_ATTEMPTS. Whatever is still queued at
   interpreter exit is flushed by an atexit hook; a hard crash may drop it.

Reads:
- get_recent / get_by_entity for the audit UI
- cleanup(retention_days) for the retention job
"""

from __future__ import annotations

import atexit
import logging
import threading
import time
from datetime import timedelta
from functools import partial

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from activity.models import ActivityLog

logger = logging.getLogger("activity")

Action = ActivityLog.Action


def _user_or_none(user):
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return user


def _entry_kwargs(
    *,
    action: str,
    entity_type: str,
    entity_id=None,
    description: str = "",
    user=None,
    log_level: str = ActivityLog.Level.INFO,
    ip_address: str | None = None,
    user_agent: str = "",
    metadata: dict | None = None,
    duration_ms: int | None = None,
) -> dict:
    return {
        "user": _user_or_none(user),
        "action": action,
        "entity_type": entity_type,
        "entity_id": "" if entity_id is None else str(entity_id),
        "description": description or "",
        "log_level": log_level,
        "ip_address": ip_address or None,
        "user_agent": (user_agent or "")[:255],
        "metadata": metadata or {},
        "duration_ms": duration_ms,
    }


def record_activity(**kwargs) -> ActivityLog:
    """Insert one audit row now, inside the current transaction."""
    return ActivityLog.objects.create(**_entry_kwargs(**kwargs))


def request_context(request) -> dict:
    """Extract ip / user agent / actor from a DRF request for log()."""
    if request is None:
        return {}
    meta = getattr(request, "META", {}) or {}
    forwarded = (meta.get("HTTP_X_FORWARDED_FOR") or "").split(",")[0].strip()
    return {
        "user": getattr(request, "user", None),
        "ip_address": forwarded or meta.get("REMOTE_ADDR") or None,
        "user_agent": meta.get("HTTP_USER_AGENT", ""),
    }


class ActivityLogger:
    def __init__(
        self,
        *,
        batch_size: int | None = None,
        flush_seconds: float | None = None,
        max_attempts: int | None = None,
    ):
        self._batch_size = batch_size
        self._flush_seconds = flush_seconds
        self._max_attempts = max_attempts
        # (entry kwargs, failed write attempts)
        self._queue: list[tuple[dict, int]] = []
        self._lock = threading.Lock()
        self._last_flush = time.monotonic()

    @property
    def batch_size(self) -> int:
        if self._batch_size is not None:
            return self._batch_size
        return max(int(getattr(settings, "ERP_ACTIVITY_LOG_BATCH_SIZE", 10)), 1)

    @property
    def flush_seconds(self) -> float:
        if self._flush_seconds is not None:
            return self._flush_seconds
        return float(getattr(settings, "ERP_ACTIVITY_LOG_FLUSH_SECONDS", 1.0))

    @property
    def max_attempts(self) -> int:
        if self._max_attempts is not None:
            return self._max_attempts
        return max(int(getattr(settings, "ERP_ACTIVITY_LOG_MAX_ATTEMPTS", 3)), 1)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._queue)

    def log(self, **kwargs) -> None:
        """Queue an entry once the caller's transaction commits."""
        entry = _entry_kwargs(**kwargs)
        transaction.on_commit(partial(self._enqueue, entry))

    def _enqueue(self, entry: dict) -> None:
        with self._lock:
            self._queue.append((entry, 0))
            size = len(self._queue)

        elapsed = time.monotonic() - self._last_flush
        if size >= self.batch_size or elapsed >= self.flush_seconds:
            self.flush()

    def log_crud(
        self,
        action: str,
        entity_type: str,
        entity_id,
        *,
        user=None,
        description: str = "",
        metadata: dict | None = None,
        request=None,
    ) -> None:
        ctx = request_context(request)
        if user is not None:
            ctx["user"] = user
        self.log(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            metadata=metadata,
            **ctx,
        )

    def flush(self) -> int:
        with self._lock:
            batch = self._queue
            self._queue = []
            self._last_flush = time.monotonic()

        if not batch:
            return 0

        try:
            with transaction.atomic():
                ActivityLog.objects.bulk_create([ActivityLog(**entry) for entry, _ in batch])
            return len(batch)
        except DatabaseError:
            logger.warning("Activity log batch write failed; retrying per entry", extra={"count": len(batch)})

        written = 0
        retry: list[tuple[dict, int]] = []
        for entry, attempts in batch:
            try:
                with transaction.atomic():
                    ActivityLog.objects.create(**entry)
                written += 1
            except DatabaseError:
                attempts += 1
                if attempts >= self.max_attempts:
                    logger.exception(
                        "Activity log entry dropped",
                        extra={"action": entry.get("action"), "entity_id": entry.get("entity_id"), "attempts": attempts},
                    )
                else:
                    retry.append((entry, attempts))

        if retry:
            with self._lock:
                self._queue[:0] = retry
        return written

    def discard(self) -> None:
        with self._lock:
            self._queue = []


activity_logger = ActivityLogger()
atexit.register(activity_logger.flush)


def get_recent(*, limit: int = 100, action: str | None = None, entity_type: str | None = None):
    qs = ActivityLog.objects.select_related("user")
    if action:
        qs = qs.filter(action=action)
    if entity_type:
        qs = qs.filter(entity_type=entity_type)
    return qs.order_by("-created_at", "-id")[: max(int(limit), 1)]


def get_by_entity(entity_type: str, entity_id):
    return ActivityLog.objects.filter(
        entity_type=entity_type, entity_id=str(entity_id)
    ).order_by("-created_at", "-id")


def cleanup(retention_days: int | None = None) -> int:
    days = int(
        retention_days
        if retention_days is not None
        else getattr(settings, "ERP_ACTIVITY_LOG_RETENTION_DAYS", 90)
    )
    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = ActivityLog.objects.filter(created_at__lt=cutoff).delete()

    logger.info("Activity log cleanup", extra={"retention_days": days, "deleted": deleted})
    return deleted
