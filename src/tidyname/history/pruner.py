"""Pruning of old history entries."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

from .models import HistoryStore


class PruneConfig(BaseModel):
    """Retention limits for the history store."""

    max_entries: int = Field(default=100, ge=0)
    max_age_days: int = Field(default=30, ge=0)


DEFAULT_PRUNE_CONFIG = PruneConfig()


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def should_prune(
    store: HistoryStore, config: PruneConfig = DEFAULT_PRUNE_CONFIG, now: Optional[datetime] = None
) -> bool:
    """Return True when pruning would remove at least one entry."""
    if len(store.entries) > config.max_entries:
        return True
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=config.max_age_days)
    return any(_as_utc(entry.timestamp) < cutoff for entry in store.entries)


def prune_history(
    store: HistoryStore, config: PruneConfig = DEFAULT_PRUNE_CONFIG, now: Optional[datetime] = None
) -> tuple[HistoryStore, int]:
    """Drop entries beyond ``max_entries`` and entries older than ``max_age_days``.

    Args:
        store: Store to prune; it is not modified.
        config: Retention limits.
        now: Reference time, defaults to the current time.

    Returns:
        tuple[HistoryStore, int]: The pruned store and how many entries were removed.
        ``last_pruned`` only changes when something was removed.
    """
    current = now or datetime.now(timezone.utc)
    cutoff = current - timedelta(days=config.max_age_days)
    kept = [entry for entry in store.entries[: config.max_entries] if _as_utc(entry.timestamp) >= cutoff]
    removed = len(store.entries) - len(kept)
    if not removed:
        return store, 0
    return store.model_copy(update={"entries": kept, "last_pruned": current}), removed


__all__ = ["DEFAULT_PRUNE_CONFIG", "PruneConfig", "prune_history", "should_prune"]
