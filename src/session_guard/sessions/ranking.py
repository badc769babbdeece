"""Orderings and namespace aggregation over scanned sessions."""

from __future__ import annotations

from collections.abc import Iterable

from session_guard.sessions.types import NamespaceAggregate, SessionRecord, SortMode


def size_order_key(record: SessionRecord) -> tuple[int, float, str]:
    """Largest first, then newest first, then path."""
    return (-record.size_bytes, -record.mtime_ms, record.path)


def lru_order_key(record: SessionRecord) -> tuple[float, int, str]:
    """Oldest first, then largest first, then path."""
    return (record.mtime_ms, -record.size_bytes, record.path)


def sort_sessions(records: Iterable[SessionRecord], mode: SortMode) -> list[SessionRecord]:
    """Return records in a deterministic order for the given sort mode."""
    key = lru_order_key if mode == "lru" else size_order_key
    return sorted(records, key=key)


def build_namespace_stats(records: Iterable[SessionRecord]) -> list[NamespaceAggregate]:
    """Fold records by namespace, largest namespace first."""
    stats: dict[str, NamespaceAggregate] = {}
    for record in records:
        stats.setdefault(record.namespace, NamespaceAggregate(record.namespace)).add(
            record
        )
    return sorted(stats.values(), key=lambda s: (-s.size_bytes, s.namespace))
