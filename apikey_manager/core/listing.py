from datetime import datetime
from typing import List

from ..models import KeyListing, KeyWithStats, UsageRecord, UsageStats
from .store import KeyStore


class KeyLister:
    """Joins stored keys with their aggregated usage."""

    def __init__(self, store: KeyStore):
        self._store = store

    def list_keys(self, now: datetime) -> KeyListing:
        """
        Build the key report as of ``now``, newest keys first.
        """
        records = self._store.list_all()
        usages = self._store.all_usage()

        keys = [
            KeyWithStats(
                key_id=record.key_id,
                organization=record.organization,
                expires_at=record.expires_at,
                is_expired=record.is_expired(now),
                usage_stats=calculate_usage_stats(usages.get(record.key_id, [])),
            )
            for record in reversed(records)
        ]

        return KeyListing(keys=keys, total=len(keys))


def calculate_usage_stats(usages: List[UsageRecord]) -> UsageStats:
    if not usages:
        return UsageStats()

    most_recent = max(usages, key=lambda u: (u.observed_at, u.sequence))

    return UsageStats(
        total_requests=max(u.sequence for u in usages),
        last_used=most_recent.observed_at,
        unique_ip_count=len({u.source_ip for u in usages}),
        most_recent_ip=most_recent.source_ip,
    )
