"""
API Key Manager Data Models
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class KeyRecord:
    """Stored representation of one issued API key."""
    key_id: str
    fingerprint: str
    organization: str
    expires_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now


@dataclass(frozen=True)
class UsageRecord:
    """One successful validation of a key."""
    key_id: str
    source_ip: str
    observed_at: datetime
    sequence: int = 0


@dataclass
class UsageStats:
    """Aggregated usage for a single key."""
    total_requests: int = 0
    last_used: Optional[datetime] = None
    unique_ip_count: int = 0
    most_recent_ip: Optional[str] = None


@dataclass
class KeyWithStats:
    key_id: str
    organization: str
    expires_at: Optional[datetime]
    is_expired: bool
    usage_stats: UsageStats


@dataclass
class KeyListing:
    keys: List[KeyWithStats]
    total: int
