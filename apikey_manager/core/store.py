"""
In-Memory Key Store

Thread-safe storage for issued API keys and their usage history.
Keys are indexed by ID and by credential fingerprint; usage records
are append-only and numbered per key.
"""

import dataclasses
import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional

from ..exceptions import KeyNotFoundError
from ..models import KeyRecord, UsageRecord

logger = logging.getLogger(__name__)


class KeyStore:
    """
    Thread-safe in-memory key and usage storage.

    Features:
    - Primary map keyed by key ID, secondary index from fingerprint to key ID
    - Both indexes updated under a single lock acquisition
    - Dense per-key usage sequence numbers assigned at insertion
    - Snapshot copies returned from every read
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._keys: Dict[str, KeyRecord] = {}
        self._fingerprints: Dict[str, str] = {}
        self._usage: Dict[str, List[UsageRecord]] = {}
        self._sequences: Dict[str, int] = {}

    def put(self, record: KeyRecord) -> None:
        """
        Insert or replace a key under both indexes.

        Args:
            record: Key to store
        """
        with self._lock:
            previous = self._keys.get(record.key_id)
            if previous and previous.fingerprint != record.fingerprint:
                if self._fingerprints.get(previous.fingerprint) == record.key_id:
                    del self._fingerprints[previous.fingerprint]

            self._keys[record.key_id] = record
            if record.fingerprint:
                self._fingerprints[record.fingerprint] = record.key_id

    def get_by_id(self, key_id: str) -> Optional[KeyRecord]:
        with self._lock:
            return self._keys.get(key_id)

    def get_by_fingerprint(self, fingerprint: str) -> Optional[KeyRecord]:
        """
        Look up a key through the fingerprint index.

        Returns:
            The matching key or None if no key carries this fingerprint
        """
        with self._lock:
            key_id = self._fingerprints.get(fingerprint)
            if key_id is None:
                return None
            return self._keys.get(key_id)

    def list_all(self) -> List[KeyRecord]:
        """List every stored key in insertion order."""
        with self._lock:
            return list(self._keys.values())

    def list_active(self, now: datetime) -> List[KeyRecord]:
        """List keys that have no expiration or expire after ``now``."""
        with self._lock:
            return [
                record for record in self._keys.values()
                if record.expires_at is None or record.expires_at > now
            ]

    def revoke(self, key_id: str, when: datetime) -> KeyRecord:
        """
        Set a key's expiration to ``when``.

        Raises:
            KeyNotFoundError: If no key has this ID
        """
        with self._lock:
            record = self._keys.get(key_id)
            if record is None:
                raise KeyNotFoundError(key_id)

            revoked = dataclasses.replace(record, expires_at=when)
            self._keys[key_id] = revoked
            return revoked

    def delete(self, key_id: str) -> bool:
        """
        Remove a key from both indexes. Usage history is kept.

        Returns:
            True if the key was found and removed
        """
        with self._lock:
            record = self._keys.pop(key_id, None)
            if record is None:
                return False

            if self._fingerprints.get(record.fingerprint) == key_id:
                del self._fingerprints[record.fingerprint]
            else:
                logger.warning("Fingerprint index out of sync for key %s", key_id)
            return True

    def record_usage(self, usage: UsageRecord) -> UsageRecord:
        """
        Append a usage record, assigning the next sequence number for its key.

        Returns:
            The stored record with its sequence set
        """
        with self._lock:
            sequence = self._sequences.get(usage.key_id, 0) + 1
            stored = dataclasses.replace(usage, sequence=sequence)

            self._usage.setdefault(usage.key_id, []).append(stored)
            self._sequences[usage.key_id] = sequence
            return stored

    def get_usage(self, key_id: str) -> List[UsageRecord]:
        with self._lock:
            return list(self._usage.get(key_id, ()))

    def latest_usage(self, key_id: str) -> Optional[UsageRecord]:
        """Get the most recently observed usage record for a key."""
        with self._lock:
            usages = self._usage.get(key_id)
            if not usages:
                return None
            return max(usages, key=lambda u: (u.observed_at, u.sequence))

    def all_usage(self) -> Dict[str, List[UsageRecord]]:
        with self._lock:
            return {key_id: list(usages) for key_id, usages in self._usage.items()}

    def get_stats(self, now: datetime) -> dict:
        with self._lock:
            return {
                "keys_total": len(self._keys),
                "keys_active": len(self.list_active(now)),
                "usage_records": sum(len(u) for u in self._usage.values()),
            }
