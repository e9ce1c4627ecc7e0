import logging
from datetime import datetime
from typing import Callable

from ..exceptions import KeyNotFoundError
from ..models import KeyRecord, utcnow
from .store import KeyStore

logger = logging.getLogger(__name__)


class KeyRevoker:
    """Expires or removes issued keys."""

    def __init__(self, store: KeyStore, clock: Callable[[], datetime] = utcnow):
        self._store = store
        self._clock = clock

    def revoke(self, key_id: str) -> KeyRecord:
        """
        Expire a key immediately. Revoking an expired key re-stamps it.

        Raises:
            KeyNotFoundError: If no key has this ID
        """
        if self._store.get_by_id(key_id) is None:
            raise KeyNotFoundError(key_id)

        record = self._store.revoke(key_id, self._clock())
        logger.info("Revoked API key %s", key_id)
        return record

    def delete(self, key_id: str) -> None:
        """Remove a key outright. Its usage history is left in place."""
        if not self._store.delete(key_id):
            raise KeyNotFoundError(key_id)

        logger.warning("API key %s deleted", key_id)
