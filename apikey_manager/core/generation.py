import logging
from datetime import datetime
from typing import Callable, Tuple
from uuid import uuid4

from cryptography.exceptions import UnsupportedAlgorithm

from ..exceptions import GenerationError, StorageError
from ..models import KeyRecord, utcnow
from .keypair import generate_keypair
from .store import KeyStore

logger = logging.getLogger(__name__)


class KeyGenerator:
    """Issues new API keys and stores their fingerprints."""

    def __init__(self, store: KeyStore, clock: Callable[[], datetime] = utcnow):
        self._store = store
        self._clock = clock

    def generate(self, organization: str) -> Tuple[str, str]:
        """
        Issue a new API key for an organization.

        Args:
            organization: Free-text owner label, may be empty

        Returns:
            Tuple of (key_id, credential). The credential is not stored
            and cannot be recovered later.

        Raises:
            GenerationError: If the keypair could not be created
            StorageError: If the key could not be stored
        """
        key_id = str(uuid4())

        try:
            credential, fingerprint = generate_keypair()
        except (ValueError, OSError, UnsupportedAlgorithm) as e:
            logger.error("Failed to generate keypair for organization %r: %s", organization, e)
            raise GenerationError(f"Failed to generate keypair: {e}") from e

        record = KeyRecord(
            key_id=key_id,
            fingerprint=fingerprint,
            organization=organization,
            created_at=self._clock(),
        )

        try:
            self._store.put(record)
        except Exception as e:
            logger.error("Failed to store API key for organization %r: %s", organization, e)
            raise StorageError(f"Failed to store API key: {e}") from e

        logger.info("Issued API key %s for organization %r", key_id, organization)
        return key_id, credential
