import logging
from datetime import datetime
from typing import Callable

from ..exceptions import (
    CredentialExpiredError,
    InvalidCredentialError,
    InvalidCredentialFormatError,
)
from ..models import KeyRecord, UsageRecord, utcnow
from .keypair import fingerprint_credential
from .store import KeyStore

logger = logging.getLogger(__name__)


class KeyValidator:
    """
    Authenticates presented credentials and records their usage.

    Every rejection is an UnauthorizedError subclass; the subclass is
    for diagnostics only and callers should report all of them alike.
    """

    def __init__(self, store: KeyStore, clock: Callable[[], datetime] = utcnow):
        self._store = store
        self._clock = clock

    def validate(self, credential: str, source_ip: str) -> KeyRecord:
        """
        Resolve a credential to its key and record the validation.

        Args:
            credential: Hex credential as issued by KeyGenerator
            source_ip: Caller network address

        Returns:
            The matching key

        Raises:
            InvalidCredentialFormatError: Credential is not a valid private key
            InvalidCredentialError: No key matches the credential
            CredentialExpiredError: Matching key has expired
        """
        try:
            fingerprint = fingerprint_credential(credential)
        except ValueError as e:
            logger.warning("Rejected malformed credential from %s: %s", source_ip, e)
            raise InvalidCredentialFormatError("invalid API key") from e

        record = self._store.get_by_fingerprint(fingerprint)
        if record is None:
            logger.warning("Rejected unknown credential from %s", source_ip)
            raise InvalidCredentialError("invalid API key")

        now = self._clock()
        if record.is_expired(now):
            logger.warning("Rejected expired key %s from %s", record.key_id, source_ip)
            raise CredentialExpiredError("API key has expired")

        try:
            self._store.record_usage(UsageRecord(
                key_id=record.key_id,
                source_ip=source_ip,
                observed_at=now,
            ))
        except Exception as e:
            logger.error("Failed to store usage for key %s: %s", record.key_id, e)

        return record
