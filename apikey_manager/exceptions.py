"""
API Key Manager Exceptions
"""


class KeyManagerError(Exception):
    """Base exception for key manager failures."""
    pass


class GenerationError(KeyManagerError):
    """Keypair generation or fingerprint derivation failed."""
    pass


class StorageError(KeyManagerError):
    """A generated key could not be persisted."""
    pass


class KeyNotFoundError(KeyManagerError):
    """No key exists with the given ID."""

    def __init__(self, key_id: str):
        super().__init__(f"API key with ID {key_id} not found")
        self.key_id = key_id


class UnauthorizedError(KeyManagerError):
    """Presented credential was rejected."""
    pass


class InvalidCredentialFormatError(UnauthorizedError):
    """Credential could not be decoded into a private key."""
    pass


class InvalidCredentialError(UnauthorizedError):
    """Credential is well-formed but matches no stored key."""
    pass


class CredentialExpiredError(UnauthorizedError):
    """Credential matches a key that has expired or been revoked."""
    pass
