"""
Key Lifecycle Core

In-memory key store plus the generation, validation, listing
and revocation usecases that operate on it.
"""

from .generation import KeyGenerator
from .listing import KeyLister, calculate_usage_stats
from .revocation import KeyRevoker
from .store import KeyStore
from .validation import KeyValidator

__all__ = [
    "KeyGenerator",
    "KeyLister",
    "KeyRevoker",
    "KeyStore",
    "KeyValidator",
    "calculate_usage_stats",
]
