"""
API Key Manager

Issues, validates, lists and revokes API keys for client organizations
and tracks per-key usage in memory.
"""

__version__ = "1.0.0"
