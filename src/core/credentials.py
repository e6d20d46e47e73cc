"""
Credential Store
================

Per-provider ordered list of API keys. Several keys per provider are supported
for rotation: the engine tries them in order and moves on to the next key when
one fails. A provider with no keys is considered unavailable and is skipped.

The store is built once per resolve call from plain input (settings file,
environment) and is never mutated afterwards.
"""

import logging
import os
from typing import Dict, Iterable, Mapping, Optional, Tuple

from . import config
from .models import split_terms

logger = logging.getLogger(__name__)


def mask_key(key: str) -> str:
    """Render a key for logs: only the last four characters are shown."""
    return f"...{key[-4:]}" if len(key) >= 4 else "****"


class CredentialSet:
    """
    Read-only mapping from provider id to an ordered tuple of secrets.

    Example:
        >>> creds = CredentialSet({"groq": "gsk_a, gsk_b", "openai": ["sk-1"]})
        >>> creds.keys_for("groq")
        ('gsk_a', 'gsk_b')
    """

    def __init__(self, keys: Optional[Mapping[str, object]] = None):
        self._keys: Dict[str, Tuple[str, ...]] = {}
        for provider, raw in (keys or {}).items():
            parsed = self._dedupe(split_terms(raw))
            if parsed:
                self._keys[provider] = parsed

    @staticmethod
    def _dedupe(keys: Iterable[str]) -> Tuple[str, ...]:
        seen = []
        for key in keys:
            if key not in seen:
                seen.append(key)
        return tuple(seen)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CredentialSet":
        """Build a store from the provider environment variables."""
        environ = os.environ if environ is None else environ
        keys = {}
        for provider, var in config.PROVIDER_ENV_VARS.items():
            value = environ.get(var, "")
            if value.strip():
                keys[provider] = value
        return cls(keys)

    def merged(self, other: "CredentialSet") -> "CredentialSet":
        """Return a new store with ``other``'s keys appended after this store's keys."""
        combined: Dict[str, list] = {p: list(k) for p, k in self._keys.items()}
        for provider in other.providers():
            combined.setdefault(provider, []).extend(other.keys_for(provider))
        return CredentialSet(combined)

    def keys_for(self, provider: str) -> Tuple[str, ...]:
        """Ordered keys for a provider; empty tuple when it is not configured."""
        return self._keys.get(provider, ())

    def has_keys(self, provider: str) -> bool:
        return bool(self._keys.get(provider))

    def providers(self) -> Tuple[str, ...]:
        return tuple(self._keys)

    def __bool__(self) -> bool:
        return bool(self._keys)

    def __repr__(self) -> str:
        counts = {p: len(k) for p, k in self._keys.items()}
        return f"<CredentialSet keys={counts}>"
