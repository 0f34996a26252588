"""
credentials.py — The ordered pool of upstream API keys.

Keys are identified by id ("key1", "key2", ...) and tried in insertion order.
The admin endpoints overwrite or blank secrets; ids are never removed, so the
failover order stays stable for the life of the process.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Mapping

from pratyaksh.services.key_storage import load_keys, working_keys_count


def mask_key(secret: str) -> str:
    """First 8 characters, the rest replaced by '*'."""
    if not secret:
        return ""
    return secret[:8] + "*" * max(0, len(secret) - 8)


@dataclass(frozen=True)
class Credential:
    identifier: str
    secret: str = field(repr=False)

    @property
    def usable(self) -> bool:
        return bool(self.secret and self.secret.strip())


class CredentialPool:
    """Thread-safe, ordered mapping of key id → secret."""

    def __init__(self, keys: Mapping[str, str] | None = None) -> None:
        self._lock = threading.Lock()
        self._keys: dict[str, str] = dict(keys or {})

    def credentials(self) -> list[Credential]:
        """Every configured credential, including blank ones, in order."""
        with self._lock:
            return [Credential(kid, secret or "") for kid, secret in self._keys.items()]

    def usable(self) -> list[Credential]:
        """Credentials with a non-blank secret, in order."""
        return [c for c in self.credentials() if c.usable]

    def update(self, updates: Mapping[str, Any]) -> list[str]:
        """
        Overwrite secrets from `updates`; non-string values are ignored.

        Returns the ids whose secret actually changed.
        """
        changed = []
        with self._lock:
            for kid, value in updates.items():
                if not isinstance(value, str):
                    continue
                if self._keys.get(kid) != value:
                    changed.append(kid)
                self._keys[kid] = value
        return changed

    def as_dict(self) -> dict[str, str]:
        with self._lock:
            return dict(self._keys)

    def masked(self) -> dict[str, str]:
        return {kid: mask_key(secret) for kid, secret in self.as_dict().items()}

    def working_count(self) -> int:
        return working_keys_count(self.as_dict())

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)


# Module-level singleton — loaded once from env / keys file at import time
credential_pool = CredentialPool(load_keys())
