"""In-process key store with the same semantics as the KMS-backed one."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from kms_jwks_manager.constants import Constants
from kms_jwks_manager.context import CallContext
from kms_jwks_manager.crypto_utils import CryptoUtils, PrivateKey
from kms_jwks_manager.exceptions import KeyNotFoundError, KeyStoreError
from kms_jwks_manager.models import ManagedKey
from kms_jwks_manager.services.key_store import KeyStore
from kms_jwks_manager.validation_utils import validate_key_spec

logger = logging.getLogger(__name__)

_ENABLED = "Enabled"
_PENDING_DELETION = "PendingDeletion"


@dataclass
class _StoredKey:
    key_id: str
    key_spec: str
    created_at: datetime
    private_key: PrivateKey
    tags: dict[str, str] = field(default_factory=dict)
    deletion_date: Optional[datetime] = None

    @property
    def state(self) -> str:
        return _PENDING_DELETION if self.deletion_date else _ENABLED


class InMemoryKeyStore(KeyStore):
    """Key store holding real key pairs in memory.

    Refuses to schedule deletion of a key any alias still points to, so
    tests can detect a rotation that would orphan an aliased key.
    """

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        """Initialize the store.

        Args:
            clock: Returns the current UTC time; used for creation timestamps
        """
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._keys: dict[str, _StoredKey] = {}
        self._aliases: dict[str, str] = {}

    def _get_key(self, key_id: str, operation: str) -> _StoredKey:
        stored = self._keys.get(key_id)
        if stored is None:
            raise KeyNotFoundError(key_id, f"Key {key_id} not found while {operation}")
        return stored

    def _require_enabled(self, stored: _StoredKey, operation: str, resource: str) -> None:
        if stored.deletion_date is not None:
            raise KeyStoreError(
                operation, resource, f"key {stored.key_id} is pending deletion"
            )

    @staticmethod
    def _describe(stored: _StoredKey) -> ManagedKey:
        return ManagedKey(
            key_id=stored.key_id,
            created_at=stored.created_at,
            key_spec=stored.key_spec,
            arn=f"arn:memory:kms:key/{stored.key_id}",
            key_state=stored.state,
        )

    def describe_by_alias(self, alias: str, *, ctx: CallContext) -> ManagedKey:
        ctx.check("describing key", alias)
        key_id = self._aliases.get(alias)
        if key_id is None:
            raise KeyNotFoundError(alias, f"Alias {alias} is not found")
        return self._describe(self._get_key(key_id, "describing key"))

    def create_signing_key(
        self,
        key_spec: str,
        tags: dict[str, str],
        *,
        ctx: CallContext
    ) -> ManagedKey:
        ctx.check("creating key", key_spec)
        validate_key_spec(key_spec)
        stored = _StoredKey(
            key_id=str(uuid.uuid4()),
            key_spec=key_spec,
            created_at=self._clock(),
            private_key=CryptoUtils.generate_private_key(key_spec),
            tags=dict(tags),
        )
        self._keys[stored.key_id] = stored
        return self._describe(stored)

    def get_public_key(self, key_id: str, *, ctx: CallContext) -> bytes:
        ctx.check("getting public key", key_id)
        stored = self._get_key(key_id, "getting public key")
        self._require_enabled(stored, "getting public key", key_id)
        return CryptoUtils.public_key_der(stored.private_key)

    def create_alias(self, alias: str, key_id: str, *, ctx: CallContext) -> None:
        ctx.check("creating alias", alias)
        if alias in self._aliases:
            raise KeyStoreError("creating alias", alias, "AlreadyExistsException: alias already exists")
        stored = self._get_key(key_id, "creating alias")
        self._require_enabled(stored, "creating alias", alias)
        self._aliases[alias] = key_id

    def update_alias(self, alias: str, key_id: str, *, ctx: CallContext) -> None:
        ctx.check("updating alias", alias)
        if alias not in self._aliases:
            raise KeyNotFoundError(alias, f"Alias {alias} is not found")
        stored = self._get_key(key_id, "updating alias")
        self._require_enabled(stored, "updating alias", alias)
        self._aliases[alias] = key_id

    def delete_alias(self, alias: str, *, ctx: CallContext) -> None:
        ctx.check("deleting alias", alias)
        if alias not in self._aliases:
            raise KeyNotFoundError(alias, f"Alias {alias} is not found")
        del self._aliases[alias]

    def schedule_deletion(
        self,
        key_id: str,
        *,
        ctx: CallContext,
        pending_window_days: Optional[int] = None
    ) -> None:
        ctx.check("scheduling deletion of key", key_id)
        stored = self._get_key(key_id, "scheduling deletion")
        self._require_enabled(stored, "scheduling deletion of key", key_id)
        referencing = self.aliases_for(key_id)
        if referencing:
            raise KeyStoreError(
                "scheduling deletion of key",
                key_id,
                f"key is still referenced by {', '.join(referencing)}",
            )
        window = pending_window_days or Constants.MAX_PENDING_WINDOW_DAYS()
        stored.deletion_date = self._clock() + timedelta(days=window)
        logger.debug(f"Key {key_id} pending deletion", extra={
            "key_id": key_id,
            "deletion_date": stored.deletion_date.isoformat(),
            "event": "memory_key_deletion_scheduled"
        })

    # Inspection helpers

    def alias_target(self, alias: str) -> Optional[str]:
        """Key id ``alias`` points to, or None if the alias does not exist."""
        return self._aliases.get(alias)

    def aliases_for(self, key_id: str) -> list[str]:
        """Aliases currently pointing at ``key_id``."""
        return sorted(alias for alias, target in self._aliases.items() if target == key_id)

    def key_ids(self) -> list[str]:
        """All key ids in creation order, including keys pending deletion."""
        return list(self._keys)

    def is_pending_deletion(self, key_id: str) -> bool:
        return self._get_key(key_id, "inspecting key").deletion_date is not None

    def tags_for(self, key_id: str) -> dict[str, str]:
        return dict(self._get_key(key_id, "inspecting key").tags)
