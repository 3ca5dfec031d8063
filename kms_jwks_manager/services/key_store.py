"""Key store interface consumed by the rotation engine and the exporter."""

from abc import ABC, abstractmethod
from typing import Optional

from kms_jwks_manager.context import CallContext
from kms_jwks_manager.models import ManagedKey


class KeyStore(ABC):
    """Abstraction over an external key-management service.

    Every call is synchronous and single-attempt. Implementations raise
    ``KeyNotFoundError`` when an alias or key is absent and
    ``KeyStoreError`` for every other failure.
    """

    @abstractmethod
    def describe_by_alias(self, alias: str, *, ctx: CallContext) -> ManagedKey:
        """Describe the key an alias currently points to."""

    @abstractmethod
    def create_signing_key(
        self,
        key_spec: str,
        tags: dict[str, str],
        *,
        ctx: CallContext
    ) -> ManagedKey:
        """Create a new asymmetric signing key."""

    @abstractmethod
    def get_public_key(self, key_id: str, *, ctx: CallContext) -> bytes:
        """Return the DER-encoded public key for ``key_id``."""

    @abstractmethod
    def create_alias(self, alias: str, key_id: str, *, ctx: CallContext) -> None:
        """Create ``alias`` pointing at ``key_id``."""

    @abstractmethod
    def update_alias(self, alias: str, key_id: str, *, ctx: CallContext) -> None:
        """Point an existing ``alias`` at ``key_id``; not-found if the alias is absent."""

    @abstractmethod
    def delete_alias(self, alias: str, *, ctx: CallContext) -> None:
        """Delete ``alias``."""

    @abstractmethod
    def schedule_deletion(
        self,
        key_id: str,
        *,
        ctx: CallContext,
        pending_window_days: Optional[int] = None
    ) -> None:
        """Schedule deferred provider-side deletion of ``key_id``."""
