"""Key manager facade binding an alias prefix to a key store."""

import logging
import os
from datetime import datetime, timedelta
from typing import Callable

from kms_jwks_manager.aliases import AliasResolver
from kms_jwks_manager.config import ExportConfig, KmsClientConfig, RotationConfig
from kms_jwks_manager.constants import Constants
from kms_jwks_manager.context import CallContext
from kms_jwks_manager.exceptions import ValidationError
from kms_jwks_manager.models import Generation, KeySet, RotationOutcome
from kms_jwks_manager.services import (
    KeySetExporter,
    KeyStore,
    KmsKeyStore,
    RotationEngine,
)
from kms_jwks_manager.validation_utils import validate_alias_prefix

logger = logging.getLogger(__name__)

PREFIX_ENV_VARIABLE = "KMS_JWKS_KEY_ALIAS_PREFIX"


class KeyManager:
    """Rotates and exports the signing keys of one alias prefix."""

    @classmethod
    def from_kms(
        cls,
        alias_prefix: str,
        *,
        client_config: KmsClientConfig | None = None
    ) -> "KeyManager":
        """Create a KeyManager backed by AWS KMS.

        Args:
            alias_prefix: Prefix the generation aliases are derived from
            client_config: boto3 client settings (optional)

        Returns:
            KeyManager instance

        Raises:
            ValidationError: If the alias prefix or client settings are invalid
        """
        validate_alias_prefix(alias_prefix)
        store = KmsKeyStore.from_config(client_config or KmsClientConfig())
        return cls(alias_prefix, store)

    @classmethod
    def init_from_environment(
        cls,
        key_store: KeyStore,
        *,
        env_variable: str = PREFIX_ENV_VARIABLE
    ) -> "KeyManager":
        """Create a KeyManager whose alias prefix comes from an environment variable.

        Raises:
            ValidationError: If the variable is unset, empty or holds an invalid prefix
        """
        alias_prefix = os.getenv(env_variable)
        if alias_prefix is None:
            raise ValidationError(f"Environment variable {env_variable} not set")

        if alias_prefix.strip() == "":
            raise ValidationError(f"Environment variable {env_variable} is empty")

        return cls(alias_prefix.strip(), key_store)

    def __init__(
        self,
        alias_prefix: str,
        key_store: KeyStore,
        *,
        clock: Callable[[], datetime] | None = None
    ) -> None:
        """Initialize the key manager.

        Args:
            alias_prefix: Prefix the generation aliases are derived from
            key_store: Store holding the keys and aliases
            clock: Returns the current UTC time (optional)

        Raises:
            ValidationError: If the alias prefix is invalid or key_store is None
        """
        validate_alias_prefix(alias_prefix)

        # Guard against None key_store parameter
        if key_store is None:
            raise ValidationError("Key store cannot be None")

        self._alias_prefix = alias_prefix
        self._key_store = key_store
        self._rotation_engine = RotationEngine(key_store, alias_prefix, clock=clock)
        self._exporter = KeySetExporter(key_store, alias_prefix)

    @property
    def alias_prefix(self) -> str:
        return self._alias_prefix

    @property
    def aliases(self) -> dict[Generation, str]:
        """Alias name of every generation."""
        return AliasResolver.resolve_all(self._alias_prefix)

    def rotate(
        self,
        *,
        minimum_age: timedelta | None = None,
        force: bool = False,
        key_spec: str | None = None,
        pending_window_days: int | None = None,
        ctx: CallContext | None = None
    ) -> RotationOutcome:
        """Rotate the keys of this prefix.

        Args:
            minimum_age: Minimum age of the current key (default: 24 hours)
            force: Rotate regardless of the current key's age
            key_spec: Key spec for newly created keys (default: RSA_2048)
            pending_window_days: Days before a retired key is deleted (optional)
            ctx: Call context for cancellation and deadlines (optional)

        Returns:
            Outcome naming the keys involved

        Raises:
            ValidationError: If options are invalid
            KeyTooYoungError: If the current key is too young and force is not set
            KeyRotationError: If a rotation step fails
        """
        config = RotationConfig(
            minimum_age=Constants.DEFAULT_MINIMUM_AGE() if minimum_age is None else minimum_age,
            force=force,
            key_spec=key_spec or Constants.DEFAULT_KEY_SPEC(),
            pending_window_days=pending_window_days,
        )
        return self._rotation_engine.rotate(config, ctx=ctx)

    def export(self, *, algorithm: str, ctx: CallContext | None = None) -> KeySet:
        """Export the public keys of all three generations.

        Args:
            algorithm: JWA signature algorithm declared on every key (e.g. RS256)
            ctx: Call context for cancellation and deadlines (optional)

        Returns:
            Key set with exactly three entries

        Raises:
            ValidationError: If the algorithm is missing or unsupported
            KeyExportError: If any generation cannot be exported
        """
        return self._exporter.export(ExportConfig(algorithm=algorithm), ctx=ctx)
