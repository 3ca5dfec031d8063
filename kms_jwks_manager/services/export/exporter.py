"""Key set export of the three live key generations."""

import logging

from kms_jwks_manager.aliases import AliasResolver
from kms_jwks_manager.config import ExportConfig
from kms_jwks_manager.constants import Constants
from kms_jwks_manager.context import CallContext
from kms_jwks_manager.crypto_utils import CryptoUtils
from kms_jwks_manager.exceptions import KeyExportError, KmsJwksError
from kms_jwks_manager.models import Generation, KeySet, KeySetEntry
from kms_jwks_manager.services.key_store import KeyStore

logger = logging.getLogger(__name__)


class KeySetExporter:
    """Builds a JWK Set from the current, next and previous keys of a prefix.

    The algorithm attached to every key is the one the caller declares; it is
    never inferred from the key material. The export fails as a whole if any
    generation is missing, including ``previous`` before the first rotation.
    """

    def __init__(self, key_store: KeyStore, alias_prefix: str) -> None:
        self._key_store = key_store
        self._aliases = AliasResolver.resolve_all(alias_prefix)

    def export(self, config: ExportConfig, *, ctx: CallContext | None = None) -> KeySet:
        """Export the public keys of all three generations.

        Args:
            config: Export options carrying the declared algorithm
            ctx: Call context threaded through every store call

        Returns:
            Key set with one entry per generation, in current, next, previous order

        Raises:
            KeyExportError: If any generation cannot be exported
        """
        ctx = ctx or CallContext.background()
        key_set = KeySet()
        for generation in Generation.export_order():
            entry = self._export_generation(generation, config.algorithm, ctx)
            try:
                key_set.add(entry)
            except ValueError as e:
                raise KeyExportError(f"adding key {self._aliases[generation]}: {e}") from e

        logger.info(f"Exported {len(key_set)} keys", extra={
            "key_ids": key_set.key_ids,
            "algorithm": config.algorithm,
            "event": "export_completed"
        })
        return key_set

    def _export_generation(
        self,
        generation: Generation,
        algorithm: str,
        ctx: CallContext
    ) -> KeySetEntry:
        alias = self._aliases[generation]

        try:
            key = self._key_store.describe_by_alias(alias, ctx=ctx)
        except KmsJwksError as e:
            raise KeyExportError(f"describing key {alias}: {e}") from e

        try:
            der = self._key_store.get_public_key(key.key_id, ctx=ctx)
        except KmsJwksError as e:
            raise KeyExportError(f"getting public key for {alias}: {e}") from e

        try:
            public_key = CryptoUtils.load_der_public_key(der)
        except KmsJwksError as e:
            raise KeyExportError(f"decoding public key for {alias}: {e}") from e

        try:
            jwk = CryptoUtils.public_key_to_jwk(public_key)
        except KmsJwksError as e:
            raise KeyExportError(f"converting public key for {alias}: {e}") from e

        key.public_key_der = der
        jwk["kid"] = key.key_id
        jwk["use"] = Constants.KEY_USE_SIGNATURE()
        jwk["alg"] = algorithm

        logger.debug(f"Exported key {key.key_id} from {alias}", extra={
            "key_alias": alias,
            **key.to_dict(),
            "kty": jwk.get("kty"),
            "event": "key_exported"
        })
        return KeySetEntry(generation=generation, key_id=key.key_id, jwk=jwk, key=key)
