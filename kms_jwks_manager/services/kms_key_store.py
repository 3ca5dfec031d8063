"""AWS KMS implementation of the key store."""

import logging
from typing import Any, Callable, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from kms_jwks_manager.config import KmsClientConfig
from kms_jwks_manager.constants import Constants
from kms_jwks_manager.context import CallContext
from kms_jwks_manager.exceptions import KeyNotFoundError, KeyStoreError
from kms_jwks_manager.models import ManagedKey
from kms_jwks_manager.services.key_store import KeyStore

logger = logging.getLogger(__name__)

_NOT_FOUND_CODE = "NotFoundException"


class KmsKeyStore(KeyStore):
    """Key store backed by an AWS KMS client."""

    @classmethod
    def from_config(cls, config: KmsClientConfig) -> "KmsKeyStore":
        """Build a store with a single-attempt, timeout-bound boto3 client.

        Credentials and region discovery follow boto3's default chain unless
        overridden in ``config``.

        Raises:
            KeyStoreError: If the session or client cannot be created, e.g.
                an unknown profile or no configured region
        """
        try:
            session = boto3.Session(
                profile_name=config.profile_name,
                region_name=config.region_name,
            )
            client = session.client(
                "kms",
                endpoint_url=config.endpoint_url,
                config=Config(
                    connect_timeout=config.timeout,
                    read_timeout=config.timeout,
                    retries={"max_attempts": 1, "mode": "standard"},
                ),
            )
        except (BotoCoreError, ClientError) as e:
            raise KeyStoreError("creating client", "kms", str(e)) from e
        return cls(client)

    def __init__(self, client: Any) -> None:
        """Initialize the store.

        Args:
            client: boto3 KMS client
        """
        self._client = client

    def _call(
        self,
        operation: str,
        resource: str,
        ctx: CallContext,
        func: Callable[..., dict[str, Any]],
        **kwargs: Any
    ) -> dict[str, Any]:
        """Issue one KMS call, translating provider errors.

        Raises:
            KeyNotFoundError: If KMS reports the alias or key as absent
            KeyStoreError: For every other failure
        """
        ctx.check(operation, resource)
        try:
            return func(**kwargs)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            message = e.response.get("Error", {}).get("Message", str(e))
            if code == _NOT_FOUND_CODE:
                raise KeyNotFoundError(resource, f"{resource} not found: {message}") from e
            raise KeyStoreError(operation, resource, f"{code}: {message}") from e
        except BotoCoreError as e:
            raise KeyStoreError(operation, resource, str(e)) from e

    @staticmethod
    def _to_managed_key(metadata: dict[str, Any]) -> ManagedKey:
        return ManagedKey(
            key_id=metadata["KeyId"],
            created_at=metadata["CreationDate"],
            key_spec=metadata.get("KeySpec"),
            arn=metadata.get("Arn"),
            key_state=metadata.get("KeyState"),
        )

    def describe_by_alias(self, alias: str, *, ctx: CallContext) -> ManagedKey:
        response = self._call(
            "describing key", alias, ctx, self._client.describe_key, KeyId=alias
        )
        return self._to_managed_key(response["KeyMetadata"])

    def create_signing_key(
        self,
        key_spec: str,
        tags: dict[str, str],
        *,
        ctx: CallContext
    ) -> ManagedKey:
        response = self._call(
            "creating key",
            key_spec,
            ctx,
            self._client.create_key,
            KeySpec=key_spec,
            KeyUsage=Constants.KEY_USAGE(),
            Tags=[{"TagKey": key, "TagValue": value} for key, value in tags.items()],
        )
        key = self._to_managed_key(response["KeyMetadata"])
        logger.debug(f"Created KMS key {key.key_id}", extra={
            "key_id": key.key_id,
            "key_spec": key_spec,
            "event": "kms_key_created"
        })
        return key

    def get_public_key(self, key_id: str, *, ctx: CallContext) -> bytes:
        response = self._call(
            "getting public key", key_id, ctx, self._client.get_public_key, KeyId=key_id
        )
        return response["PublicKey"]

    def create_alias(self, alias: str, key_id: str, *, ctx: CallContext) -> None:
        self._call(
            "creating alias",
            alias,
            ctx,
            self._client.create_alias,
            AliasName=alias,
            TargetKeyId=key_id,
        )

    def update_alias(self, alias: str, key_id: str, *, ctx: CallContext) -> None:
        self._call(
            "updating alias",
            alias,
            ctx,
            self._client.update_alias,
            AliasName=alias,
            TargetKeyId=key_id,
        )

    def delete_alias(self, alias: str, *, ctx: CallContext) -> None:
        self._call("deleting alias", alias, ctx, self._client.delete_alias, AliasName=alias)

    def schedule_deletion(
        self,
        key_id: str,
        *,
        ctx: CallContext,
        pending_window_days: Optional[int] = None
    ) -> None:
        kwargs: dict[str, Any] = {"KeyId": key_id}
        if pending_window_days is not None:
            kwargs["PendingWindowInDays"] = pending_window_days
        self._call(
            "scheduling deletion of key",
            key_id,
            ctx,
            self._client.schedule_key_deletion,
            **kwargs,
        )
