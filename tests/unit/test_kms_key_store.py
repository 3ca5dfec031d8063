"""Unit tests for the AWS KMS key store."""

from datetime import datetime, timezone
from unittest.mock import Mock, patch

import boto3
import pytest
from botocore.exceptions import EndpointConnectionError, NoRegionError, ProfileNotFound
from botocore.stub import Stubber

from kms_jwks_manager.config import KmsClientConfig
from kms_jwks_manager.context import CallContext
from kms_jwks_manager.exceptions import (
    KeyNotFoundError,
    KeyStoreError,
    OperationCancelledError,
)
from kms_jwks_manager.services.kms_key_store import KmsKeyStore

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _metadata(key_id: str) -> dict:
    return {
        "KeyId": key_id,
        "Arn": f"arn:aws:kms:us-east-1:111122223333:key/{key_id}",
        "CreationDate": CREATED,
        "KeySpec": "RSA_2048",
        "KeyState": "Enabled",
    }


class TestKmsKeyStore:
    """Test KmsKeyStore request mapping and error translation."""

    @pytest.fixture
    def client(self):
        return boto3.client(
            "kms",
            region_name="us-east-1",
            aws_access_key_id="testing",
            aws_secret_access_key="testing",
        )

    @pytest.fixture
    def stubber(self, client):
        with Stubber(client) as stubber:
            yield stubber
            stubber.assert_no_pending_responses()

    @pytest.fixture
    def store(self, client):
        return KmsKeyStore(client)

    @pytest.fixture
    def ctx(self):
        return CallContext.background()

    def test_describe_by_alias(self, store, stubber, ctx):
        stubber.add_response(
            "describe_key",
            {"KeyMetadata": _metadata("key-1")},
            {"KeyId": "alias/svc-current"},
        )

        key = store.describe_by_alias("alias/svc-current", ctx=ctx)

        assert key.key_id == "key-1"
        assert key.created_at == CREATED
        assert key.key_spec == "RSA_2048"
        assert key.key_state == "Enabled"

    def test_not_found_is_translated(self, store, stubber, ctx):
        stubber.add_client_error(
            "describe_key",
            service_error_code="NotFoundException",
            service_message="Alias arn:aws:kms:us-east-1:111122223333:alias/svc-previous is not found.",
            expected_params={"KeyId": "alias/svc-previous"},
        )

        with pytest.raises(KeyNotFoundError) as exc_info:
            store.describe_by_alias("alias/svc-previous", ctx=ctx)

        assert exc_info.value.resource == "alias/svc-previous"

    def test_other_client_errors_are_store_errors(self, store, stubber, ctx):
        stubber.add_client_error(
            "update_alias",
            service_error_code="AccessDeniedException",
            service_message="not authorized",
            expected_params={"AliasName": "alias/svc-current", "TargetKeyId": "key-2"},
        )

        with pytest.raises(KeyStoreError) as exc_info:
            store.update_alias("alias/svc-current", "key-2", ctx=ctx)

        assert exc_info.value.operation == "updating alias"
        assert exc_info.value.resource == "alias/svc-current"
        assert "AccessDeniedException" in str(exc_info.value)
        assert not isinstance(exc_info.value, KeyNotFoundError)

    def test_create_signing_key(self, store, stubber, ctx):
        stubber.add_response(
            "create_key",
            {"KeyMetadata": _metadata("key-9")},
            {
                "KeySpec": "ECC_NIST_P256",
                "KeyUsage": "SIGN_VERIFY",
                "Tags": [{"TagKey": "ManagedBy", "TagValue": "kms-jwks-manager"}],
            },
        )

        key = store.create_signing_key("ECC_NIST_P256", {"ManagedBy": "kms-jwks-manager"}, ctx=ctx)

        assert key.key_id == "key-9"

    def test_get_public_key(self, store, stubber, ctx):
        stubber.add_response(
            "get_public_key",
            {"KeyId": "key-1", "PublicKey": b"\x30\x82"},
            {"KeyId": "key-1"},
        )

        assert store.get_public_key("key-1", ctx=ctx) == b"\x30\x82"

    def test_alias_operations(self, store, stubber, ctx):
        stubber.add_response("create_alias", {}, {"AliasName": "alias/svc-next", "TargetKeyId": "key-3"})
        stubber.add_response("update_alias", {}, {"AliasName": "alias/svc-next", "TargetKeyId": "key-4"})
        stubber.add_response("delete_alias", {}, {"AliasName": "alias/svc-next"})

        store.create_alias("alias/svc-next", "key-3", ctx=ctx)
        store.update_alias("alias/svc-next", "key-4", ctx=ctx)
        store.delete_alias("alias/svc-next", ctx=ctx)

    def test_schedule_deletion_default_window(self, store, stubber, ctx):
        stubber.add_response("schedule_key_deletion", {"KeyId": "key-0"}, {"KeyId": "key-0"})

        store.schedule_deletion("key-0", ctx=ctx)

    def test_schedule_deletion_with_window(self, store, stubber, ctx):
        stubber.add_response(
            "schedule_key_deletion",
            {"KeyId": "key-0"},
            {"KeyId": "key-0", "PendingWindowInDays": 7},
        )

        store.schedule_deletion("key-0", ctx=ctx, pending_window_days=7)

    def test_cancelled_context_issues_no_call(self, store, stubber):
        ctx = CallContext()
        ctx.cancel()

        with pytest.raises(OperationCancelledError):
            store.delete_alias("alias/svc-next", ctx=ctx)

    def test_connection_errors_are_store_errors(self, ctx):
        client = Mock()
        client.get_public_key.side_effect = EndpointConnectionError(endpoint_url="https://kms.us-east-1.amazonaws.com")
        store = KmsKeyStore(client)

        with pytest.raises(KeyStoreError, match="getting public key key-1"):
            store.get_public_key("key-1", ctx=ctx)

    @pytest.fixture
    def isolated_aws_env(self, monkeypatch, tmp_path):
        """Environment with no AWS region, profile or config files."""
        for name in ("AWS_DEFAULT_REGION", "AWS_REGION", "AWS_PROFILE", "AWS_DEFAULT_PROFILE"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "config"))
        monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "credentials"))

    def test_from_config_without_region_is_store_error(self, isolated_aws_env):
        with pytest.raises(KeyStoreError, match="^creating client kms: ") as exc_info:
            KmsKeyStore.from_config(KmsClientConfig())

        assert isinstance(exc_info.value.__cause__, NoRegionError)

    def test_from_config_unknown_profile_is_store_error(self, isolated_aws_env):
        with pytest.raises(KeyStoreError, match="^creating client kms: ") as exc_info:
            KmsKeyStore.from_config(KmsClientConfig(region_name="us-east-1", profile_name="missing"))

        assert isinstance(exc_info.value.__cause__, ProfileNotFound)

    @patch("kms_jwks_manager.services.kms_key_store.boto3.Session")
    def test_from_config_builds_single_attempt_client(self, mock_session_class):
        config = KmsClientConfig(
            region_name="eu-west-1",
            profile_name="ops",
            endpoint_url="http://localhost:4566",
            timeout=5,
        )

        KmsKeyStore.from_config(config)

        mock_session_class.assert_called_once_with(profile_name="ops", region_name="eu-west-1")
        args, kwargs = mock_session_class.return_value.client.call_args
        assert args == ("kms",)
        assert kwargs["endpoint_url"] == "http://localhost:4566"
        assert kwargs["config"].read_timeout == 5
        assert kwargs["config"].connect_timeout == 5
        assert kwargs["config"].retries == {"max_attempts": 1, "mode": "standard"}
