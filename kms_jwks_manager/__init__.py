"""KMS JWKS Manager - rotation and JWKS export of KMS-held signing keys.

This package keeps three generations of asymmetric signing keys (current,
next and previous) behind stable aliases in a key-management service and
publishes their public halves as a JSON Web Key Set.
"""

from importlib.metadata import PackageNotFoundError, version

from kms_jwks_manager.aliases import AliasResolver
from kms_jwks_manager.config import ExportConfig, KmsClientConfig, RotationConfig
from kms_jwks_manager.context import CallContext
from kms_jwks_manager.exceptions import (
    DeletionScheduleError,
    KeyExportError,
    KeyFormatError,
    KeyNotFoundError,
    KeyRotationError,
    KeyStoreError,
    KeyTooYoungError,
    KmsJwksError,
    OperationCancelledError,
    ValidationError,
)
from kms_jwks_manager.key_manager import KeyManager
from kms_jwks_manager.models import Generation, KeySet, ManagedKey, RotationOutcome
from kms_jwks_manager.services import InMemoryKeyStore, KmsKeyStore

try:
    __version__ = version("kms-jwks-manager")
except PackageNotFoundError:
    # Running from a source checkout
    __version__ = "unknown"

__all__ = [
    "AliasResolver",
    "CallContext",
    "DeletionScheduleError",
    "ExportConfig",
    "Generation",
    "InMemoryKeyStore",
    "KeyExportError",
    "KeyFormatError",
    "KeyManager",
    "KeyNotFoundError",
    "KeyRotationError",
    "KeySet",
    "KeyStoreError",
    "KeyTooYoungError",
    "KmsClientConfig",
    "KmsJwksError",
    "KmsKeyStore",
    "ManagedKey",
    "OperationCancelledError",
    "RotationConfig",
    "RotationOutcome",
    "ValidationError",
]
