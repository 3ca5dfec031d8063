"""Services package for the KMS JWKS Manager."""

from kms_jwks_manager.services.key_store import KeyStore
from kms_jwks_manager.services.kms_key_store import KmsKeyStore
from kms_jwks_manager.services.memory_key_store import InMemoryKeyStore
from kms_jwks_manager.services.rotation import RotationEngine
from kms_jwks_manager.services.export import KeySetExporter

__all__ = [
    "KeyStore",
    "KmsKeyStore",
    "InMemoryKeyStore",
    "RotationEngine",
    "KeySetExporter",
]
