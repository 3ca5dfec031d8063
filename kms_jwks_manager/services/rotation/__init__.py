"""Rotation services package for the KMS JWKS Manager."""

from kms_jwks_manager.services.rotation.engine import RotationEngine

__all__ = [
    "RotationEngine",
]
