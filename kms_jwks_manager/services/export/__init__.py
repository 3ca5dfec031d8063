"""Export services package for the KMS JWKS Manager."""

from kms_jwks_manager.services.export.exporter import KeySetExporter

__all__ = [
    "KeySetExporter",
]
