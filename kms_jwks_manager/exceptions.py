"""Custom exceptions for the KMS JWKS Manager."""

from datetime import timedelta


class KmsJwksError(Exception):
    """Base exception for all KMS JWKS Manager errors."""


class ValidationError(KmsJwksError):
    """Raised when input or configuration validation fails."""


class KeyNotFoundError(KmsJwksError):
    """Raised when an alias or key does not exist in the key store."""

    def __init__(self, resource: str, message: str | None = None) -> None:
        self.resource = resource
        super().__init__(message or f"{resource} not found")


class KeyStoreError(KmsJwksError):
    """Raised when the key store fails for any reason other than not-found."""

    def __init__(self, operation: str, resource: str, message: str) -> None:
        self.operation = operation
        self.resource = resource
        super().__init__(f"{operation} {resource}: {message}")


class OperationCancelledError(KeyStoreError):
    """Raised when a call context is cancelled or its deadline has passed."""


class KeyTooYoungError(KmsJwksError):
    """Raised when the current key has not reached the minimum rotation age."""

    def __init__(self, key_id: str, age: timedelta, minimum_age: timedelta) -> None:
        self.key_id = key_id
        self.age = age
        self.minimum_age = minimum_age
        super().__init__(f"current key {key_id} is too young to rotate")


class KeyRotationError(KmsJwksError):
    """Raised when a rotation step fails before the topology is established."""


class KeyExportError(KmsJwksError):
    """Raised when assembling the key set fails."""


class DeletionScheduleError(KmsJwksError):
    """Raised when scheduling deletion of the retired key fails."""


class KeyFormatError(KmsJwksError):
    """Raised when public key material cannot be decoded or converted."""
