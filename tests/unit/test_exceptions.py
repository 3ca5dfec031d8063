"""Tests for the exceptions module."""

import unittest
from datetime import timedelta

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


class TestExceptions(unittest.TestCase):
    """Test cases for the exceptions module."""

    def test_kms_jwks_error(self):
        """Test KmsJwksError exception."""
        error = KmsJwksError("Test error message")

        self.assertIsInstance(error, Exception)
        self.assertEqual(str(error), "Test error message")

    def test_key_not_found_error_carries_resource(self):
        """Test KeyNotFoundError default message and resource."""
        error = KeyNotFoundError("alias/svc-previous")

        self.assertIsInstance(error, KmsJwksError)
        self.assertEqual(error.resource, "alias/svc-previous")
        self.assertEqual(str(error), "alias/svc-previous not found")

    def test_key_not_found_error_custom_message(self):
        """Test KeyNotFoundError with explicit message."""
        error = KeyNotFoundError("alias/svc-next", "Alias alias/svc-next is not found")

        self.assertEqual(str(error), "Alias alias/svc-next is not found")

    def test_key_store_error_names_operation_and_resource(self):
        """Test KeyStoreError message format."""
        error = KeyStoreError("updating alias", "alias/svc-current", "AccessDeniedException: denied")

        self.assertEqual(error.operation, "updating alias")
        self.assertEqual(error.resource, "alias/svc-current")
        self.assertEqual(str(error), "updating alias alias/svc-current: AccessDeniedException: denied")

    def test_operation_cancelled_is_key_store_error(self):
        """Test OperationCancelledError inheritance."""
        error = OperationCancelledError("describing key", "alias/svc-current", "operation cancelled")

        self.assertIsInstance(error, KeyStoreError)
        self.assertNotIsInstance(error, KeyNotFoundError)

    def test_key_too_young_error(self):
        """Test KeyTooYoungError attributes and message."""
        error = KeyTooYoungError("key-1", timedelta(hours=1), timedelta(hours=24))

        self.assertEqual(error.key_id, "key-1")
        self.assertEqual(error.age, timedelta(hours=1))
        self.assertEqual(error.minimum_age, timedelta(hours=24))
        self.assertEqual(str(error), "current key key-1 is too young to rotate")

    def test_not_found_is_distinct_from_store_error(self):
        """Test that not-found can be told apart from other failures by type."""
        self.assertFalse(issubclass(KeyNotFoundError, KeyStoreError))
        self.assertFalse(issubclass(KeyStoreError, KeyNotFoundError))

    def test_exception_inheritance(self):
        """Test that all exceptions inherit from KmsJwksError."""
        exceptions = [
            ValidationError,
            KeyNotFoundError,
            KeyStoreError,
            OperationCancelledError,
            KeyTooYoungError,
            KeyRotationError,
            KeyExportError,
            DeletionScheduleError,
            KeyFormatError,
        ]

        for exception_class in exceptions:
            self.assertTrue(issubclass(exception_class, KmsJwksError))


if __name__ == "__main__":
    unittest.main()
