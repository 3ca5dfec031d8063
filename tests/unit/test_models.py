"""Tests for the models module."""

import json
import unittest
from datetime import datetime, timedelta, timezone

from kms_jwks_manager.exceptions import DeletionScheduleError
from kms_jwks_manager.models import (
    Generation,
    KeySet,
    KeySetEntry,
    ManagedKey,
    RotationOutcome,
)


class TestGeneration(unittest.TestCase):
    """Test cases for the Generation enum."""

    def test_suffixes(self):
        """Test each generation maps to its alias suffix."""
        self.assertEqual(Generation.CURRENT.suffix, "-current")
        self.assertEqual(Generation.NEXT.suffix, "-next")
        self.assertEqual(Generation.PREVIOUS.suffix, "-previous")

    def test_export_order(self):
        """Test export order is current, next, previous."""
        self.assertEqual(
            Generation.export_order(),
            (Generation.CURRENT, Generation.NEXT, Generation.PREVIOUS),
        )


class TestManagedKey(unittest.TestCase):
    """Test cases for the ManagedKey class."""

    def test_managed_key_requires_key_id(self):
        """Test ManagedKey rejects an empty key id."""
        with self.assertRaises(ValueError):
            ManagedKey(key_id="", created_at=datetime.now(timezone.utc))

    def test_managed_key_parses_datetime_string(self):
        """Test ManagedKey parses ISO timestamps with Z suffix."""
        key = ManagedKey(key_id="key-1", created_at="2024-01-01T00:00:00Z")

        self.assertEqual(key.created_at, datetime(2024, 1, 1, tzinfo=timezone.utc))

    def test_managed_key_naive_datetime_is_utc(self):
        """Test naive timestamps are treated as UTC."""
        key = ManagedKey(key_id="key-1", created_at=datetime(2024, 1, 1))

        self.assertEqual(key.created_at.tzinfo, timezone.utc)

    def test_age(self):
        """Test age is measured from creation."""
        key = ManagedKey(key_id="key-1", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))

        age = key.age(datetime(2024, 1, 2, 6, tzinfo=timezone.utc))

        self.assertEqual(age, timedelta(hours=30))

    def test_to_dict(self):
        """Test ManagedKey dictionary conversion serializes metadata."""
        key = ManagedKey(
            key_id="key-1",
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            key_spec="RSA_2048",
            arn="arn:aws:kms:eu-west-1:111122223333:key/key-1",
            key_state="Enabled",
        )

        self.assertEqual(
            key.to_dict(),
            {
                "key_id": "key-1",
                "created_at": "2024-01-01T00:00:00+00:00",
                "key_spec": "RSA_2048",
                "arn": "arn:aws:kms:eu-west-1:111122223333:key/key-1",
                "key_state": "Enabled",
            },
        )


class TestRotationOutcome(unittest.TestCase):
    """Test cases for the RotationOutcome class."""

    def test_succeeded_fully_without_deletion_error(self):
        """Test an outcome without a deletion error succeeded fully."""
        outcome = RotationOutcome("k1", "k2", None, "k3")

        self.assertTrue(outcome.succeeded_fully)
        self.assertFalse(outcome.deletion_scheduled)
        self.assertFalse(outcome.resumed)

    def test_to_dict_describes_new_topology(self):
        """Test to_dict names keys by their new generation."""
        outcome = RotationOutcome("k1", "k2", "k0", "k3", deletion_scheduled=True)

        self.assertEqual(outcome.to_dict(), {
            "previous": "k1",
            "current": "k2",
            "next": "k3",
            "retired": "k0",
            "deletion_scheduled": True,
            "deletion_error": None,
            "resumed": False,
        })

    def test_deletion_error_is_reported(self):
        """Test a deletion error marks the outcome as partial."""
        outcome = RotationOutcome("k1", "k2", "k0", "k3")
        outcome.deletion_error = DeletionScheduleError("scheduling deletion of previous key k0: denied")

        self.assertFalse(outcome.succeeded_fully)
        self.assertEqual(
            outcome.to_dict()["deletion_error"],
            "scheduling deletion of previous key k0: denied",
        )


class TestKeySet(unittest.TestCase):
    """Test cases for the KeySet class."""

    def _entry(self, generation, key_id):
        return KeySetEntry(
            generation=generation,
            key_id=key_id,
            jwk={"kty": "EC", "kid": key_id, "use": "sig", "alg": "ES256"},
        )

    def test_keeps_insertion_order(self):
        """Test entries keep the order they were added in."""
        key_set = KeySet()
        key_set.add(self._entry(Generation.CURRENT, "k2"))
        key_set.add(self._entry(Generation.NEXT, "k3"))
        key_set.add(self._entry(Generation.PREVIOUS, "k1"))

        self.assertEqual(key_set.key_ids, ["k2", "k3", "k1"])
        self.assertEqual(len(key_set), 3)
        self.assertEqual(key_set.by_generation(Generation.PREVIOUS).key_id, "k1")

    def test_rejects_duplicate_key_id(self):
        """Test the same key cannot appear twice."""
        key_set = KeySet()
        key_set.add(self._entry(Generation.CURRENT, "k2"))

        with self.assertRaises(ValueError):
            key_set.add(self._entry(Generation.NEXT, "k2"))

    def test_to_json_is_jwks_document(self):
        """Test serialization produces a JWK Set document."""
        key_set = KeySet()
        key_set.add(self._entry(Generation.CURRENT, "k2"))

        document = json.loads(key_set.to_json())

        self.assertEqual(list(document), ["keys"])
        self.assertEqual(document["keys"][0]["kid"], "k2")

    def test_to_json_pretty(self):
        """Test pretty output is indented."""
        key_set = KeySet()
        key_set.add(self._entry(Generation.CURRENT, "k2"))

        self.assertIn("\n  ", key_set.to_json(pretty=True))
        self.assertNotIn("\n", key_set.to_json())


if __name__ == "__main__":
    unittest.main()
