"""Data models for the KMS JWKS Manager."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional

from kms_jwks_manager.constants import Constants
from kms_jwks_manager.exceptions import DeletionScheduleError


class Generation(Enum):
    """Role a key plays in the rotation cycle."""

    CURRENT = "current"
    NEXT = "next"
    PREVIOUS = "previous"

    @property
    def suffix(self) -> str:
        """Alias suffix identifying this generation."""
        if self is Generation.CURRENT:
            return Constants.SUFFIX_CURRENT()
        if self is Generation.NEXT:
            return Constants.SUFFIX_NEXT()
        return Constants.SUFFIX_PREVIOUS()

    @classmethod
    def export_order(cls) -> tuple["Generation", ...]:
        """Fixed order in which generations appear in an exported key set."""
        return (cls.CURRENT, cls.NEXT, cls.PREVIOUS)


@dataclass
class ManagedKey:
    """One asymmetric key pair held by the key store.

    The private half never leaves the store; ``public_key_der`` is only
    populated when the public key has been fetched.
    """

    key_id: str
    created_at: datetime
    key_spec: Optional[str] = None
    arn: Optional[str] = None
    key_state: Optional[str] = None
    public_key_der: Optional[bytes] = None

    def __post_init__(self) -> None:
        """Validate and process fields after initialization."""
        if not self.key_id:
            raise ValueError("key_id cannot be empty")

        # Parse datetime string if provided
        if isinstance(self.created_at, str):
            self.created_at = self._parse_datetime(self.created_at)
        if self.created_at.tzinfo is None:
            self.created_at = self.created_at.replace(tzinfo=timezone.utc)

    @staticmethod
    def _parse_datetime(value: str) -> datetime:
        """Parse datetime string to datetime object."""
        return datetime.fromisoformat(value.replace("Z", "+00:00"))

    def age(self, now: datetime) -> timedelta:
        """Time elapsed between key creation and ``now``."""
        return now - self.created_at

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary with proper datetime serialization."""
        return {
            "key_id": self.key_id,
            "created_at": self.created_at.isoformat(),
            "key_spec": self.key_spec,
            "arn": self.arn,
            "key_state": self.key_state,
        }


@dataclass
class RotationOutcome:
    """Result of one rotation run."""

    old_current_id: str
    old_next_id: str
    old_previous_id: Optional[str]
    new_next_id: str
    deletion_scheduled: bool = False
    deletion_error: Optional[DeletionScheduleError] = None
    resumed: bool = False  # completed a rotation interrupted by an earlier failure

    @property
    def succeeded_fully(self) -> bool:
        """True when the retired key (if any) was also scheduled for deletion."""
        return self.deletion_error is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "previous": self.old_current_id,
            "current": self.old_next_id,
            "next": self.new_next_id,
            "retired": self.old_previous_id,
            "deletion_scheduled": self.deletion_scheduled,
            "deletion_error": str(self.deletion_error) if self.deletion_error else None,
            "resumed": self.resumed,
        }


@dataclass
class KeySetEntry:
    """A public key entry tagged with its generation and JWK members."""

    generation: Generation
    key_id: str
    jwk: dict[str, Any]
    key: Optional[ManagedKey] = None


@dataclass
class KeySet:
    """Ordered collection of public keys for signature verifiers."""

    entries: list[KeySetEntry] = field(default_factory=list)

    def add(self, entry: KeySetEntry) -> None:
        """Append an entry, rejecting duplicate key ids."""
        if entry.key_id in self.key_ids:
            raise ValueError(f"Duplicate key id in key set: {entry.key_id}")
        self.entries.append(entry)

    @property
    def key_ids(self) -> list[str]:
        return [entry.key_id for entry in self.entries]

    def by_generation(self, generation: Generation) -> Optional[KeySetEntry]:
        for entry in self.entries:
            if entry.generation is generation:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JWK Set document."""
        return {"keys": [dict(entry.jwk) for entry in self.entries]}

    def to_json(self, *, pretty: bool = False) -> str:
        """Serialize the JWK Set document."""
        return json.dumps(self.to_dict(), indent=2 if pretty else None)

    def __len__(self) -> int:
        return len(self.entries)
