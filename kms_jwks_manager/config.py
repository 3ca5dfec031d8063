"""Configuration for rotation, export and the KMS client."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from kms_jwks_manager.constants import Constants
from kms_jwks_manager.exceptions import ValidationError
from kms_jwks_manager.validation_utils import validate_algorithm, validate_key_spec


@dataclass
class RotationConfig:
    """Options for one rotation run."""

    minimum_age: timedelta = Constants.DEFAULT_MINIMUM_AGE()
    force: bool = False
    key_spec: str = Constants.DEFAULT_KEY_SPEC()
    pending_window_days: Optional[int] = None  # provider default when None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.minimum_age < timedelta(0):
            raise ValidationError("minimum_age must be non-negative")

        validate_key_spec(self.key_spec)

        if self.pending_window_days is not None and not (
            Constants.MIN_PENDING_WINDOW_DAYS()
            <= self.pending_window_days
            <= Constants.MAX_PENDING_WINDOW_DAYS()
        ):
            raise ValidationError(
                f"pending_window_days must be between {Constants.MIN_PENDING_WINDOW_DAYS()} "
                f"and {Constants.MAX_PENDING_WINDOW_DAYS()}"
            )


@dataclass
class ExportConfig:
    """Options for one export run."""

    algorithm: str

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        validate_algorithm(self.algorithm)


@dataclass
class KmsClientConfig:
    """Settings used to build the boto3 KMS client."""

    region_name: Optional[str] = None
    profile_name: Optional[str] = None
    endpoint_url: Optional[str] = None
    timeout: float = Constants.DEFAULT_CALL_TIMEOUT()  # seconds

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.timeout <= 0:
            raise ValidationError("timeout must be positive")
