"""Library-wide constants.

These constants centralize tunable values used across modules to keep
behavior consistent and avoid duplication.
"""

from datetime import timedelta


class Constants:

    # Alias naming
    _ALIAS_NAMESPACE: str = "alias/"
    _RESERVED_ALIAS_PREFIX: str = "aws/"
    _MAX_ALIAS_LENGTH: int = 256
    _SUFFIX_CURRENT: str = "-current"
    _SUFFIX_NEXT: str = "-next"
    _SUFFIX_PREVIOUS: str = "-previous"

    # Rotation policy
    _DEFAULT_MINIMUM_AGE: timedelta = timedelta(hours=24)
    _DEFAULT_KEY_SPEC: str = "RSA_2048"
    _KEY_USAGE: str = "SIGN_VERIFY"
    _MIN_PENDING_WINDOW_DAYS: int = 7
    _MAX_PENDING_WINDOW_DAYS: int = 30

    # Key tagging
    _MANAGED_BY_TAG_KEY: str = "ManagedBy"
    _MANAGED_BY_TAG_VALUE: str = "kms-jwks-manager"

    # Provider calls
    _DEFAULT_CALL_TIMEOUT: float = 30.0  # seconds

    _SIGNING_KEY_SPECS: tuple[str, ...] = (
        "RSA_2048",
        "RSA_3072",
        "RSA_4096",
        "ECC_NIST_P256",
        "ECC_NIST_P384",
        "ECC_NIST_P521",
        "ECC_SECG_P256K1",
    )

    _SIGNATURE_ALGORITHMS: tuple[str, ...] = (
        "RS256",
        "RS384",
        "RS512",
        "PS256",
        "PS384",
        "PS512",
        "ES256",
        "ES256K",
        "ES384",
        "ES512",
        "EdDSA",
    )

    # Key set document
    _KEY_USE_SIGNATURE: str = "sig"

    @classmethod
    def ALIAS_NAMESPACE(cls) -> str:
        return cls._ALIAS_NAMESPACE

    @classmethod
    def RESERVED_ALIAS_PREFIX(cls) -> str:
        return cls._RESERVED_ALIAS_PREFIX

    @classmethod
    def MAX_ALIAS_LENGTH(cls) -> int:
        return cls._MAX_ALIAS_LENGTH

    @classmethod
    def SUFFIX_CURRENT(cls) -> str:
        return cls._SUFFIX_CURRENT

    @classmethod
    def SUFFIX_NEXT(cls) -> str:
        return cls._SUFFIX_NEXT

    @classmethod
    def SUFFIX_PREVIOUS(cls) -> str:
        return cls._SUFFIX_PREVIOUS

    # Rotation policy
    @classmethod
    def DEFAULT_MINIMUM_AGE(cls) -> timedelta:
        return cls._DEFAULT_MINIMUM_AGE

    @classmethod
    def DEFAULT_KEY_SPEC(cls) -> str:
        return cls._DEFAULT_KEY_SPEC

    @classmethod
    def KEY_USAGE(cls) -> str:
        return cls._KEY_USAGE

    @classmethod
    def MIN_PENDING_WINDOW_DAYS(cls) -> int:
        return cls._MIN_PENDING_WINDOW_DAYS

    @classmethod
    def MAX_PENDING_WINDOW_DAYS(cls) -> int:
        return cls._MAX_PENDING_WINDOW_DAYS

    # Key tagging
    @classmethod
    def MANAGED_BY_TAG_KEY(cls) -> str:
        return cls._MANAGED_BY_TAG_KEY

    @classmethod
    def MANAGED_BY_TAG_VALUE(cls) -> str:
        return cls._MANAGED_BY_TAG_VALUE

    @classmethod
    def DEFAULT_CALL_TIMEOUT(cls) -> float:
        return cls._DEFAULT_CALL_TIMEOUT

    @classmethod
    def SIGNING_KEY_SPECS(cls) -> tuple[str, ...]:
        return cls._SIGNING_KEY_SPECS

    @classmethod
    def SIGNATURE_ALGORITHMS(cls) -> tuple[str, ...]:
        return cls._SIGNATURE_ALGORITHMS

    @classmethod
    def KEY_USE_SIGNATURE(cls) -> str:
        return cls._KEY_USE_SIGNATURE
