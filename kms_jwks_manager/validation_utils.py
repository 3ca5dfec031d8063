"""Validation utilities for the KMS JWKS Manager package."""

import math
import re
from datetime import timedelta

from kms_jwks_manager.constants import Constants
from kms_jwks_manager.exceptions import ValidationError

_ALIAS_PREFIX_PATTERN = re.compile(r"[A-Za-z0-9/_-]+")
_DURATION_PART_PATTERN = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {
    "h": timedelta(hours=1),
    "m": timedelta(minutes=1),
    "s": timedelta(seconds=1),
    "ms": timedelta(milliseconds=1),
}


def validate_alias_prefix(prefix: str) -> None:
    """Validate an alias prefix.

    The prefix becomes part of a provider alias name, so it is restricted to
    the characters the provider accepts and must leave room for the longest
    generation suffix.

    Args:
        prefix: Alias prefix to validate

    Raises:
        ValidationError: If the prefix is unusable as part of an alias name
    """
    if prefix is None:
        raise ValidationError("Alias prefix cannot be None")

    if prefix.strip() == "":
        raise ValidationError("Alias prefix cannot be empty")

    if not _ALIAS_PREFIX_PATTERN.fullmatch(prefix):
        raise ValidationError(
            f"Alias prefix {prefix!r} may only contain letters, digits, '/', '_' and '-'"
        )

    if prefix.startswith(Constants.RESERVED_ALIAS_PREFIX()):
        raise ValidationError(
            f"Alias prefix cannot start with reserved {Constants.RESERVED_ALIAS_PREFIX()!r}"
        )

    longest = len(Constants.ALIAS_NAMESPACE()) + len(prefix) + max(
        len(Constants.SUFFIX_CURRENT()),
        len(Constants.SUFFIX_NEXT()),
        len(Constants.SUFFIX_PREVIOUS()),
    )
    if longest > Constants.MAX_ALIAS_LENGTH():
        raise ValidationError(
            f"Alias prefix is too long (aliases are limited to {Constants.MAX_ALIAS_LENGTH()} characters)"
        )


def validate_key_spec(key_spec: str) -> None:
    """Validate that a key spec names a supported asymmetric signing key.

    Raises:
        ValidationError: If the key spec is not supported
    """
    if key_spec not in Constants.SIGNING_KEY_SPECS():
        raise ValidationError(
            f"Unsupported key spec {key_spec!r}; expected one of: "
            + ", ".join(Constants.SIGNING_KEY_SPECS())
        )


def validate_algorithm(algorithm: str) -> None:
    """Validate a declared JWA signature algorithm.

    The algorithm is attached verbatim to every exported key, so only
    asymmetric signature algorithms are accepted. ``none`` and HMAC
    algorithms would let a verifier accept forged tokens.

    Raises:
        ValidationError: If the algorithm is missing or not an asymmetric signature algorithm
    """
    if not algorithm or algorithm.strip() == "":
        raise ValidationError("Algorithm must be provided explicitly")

    if algorithm not in Constants.SIGNATURE_ALGORITHMS():
        raise ValidationError(
            f"Unsupported signature algorithm {algorithm!r}; expected one of: "
            + ", ".join(Constants.SIGNATURE_ALGORITHMS())
        )


def parse_duration(value: str) -> timedelta:
    """Parse a duration such as ``24h``, ``1h30m``, ``45s`` or ``3600``.

    A bare number is interpreted as seconds.

    Raises:
        ValidationError: If the value is not a valid non-negative duration
    """
    if value is None or value.strip() == "":
        raise ValidationError("Duration cannot be empty")

    text = value.strip()
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise ValidationError(f"Invalid duration: {value}")
        if seconds < 0:
            raise ValidationError(f"Duration cannot be negative: {value}")
        try:
            return timedelta(seconds=seconds)
        except OverflowError as e:
            raise ValidationError(f"Duration out of range: {value}") from e

    position = 0
    total = timedelta()
    try:
        for match in _DURATION_PART_PATTERN.finditer(text):
            if match.start() != position:
                break
            total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
            position = match.end()
    except OverflowError as e:
        raise ValidationError(f"Duration out of range: {value}") from e

    if position == 0 or position != len(text):
        raise ValidationError(f"Invalid duration: {value}")

    return total
