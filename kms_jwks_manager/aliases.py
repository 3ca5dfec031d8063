"""Alias naming for the three key generations."""

from kms_jwks_manager.constants import Constants
from kms_jwks_manager.models import Generation
from kms_jwks_manager.validation_utils import validate_alias_prefix


class AliasResolver:
    """Maps an alias prefix and a generation to a provider alias name.

    ``resolve("svc", Generation.CURRENT)`` yields ``alias/svc-current``.
    """

    @staticmethod
    def resolve(prefix: str, generation: Generation) -> str:
        """Build the alias name for ``generation`` under ``prefix``.

        Raises:
            ValidationError: If the prefix is invalid
        """
        validate_alias_prefix(prefix)
        return f"{Constants.ALIAS_NAMESPACE()}{prefix}{generation.suffix}"

    @classmethod
    def resolve_all(cls, prefix: str) -> dict[Generation, str]:
        """Resolve every generation for ``prefix``."""
        return {generation: cls.resolve(prefix, generation) for generation in Generation}
