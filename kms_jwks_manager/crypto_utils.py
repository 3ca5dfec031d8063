"""Cryptographic utilities for the KMS JWKS Manager."""

from typing import Any, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from jwt.algorithms import ECAlgorithm, OKPAlgorithm, RSAAlgorithm
from jwt.exceptions import InvalidKeyError

from kms_jwks_manager.exceptions import KeyFormatError, ValidationError

PublicKey = Union[rsa.RSAPublicKey, ec.EllipticCurvePublicKey, ed25519.Ed25519PublicKey]
PrivateKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]


class CryptoUtils:
    """Cryptographic utilities for key material handling."""

    _RSA_PUBLIC_EXPONENT = 65537
    _RSA_KEY_SIZES = {
        "RSA_2048": 2048,
        "RSA_3072": 3072,
        "RSA_4096": 4096,
    }
    _EC_CURVES = {
        "ECC_NIST_P256": ec.SECP256R1,
        "ECC_NIST_P384": ec.SECP384R1,
        "ECC_NIST_P521": ec.SECP521R1,
        "ECC_SECG_P256K1": ec.SECP256K1,
    }

    @classmethod
    def generate_private_key(cls, key_spec: str) -> PrivateKey:
        """Generate a private key matching a provider key spec.

        Args:
            key_spec: Provider key spec such as ``RSA_2048`` or ``ECC_NIST_P256``

        Returns:
            Newly generated private key

        Raises:
            ValidationError: If the key spec is not supported
        """
        if key_spec in cls._RSA_KEY_SIZES:
            return rsa.generate_private_key(
                public_exponent=cls._RSA_PUBLIC_EXPONENT,
                key_size=cls._RSA_KEY_SIZES[key_spec],
            )
        if key_spec in cls._EC_CURVES:
            return ec.generate_private_key(cls._EC_CURVES[key_spec]())
        raise ValidationError(f"Unsupported key spec: {key_spec}")

    @staticmethod
    def public_key_der(private_key: PrivateKey) -> bytes:
        """DER-encoded SubjectPublicKeyInfo for ``private_key``."""
        return private_key.public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    @staticmethod
    def load_der_public_key(der: bytes) -> PublicKey:
        """Decode a DER-encoded SubjectPublicKeyInfo.

        Raises:
            KeyFormatError: If the bytes are not a supported public key
        """
        if not der:
            raise KeyFormatError("Public key material is empty")
        try:
            public_key = serialization.load_der_public_key(der)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyFormatError(f"Failed to decode public key: {e}") from e

        if not isinstance(
            public_key, (rsa.RSAPublicKey, ec.EllipticCurvePublicKey, ed25519.Ed25519PublicKey)
        ):
            raise KeyFormatError(f"Unsupported public key type: {type(public_key).__name__}")
        return public_key

    @staticmethod
    def public_key_to_jwk(public_key: PublicKey) -> dict[str, Any]:
        """Convert a public key into its JWK members (``kty`` and key parameters).

        Raises:
            KeyFormatError: If the key cannot be represented as a JWK
        """
        try:
            if isinstance(public_key, rsa.RSAPublicKey):
                jwk = RSAAlgorithm.to_jwk(public_key, as_dict=True)
            elif isinstance(public_key, ec.EllipticCurvePublicKey):
                jwk = ECAlgorithm.to_jwk(public_key, as_dict=True)
            elif isinstance(public_key, ed25519.Ed25519PublicKey):
                jwk = OKPAlgorithm.to_jwk(public_key, as_dict=True)
            else:
                raise KeyFormatError(f"Unsupported public key type: {type(public_key).__name__}")
        except InvalidKeyError as e:
            raise KeyFormatError(f"Failed to convert public key: {e}") from e

        # "use" is set by the caller and must not be combined with "key_ops"
        jwk.pop("key_ops", None)
        return jwk
