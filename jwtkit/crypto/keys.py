"""Key material resolution per algorithm family and demo keypair generation."""

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from jwtkit.crypto.types import (
    SUPPORTED_ALGORITHMS,
    AlgorithmFamily,
    KeyMaterial,
    KeySlot,
    UnsupportedAlgorithmError,
)

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537

_FAMILIES: dict[str, AlgorithmFamily] = {
    "HS": AlgorithmFamily.HMAC,
    "RS": AlgorithmFamily.RSA,
    "PS": AlgorithmFamily.RSA,
    "ES": AlgorithmFamily.ECDSA,
}

EC_CURVES: dict[str, ec.EllipticCurve] = {
    "ES256": ec.SECP256R1(),
    "ES384": ec.SECP384R1(),
    "ES512": ec.SECP521R1(),
}


def is_supported(algorithm: object) -> bool:
    return isinstance(algorithm, str) and algorithm in SUPPORTED_ALGORITHMS


def algorithm_family(algorithm: str) -> AlgorithmFamily:
    """Map an ``alg`` value to its family via the two-letter prefix."""
    if not is_supported(algorithm):
        raise UnsupportedAlgorithmError(algorithm)
    return _FAMILIES[algorithm[:2]]


def required_slot(algorithm: str) -> KeySlot:
    """Return which key slot an algorithm signs and verifies with."""
    if algorithm_family(algorithm) is AlgorithmFamily.HMAC:
        return "secret"
    return "publicPrivate"


def _present(value: str) -> bool:
    return bool(value.strip())


def has_any_verification_key(keys: KeyMaterial) -> bool:
    """True when there is something to attempt verification with."""
    return _present(keys.secret) or _present(keys.public_key)


def has_sufficient_key_for_verify(algorithm: str, keys: KeyMaterial) -> bool:
    if required_slot(algorithm) == "secret":
        return _present(keys.secret)
    return _present(keys.public_key)


def has_sufficient_key_for_sign(algorithm: str, keys: KeyMaterial) -> bool:
    if required_slot(algorithm) == "secret":
        return _present(keys.secret)
    return _present(keys.private_key)


def missing_material_message(algorithm: str, *, for_signing: bool) -> str:
    """Describe the key material an algorithm needs, naming its family."""
    if required_slot(algorithm) == "secret":
        return "Secret key required for HMAC algorithms"
    material = "Private key" if for_signing else "Public key"
    return f"{material} required for RSA/ECDSA algorithms"


def key_signature(algorithm: str, keys: KeyMaterial) -> str:
    """Fingerprint of the signing material currently applied to a token."""
    return f"{keys.secret}|{keys.private_key}|{algorithm}"


def _private_pem(private_key: PrivateKeyTypes) -> str:
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


def _public_pem(private_key: rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey) -> str:
    return (
        private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )


def generate_rsa_keypair() -> KeyMaterial:
    """Generate an RSA-2048 keypair usable for RS* and PS* algorithms."""
    private_key = rsa.generate_private_key(
        public_exponent=RSA_PUBLIC_EXPONENT,
        key_size=RSA_KEY_SIZE,
    )
    return KeyMaterial(
        public_key=_public_pem(private_key),
        private_key=_private_pem(private_key),
    )


def generate_ec_keypair(algorithm: str) -> KeyMaterial:
    """Generate an EC keypair on the curve an ES* algorithm requires."""
    curve = EC_CURVES.get(algorithm)
    if curve is None:
        raise UnsupportedAlgorithmError(algorithm)
    private_key = ec.generate_private_key(curve)
    return KeyMaterial(
        public_key=_public_pem(private_key),
        private_key=_private_pem(private_key),
    )
