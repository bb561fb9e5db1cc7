"""Algorithm presets with demo key material."""

from collections.abc import Mapping
from functools import cache
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from jwtkit.crypto.keys import generate_ec_keypair, generate_rsa_keypair
from jwtkit.crypto.types import KeyMaterial
from jwtkit.session.errors import UnknownPresetError


class Preset(BaseModel):
    """A selectable algorithm with keys that can sign and verify for it."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    description: str
    algorithm: str
    keys: KeyMaterial


_HMAC_SECRETS = {
    "HS256": "your-256-bit-secret",
    "HS384": "your-384-bit-secret-key-for-stronger-security",
    "HS512": "your-512-bit-secret-key-for-maximum-security-2024",
}

_DESCRIPTIONS = {
    "HS": ("HMAC", "Symmetric key algorithm using SHA-{bits}"),
    "RS": ("RSA", "RSA signature with SHA-{bits} (asymmetric)"),
    "PS": ("RSA-PSS", "RSA-PSS signature with SHA-{bits} (asymmetric)"),
    "ES": ("ECDSA", "ECDSA signature with SHA-{bits} (asymmetric)"),
}


def _preset(algorithm: str, keys: KeyMaterial) -> Preset:
    scheme, description = _DESCRIPTIONS[algorithm[:2]]
    bits = algorithm[2:]
    return Preset(
        name=algorithm.lower(),
        label=f"{algorithm} ({scheme} SHA-{bits})",
        description=description.format(bits=bits),
        algorithm=algorithm,
        keys=keys,
    )


@cache
def load_presets() -> Mapping[str, Preset]:
    """Build the preset table once; RSA presets share one keypair."""
    presets = [_preset(alg, KeyMaterial(secret=s)) for alg, s in _HMAC_SECRETS.items()]
    rsa_keys = generate_rsa_keypair()
    presets += [
        _preset(alg, rsa_keys)
        for alg in ("RS256", "RS384", "RS512", "PS256", "PS384", "PS512")
    ]
    presets += [
        _preset(alg, generate_ec_keypair(alg)) for alg in ("ES256", "ES384", "ES512")
    ]
    return MappingProxyType({p.name: p for p in presets})


def get_preset(name: str) -> Preset:
    try:
        return load_presets()[name.lower()]
    except KeyError:
        raise UnknownPresetError(name) from None
