"""Type definitions for token decoding, key material, signing and verification."""

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

SUPPORTED_ALGORITHMS: tuple[str, ...] = (
    "HS256",
    "HS384",
    "HS512",
    "RS256",
    "RS384",
    "RS512",
    "PS256",
    "PS384",
    "PS512",
    "ES256",
    "ES384",
    "ES512",
)

KeySlot = Literal["secret", "publicPrivate"]


class AlgorithmFamily(StrEnum):
    """Class of signing scheme implied by the ``alg`` prefix."""

    HMAC = "HMAC"
    RSA = "RSA"
    ECDSA = "ECDSA"


class UnsupportedAlgorithmError(ValueError):
    """Raised when an ``alg`` value is outside the supported set."""

    def __init__(self, algorithm: object) -> None:
        super().__init__(f"Unsupported algorithm: {algorithm!r}")
        self.algorithm = algorithm


class KeyMaterial(BaseModel):
    """Caller-supplied keys; empty strings mean absent."""

    model_config = ConfigDict(frozen=True)

    secret: str = ""
    public_key: str = ""
    private_key: str = ""


class DecodedToken(BaseModel):
    """Header and payload of a compact token plus its raw signature segment."""

    model_config = ConfigDict(frozen=True)

    header: dict[str, Any]
    payload: dict[str, Any]
    signature: str

    @property
    def algorithm(self) -> str | None:
        alg = self.header.get("alg")
        return alg if isinstance(alg, str) else None


class DecodeErrorKind(StrEnum):
    """Reasons a compact token fails to decode."""

    MALFORMED_TOKEN = "MalformedToken"
    INVALID_BASE64 = "InvalidBase64"
    INVALID_JSON = "InvalidJson"


class DecodeError(BaseModel):
    """Structural decode failure."""

    model_config = ConfigDict(frozen=True)

    kind: DecodeErrorKind
    message: str


class EncodedSegments(BaseModel):
    """The first two base64url segments of a compact token."""

    model_config = ConfigDict(frozen=True)

    header_segment: str
    payload_segment: str

    @property
    def signing_input(self) -> str:
        return f"{self.header_segment}.{self.payload_segment}"


class VerificationResult(BaseModel):
    """Outcome of a signature check.

    ``valid=False`` with ``error=None`` means verification was not attempted
    because no key material was supplied.
    """

    model_config = ConfigDict(frozen=True)

    valid: bool
    error: str | None = None

    @property
    def status(self) -> bool | None:
        """Tri-state view: True verified, False invalid, None not attempted."""
        if self.valid:
            return True
        if self.error is None:
            return None
        return False


class SigningOutcome(BaseModel):
    """Result of a signing attempt.

    ``token`` is None either because the required key slot was empty
    (``missing_key``) or because signing failed (``error``).
    """

    model_config = ConfigDict(frozen=True)

    token: str | None = None
    error: str | None = None
    missing_key: bool = False
