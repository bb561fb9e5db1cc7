"""Token signing with algorithm-specific key material."""

import asyncio
from typing import Any

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from jwt.algorithms import get_default_algorithms

from jwtkit.core.logging import get_logger
from jwtkit.crypto.codec import base64url_encode, encode_header_payload
from jwtkit.crypto.keys import has_sufficient_key_for_sign, is_supported, required_slot
from jwtkit.crypto.types import KeyMaterial, SigningOutcome

logger = get_logger(__name__)


class TokenSigner:
    """Produces compact tokens from a header, a payload and key material.

    The header and payload are signed exactly as given: no ``typ`` header
    and no ``iat``/``exp`` claims are added.
    """

    def __init__(self) -> None:
        self._algorithms = get_default_algorithms()

    async def sign(
        self, header: dict[str, Any], payload: dict[str, Any], keys: KeyMaterial
    ) -> str | None:
        """Return a signed token, or None when there is no key to sign with."""
        outcome = await self.sign_detailed(header, payload, keys)
        return outcome.token

    async def sign_detailed(
        self, header: dict[str, Any], payload: dict[str, Any], keys: KeyMaterial
    ) -> SigningOutcome:
        """Sign and report why no token was produced, if none was."""
        if not isinstance(header, dict) or not isinstance(payload, dict):
            return self._failed("Header and payload must be JSON objects")
        alg = header.get("alg")
        if not is_supported(alg):
            return self._failed(f"Unsupported algorithm: {alg!r}")
        if not has_sufficient_key_for_sign(alg, keys):
            return SigningOutcome(missing_key=True)

        return await asyncio.to_thread(self._sign_sync, header, payload, alg, keys)

    def _sign_sync(
        self,
        header: dict[str, Any],
        payload: dict[str, Any],
        algorithm: str,
        keys: KeyMaterial,
    ) -> SigningOutcome:
        key = keys.secret if required_slot(algorithm) == "secret" else keys.private_key
        signer = self._algorithms[algorithm]
        try:
            segments = encode_header_payload(header, payload)
            prepared = signer.prepare_key(key)
            signature = signer.sign(segments.signing_input.encode("utf-8"), prepared)
        except (jwt.PyJWTError, ValueError, TypeError, UnsupportedAlgorithm) as exc:
            return self._failed(str(exc), algorithm=algorithm)
        return SigningOutcome(
            token=f"{segments.signing_input}.{base64url_encode(signature)}"
        )

    @staticmethod
    def _failed(message: str, algorithm: str | None = None) -> SigningOutcome:
        logger.warning("token_signing_failed", algorithm=algorithm, error=message)
        return SigningOutcome(error=message)
