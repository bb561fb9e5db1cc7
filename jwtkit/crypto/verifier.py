"""Signature verification against locally supplied key material."""

import asyncio

import jwt
from cryptography.exceptions import UnsupportedAlgorithm

from jwtkit.core.logging import get_logger
from jwtkit.crypto.keys import (
    has_any_verification_key,
    has_sufficient_key_for_verify,
    is_supported,
    missing_material_message,
    required_slot,
)
from jwtkit.crypto.types import DecodedToken, KeyMaterial, VerificationResult

logger = get_logger(__name__)

NOT_ATTEMPTED = VerificationResult(valid=False, error=None)
UNSUPPORTED_ALGORITHM_MESSAGE = "Unsupported algorithm"


class SignatureVerifier:
    """Checks a compact token's signature, restricted to a single algorithm.

    The verifier never raises: every failure is reported through
    ``VerificationResult.error``. Claim times (``exp``/``nbf``) are not
    checked here.
    """

    def __init__(self) -> None:
        self._jws = jwt.PyJWS()

    async def verify(
        self,
        token: str,
        decoded: DecodedToken,
        keys: KeyMaterial,
    ) -> VerificationResult:
        """Verify ``token`` with ``keys`` using only the token's declared ``alg``."""
        if not has_any_verification_key(keys):
            return NOT_ATTEMPTED

        alg = decoded.algorithm
        if alg is None or not is_supported(alg):
            return VerificationResult(valid=False, error=UNSUPPORTED_ALGORITHM_MESSAGE)
        if not has_sufficient_key_for_verify(alg, keys):
            return VerificationResult(
                valid=False,
                error=missing_material_message(alg, for_signing=False),
            )

        return await asyncio.to_thread(self._verify_sync, token.strip(), alg, keys)

    def _verify_sync(
        self, token: str, algorithm: str, keys: KeyMaterial
    ) -> VerificationResult:
        key = keys.secret if required_slot(algorithm) == "secret" else keys.public_key
        try:
            self._jws.decode(token, key, algorithms=[algorithm])
        except (jwt.PyJWTError, ValueError, TypeError, UnsupportedAlgorithm) as exc:
            logger.debug("signature_rejected", algorithm=algorithm, reason=str(exc))
            return VerificationResult(valid=False, error=str(exc))
        return VerificationResult(valid=True)
