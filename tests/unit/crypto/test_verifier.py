"""Tests for signature verification."""

import hashlib
import hmac

import jwt
import pytest

from jwtkit.crypto.codec import base64url_encode, decode, encode_header_payload
from jwtkit.crypto.signer import TokenSigner
from jwtkit.crypto.types import DecodedToken, KeyMaterial
from jwtkit.crypto.verifier import SignatureVerifier


@pytest.fixture
def verifier() -> SignatureVerifier:
    return SignatureVerifier()


@pytest.fixture
def signer() -> TokenSigner:
    return TokenSigner()


async def _signed(signer: TokenSigner, alg: str, keys: KeyMaterial) -> tuple[str, DecodedToken]:
    token = await signer.sign({"alg": alg, "typ": "JWT"}, {"sub": "user-1"}, keys)
    assert token is not None
    decoded = decode(token)
    assert isinstance(decoded, DecodedToken)
    return token, decoded


class TestVerifyOutcomes:
    """Tests for the valid / invalid / not attempted outcomes."""

    @pytest.mark.asyncio
    async def test_no_keys_not_attempted(
        self, verifier: SignatureVerifier, signer: TokenSigner, keys_for
    ) -> None:
        token, decoded = await _signed(signer, "HS256", keys_for("HS256"))
        result = await verifier.verify(token, decoded, KeyMaterial())
        assert result.valid is False
        assert result.error is None
        assert result.status is None

    @pytest.mark.asyncio
    async def test_whitespace_keys_not_attempted(
        self, verifier: SignatureVerifier, signer: TokenSigner, keys_for
    ) -> None:
        token, decoded = await _signed(signer, "HS256", keys_for("HS256"))
        result = await verifier.verify(token, decoded, KeyMaterial(secret="   "))
        assert result.status is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("alg", ["HS256", "RS384", "PS512", "ES256", "ES512"])
    async def test_correct_key_is_valid(
        self, verifier: SignatureVerifier, signer: TokenSigner, keys_for, alg: str
    ) -> None:
        keys = keys_for(alg)
        token, decoded = await _signed(signer, alg, keys)
        result = await verifier.verify(token, decoded, keys)
        assert result.valid is True
        assert result.error is None
        assert result.status is True

    @pytest.mark.asyncio
    async def test_wrong_secret_is_invalid(
        self, verifier: SignatureVerifier, signer: TokenSigner, keys_for
    ) -> None:
        token, decoded = await _signed(signer, "HS256", keys_for("HS256"))
        result = await verifier.verify(
            token, decoded, KeyMaterial(secret="some-other-secret-of-decent-length!!")
        )
        assert result.valid is False
        assert result.error
        assert result.status is False

    @pytest.mark.asyncio
    async def test_verification_needs_only_public_key(
        self, verifier: SignatureVerifier, signer: TokenSigner, rsa_keys: KeyMaterial
    ) -> None:
        token, decoded = await _signed(signer, "RS256", rsa_keys)
        result = await verifier.verify(
            token, decoded, KeyMaterial(public_key=rsa_keys.public_key)
        )
        assert result.valid is True

    @pytest.mark.asyncio
    async def test_tampered_payload_is_invalid(
        self, verifier: SignatureVerifier, signer: TokenSigner, keys_for
    ) -> None:
        keys = keys_for("HS256")
        token, _ = await _signed(signer, "HS256", keys)
        header, _, signature = token.split(".")
        forged_payload = encode_header_payload({}, {"sub": "admin"}).payload_segment
        forged = ".".join([header, forged_payload, signature])
        decoded = decode(forged)
        assert isinstance(decoded, DecodedToken)
        result = await verifier.verify(forged, decoded, keys)
        assert result.valid is False


class TestKeyMismatch:
    """Tests for keys that do not fit the token's algorithm family."""

    @pytest.mark.asyncio
    async def test_hmac_token_with_public_key_only(
        self, verifier: SignatureVerifier, signer: TokenSigner, keys_for, rsa_keys: KeyMaterial
    ) -> None:
        token, decoded = await _signed(signer, "HS256", keys_for("HS256"))
        result = await verifier.verify(
            token, decoded, KeyMaterial(public_key=rsa_keys.public_key)
        )
        assert result.valid is False
        assert result.error == "Secret key required for HMAC algorithms"

    @pytest.mark.asyncio
    async def test_rsa_token_with_secret_only(
        self, verifier: SignatureVerifier, signer: TokenSigner, rsa_keys: KeyMaterial
    ) -> None:
        token, decoded = await _signed(signer, "RS256", rsa_keys)
        result = await verifier.verify(token, decoded, KeyMaterial(secret="s3cret"))
        assert result.valid is False
        assert result.error == "Public key required for RSA/ECDSA algorithms"

    @pytest.mark.asyncio
    async def test_garbage_public_key_reports_error(
        self, verifier: SignatureVerifier, signer: TokenSigner, rsa_keys: KeyMaterial
    ) -> None:
        token, decoded = await _signed(signer, "RS256", rsa_keys)
        result = await verifier.verify(
            token, decoded, KeyMaterial(public_key="not a pem at all")
        )
        assert result.valid is False
        assert result.error

    @pytest.mark.asyncio
    async def test_key_from_other_curve_is_invalid(
        self, verifier: SignatureVerifier, signer: TokenSigner, ec_keys: dict[str, KeyMaterial]
    ) -> None:
        token, decoded = await _signed(signer, "ES256", ec_keys["ES256"])
        result = await verifier.verify(token, decoded, ec_keys["ES384"])
        assert result.valid is False
        assert result.error


class TestAlgorithmConfinement:
    """Tests that verification only ever uses one algorithm."""

    @pytest.mark.asyncio
    async def test_unsupported_alg(self, verifier: SignatureVerifier) -> None:
        decoded = DecodedToken(header={"alg": "none"}, payload={}, signature="")
        result = await verifier.verify("e30.e30.", decoded, KeyMaterial(secret="x"))
        assert result.valid is False
        assert result.error == "Unsupported algorithm"

    @pytest.mark.asyncio
    async def test_missing_alg(self, verifier: SignatureVerifier) -> None:
        decoded = DecodedToken(header={"typ": "JWT"}, payload={}, signature="")
        result = await verifier.verify("e30.e30.", decoded, KeyMaterial(secret="x"))
        assert result.error == "Unsupported algorithm"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("declared", "digest"), [("HS256", hashlib.sha384), ("HS384", hashlib.sha256)]
    )
    async def test_signature_from_other_hmac_variant_rejected(
        self, verifier: SignatureVerifier, keys_for, declared: str, digest
    ) -> None:
        keys = keys_for(declared)
        signing_input = encode_header_payload({"alg": declared}, {"sub": "user-1"}).signing_input
        mac = hmac.new(keys.secret.encode(), signing_input.encode(), digest).digest()
        token = f"{signing_input}.{base64url_encode(mac)}"
        decoded = decode(token)
        assert isinstance(decoded, DecodedToken)
        result = await verifier.verify(token, decoded, keys)
        assert result.valid is False
        assert result.error


class TestInterop:
    """Tests against tokens minted by PyJWT directly."""

    @pytest.mark.asyncio
    async def test_verifies_pyjwt_hmac_token(
        self, verifier: SignatureVerifier, keys_for
    ) -> None:
        keys = keys_for("HS512")
        token = jwt.encode({"sub": "user-1", "exp": 1}, keys.secret, algorithm="HS512")
        decoded = decode(token)
        assert isinstance(decoded, DecodedToken)
        result = await verifier.verify(token, decoded, keys)
        assert result.valid is True

    @pytest.mark.asyncio
    async def test_verifies_pyjwt_rsa_token(
        self, verifier: SignatureVerifier, rsa_keys: KeyMaterial
    ) -> None:
        token = jwt.encode({"sub": "user-1"}, rsa_keys.private_key, algorithm="PS256")
        decoded = decode(token)
        assert isinstance(decoded, DecodedToken)
        result = await verifier.verify(token, decoded, rsa_keys)
        assert result.valid is True
