"""Shared test fixtures for jwtkit."""

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient

from jwtkit.core.app import create_app
from jwtkit.core.settings import DebounceSettings, ToolkitSettings
from jwtkit.crypto.keys import generate_ec_keypair, generate_rsa_keypair
from jwtkit.crypto.types import KeyMaterial
from jwtkit.session.edit_session import EditSession

HMAC_TEST_SECRET = "a-test-secret-that-is-long-enough-for-hs512-signing-keys!!"


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for test settings."""
    monkeypatch.setenv("JWTKIT_LOG_LEVEL", "WARNING")


@pytest.fixture(scope="session")
def rsa_keys() -> KeyMaterial:
    """One RSA keypair shared by every test."""
    return generate_rsa_keypair()


@pytest.fixture(scope="session")
def ec_keys() -> dict[str, KeyMaterial]:
    """EC keypairs keyed by the ES algorithm they belong to."""
    return {alg: generate_ec_keypair(alg) for alg in ("ES256", "ES384", "ES512")}


@pytest.fixture
def keys_for(rsa_keys: KeyMaterial, ec_keys: dict[str, KeyMaterial]):
    """Full key material for any supported algorithm."""

    def _keys_for(algorithm: str) -> KeyMaterial:
        if algorithm.startswith("HS"):
            return KeyMaterial(secret=HMAC_TEST_SECRET)
        if algorithm.startswith("ES"):
            return ec_keys[algorithm]
        return rsa_keys

    return _keys_for


@pytest.fixture
def instant_debounce() -> DebounceSettings:
    """Debounce windows of zero so tests only wait for the crypto."""
    return DebounceSettings(
        token_seconds=0,
        claims_seconds=0,
        keys_seconds=0,
        algorithm_seconds=0,
    )


@pytest.fixture
async def session(instant_debounce: DebounceSettings) -> AsyncIterator[EditSession]:
    """A started edit session holding the default HS256 token."""
    edit_session = EditSession(ToolkitSettings(), instant_debounce)
    await edit_session.start()
    yield edit_session
    await edit_session.aclose()


@pytest.fixture
async def client(session: EditSession) -> AsyncIterator[AsyncClient]:
    """Create an httpx test client bound to the session fixture."""
    app = create_app()
    app.state.edit_session = session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
