"""Request and response schemas for the session API."""

from pydantic import BaseModel

from jwtkit.crypto.types import KeyMaterial
from jwtkit.session.claims import ClaimRow
from jwtkit.session.types import Phase, ValidationState


class TokenPayload(BaseModel):
    """Body for PUT /session/token."""

    token: str


class KeysPayload(BaseModel):
    """Body for PUT /session/keys; omitted fields are left unchanged."""

    secret: str | None = None
    public_key: str | None = None
    private_key: str | None = None


class ClaimsPayload(BaseModel):
    """Body for PUT /session/claims."""

    header_text: str | None = None
    payload_text: str | None = None


class EditingPayload(BaseModel):
    """Body for POST /session/editing."""

    editing: bool


class AlgorithmPayload(BaseModel):
    """Body for POST /session/algorithm."""

    algorithm: str


class SessionSnapshot(BaseModel):
    """Everything a view needs to render the session."""

    phase: Phase
    token: str
    keys: KeyMaterial
    header_text: str
    payload_text: str
    editing: bool
    validation: ValidationState
    notice: str | None = None
    claims: list[ClaimRow]


class PresetSummary(BaseModel):
    """Preset catalogue entry; key material is not exposed."""

    name: str
    label: str
    description: str
    algorithm: str


class ErrorResponse(BaseModel):
    """Error body returned for rejected session operations."""

    error: str
    error_description: str
