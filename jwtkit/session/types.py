"""Session state, validation snapshots and session events."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from jwtkit.crypto.types import DecodedToken, KeyMaterial

TOKEN_REQUIRED_MESSAGE = "Token is required"
PROVIDE_KEY_NOTICE = "Provide secret/private key to generate signature automatically"


class ValidationState(BaseModel):
    """Everything the decoded view renders about the current token."""

    model_config = ConfigDict(frozen=True)

    is_valid_format: bool = False
    is_signature_valid: bool | None = None
    decoded: DecodedToken | None = None
    algorithm: str | None = None
    expired: bool = False
    format_error: str | None = None
    signature_error: str | None = None


class Phase(StrEnum):
    EMPTY = "empty"
    INVALID = "invalid"
    VIEWING = "viewing"
    EDITING = "editing"


class SessionState(BaseModel):
    """Complete state of an edit session; replaced wholesale on each transition."""

    model_config = ConfigDict(frozen=True)

    token: str = ""
    keys: KeyMaterial = KeyMaterial()
    header_text: str = ""
    payload_text: str = ""
    editing: bool = False
    last_applied_key_signature: str = ""
    validation: ValidationState = ValidationState(format_error=TOKEN_REQUIRED_MESSAGE)
    notice: str | None = None

    @property
    def phase(self) -> Phase:
        if not self.token.strip():
            return Phase.EMPTY
        if not self.validation.is_valid_format:
            return Phase.INVALID
        return Phase.EDITING if self.editing else Phase.VIEWING


class TokenOrigin(StrEnum):
    """Who produced a replacement token."""

    EXTERNAL = "external"
    CLAIMS = "claims"
    KEYS = "keys"
    ALGORITHM = "algorithm"


class TokenExport(BaseModel):
    """Downloadable text file carrying the current token."""

    filename: str
    media_type: str = "text/plain"
    content: str


class TokenReplaced(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str
    origin: TokenOrigin = TokenOrigin.EXTERNAL


class EditingToggled(BaseModel):
    model_config = ConfigDict(frozen=True)

    editing: bool


class ClaimsEdited(BaseModel):
    model_config = ConfigDict(frozen=True)

    header_text: str | None = None
    payload_text: str | None = None


class KeysEdited(BaseModel):
    model_config = ConfigDict(frozen=True)

    secret: str | None = None
    public_key: str | None = None
    private_key: str | None = None


class AlgorithmSwitched(BaseModel):
    """Re-sign the current payload under ``algorithm``.

    ``keys`` (preset loads) overwrites the key fields it sets; empty fields
    keep their current value.
    """

    model_config = ConfigDict(frozen=True)

    algorithm: str
    keys: KeyMaterial | None = None
    label: str | None = None


SessionEvent = TokenReplaced | EditingToggled | ClaimsEdited | KeysEdited | AlgorithmSwitched
