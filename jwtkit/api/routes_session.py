"""Session endpoints: forward user events and render the session state."""

from fastapi import APIRouter
from starlette.responses import JSONResponse, PlainTextResponse, Response

from jwtkit.api.deps import SessionDep
from jwtkit.api.schemas import (
    AlgorithmPayload,
    ClaimsPayload,
    EditingPayload,
    ErrorResponse,
    KeysPayload,
    PresetSummary,
    SessionSnapshot,
    TokenPayload,
)
from jwtkit.crypto.types import UnsupportedAlgorithmError
from jwtkit.session.edit_session import EditSession
from jwtkit.session.errors import ClaimsJsonInvalidError, UnknownPresetError
from jwtkit.session.presets import load_presets

router = APIRouter(prefix="/session", tags=["session"])

HTTP_BAD_REQUEST = 400
HTTP_NOT_FOUND = 404
HTTP_NO_CONTENT = 204


def _error(error: str, description: str, status_code: int) -> JSONResponse:
    body = ErrorResponse(error=error, error_description=description)
    return JSONResponse(body.model_dump(), status_code=status_code)


def _snapshot(session: EditSession) -> SessionSnapshot:
    state = session.state
    return SessionSnapshot(
        phase=state.phase,
        token=state.token,
        keys=state.keys,
        header_text=state.header_text,
        payload_text=state.payload_text,
        editing=state.editing,
        validation=state.validation,
        notice=state.notice,
        claims=session.claims_table(),
    )


@router.get("")
async def get_session_state(session: SessionDep) -> SessionSnapshot:
    """GET /session -- current state and claims table."""
    return _snapshot(session)


@router.put("/token")
async def replace_token(payload: TokenPayload, session: SessionDep) -> SessionSnapshot:
    """PUT /session/token -- token pasted or typed by the user."""
    session.set_token(payload.token)
    await session.settle()
    return _snapshot(session)


@router.put("/keys")
async def edit_keys(payload: KeysPayload, session: SessionDep) -> SessionSnapshot:
    """PUT /session/keys -- secret or PEM key edits."""
    session.set_keys(
        secret=payload.secret,
        public_key=payload.public_key,
        private_key=payload.private_key,
    )
    await session.settle()
    return _snapshot(session)


@router.post("/editing")
async def toggle_editing(payload: EditingPayload, session: SessionDep) -> SessionSnapshot:
    """POST /session/editing -- enter or leave edit mode."""
    if payload.editing:
        await session.enter_editing()
    else:
        await session.exit_editing()
    return _snapshot(session)


@router.put("/claims")
async def edit_claims(payload: ClaimsPayload, session: SessionDep) -> SessionSnapshot:
    """PUT /session/claims -- header/payload buffer edits."""
    session.edit_claims(
        header_text=payload.header_text, payload_text=payload.payload_text
    )
    await session.settle()
    return _snapshot(session)


@router.post("/claims/common", response_model=None)
async def fill_common_claims(session: SessionDep) -> SessionSnapshot | JSONResponse:
    """POST /session/claims/common -- add missing standard claims."""
    try:
        session.add_common_claims()
    except ClaimsJsonInvalidError as exc:
        return _error("invalid_claims", str(exc), HTTP_BAD_REQUEST)
    await session.settle()
    return _snapshot(session)


@router.post("/algorithm", response_model=None)
async def switch_algorithm(
    payload: AlgorithmPayload, session: SessionDep
) -> SessionSnapshot | JSONResponse:
    """POST /session/algorithm -- re-sign under another algorithm."""
    try:
        await session.switch_algorithm(payload.algorithm)
    except UnsupportedAlgorithmError as exc:
        return _error("unsupported_algorithm", str(exc), HTTP_BAD_REQUEST)
    await session.settle()
    return _snapshot(session)


@router.get("/presets")
async def list_presets() -> list[PresetSummary]:
    """GET /session/presets -- selectable algorithm presets."""
    return [
        PresetSummary(
            name=p.name,
            label=p.label,
            description=p.description,
            algorithm=p.algorithm,
        )
        for p in load_presets().values()
    ]


@router.post("/presets/{name}", response_model=None)
async def load_preset(name: str, session: SessionDep) -> SessionSnapshot | JSONResponse:
    """POST /session/presets/{name} -- switch to a preset's algorithm and keys."""
    try:
        await session.load_preset(name)
    except UnknownPresetError as exc:
        return _error("unknown_preset", str(exc), HTTP_NOT_FOUND)
    await session.settle()
    return _snapshot(session)


@router.get("/export", response_model=None)
async def export_token(session: SessionDep) -> Response:
    """GET /session/export -- current token as a text file download."""
    export = session.export_token()
    if export is None:
        return Response(status_code=HTTP_NO_CONTENT)
    return PlainTextResponse(
        export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
