"""FastAPI dependencies for the session API."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from jwtkit.session.edit_session import EditSession


def get_edit_session(request: Request) -> EditSession:
    """Return the session created at application startup."""
    session: EditSession | None = getattr(request.app.state, "edit_session", None)
    if session is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return session


SessionDep = Annotated[EditSession, Depends(get_edit_session)]
