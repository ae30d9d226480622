from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from pinnotes.api import deps
from pinnotes.models.auth import PinRequest, TokenResponse
from pinnotes.sessions import Session
from pinnotes.utils.jwt_auth import SESSION_COOKIE, create_session_token, session_ttl
from pinnotes.utils.pin_auth import VERIFY_ERROR

router = APIRouter(prefix="/api/auth", tags=["auth"])


async def unlock(pin: str, current: Optional[Session] = None) -> tuple[Optional[Session], Optional[str]]:
    """Check the PIN; on success reuse the caller's session or open a new one."""
    result = await deps.gate.verify(pin)
    if not result:
        return None, result.error
    if current is not None:
        return current, None
    session = deps.sessions.create(ttl=session_ttl())
    session.login()
    return session, None


def set_session_cookie(response: Response, session: Session) -> str:
    token = create_session_token(session.session_id, expires_at=session.expires_at)
    response.set_cookie(SESSION_COOKIE, token, httponly=True, samesite="lax")
    return token


@router.post("/pin", response_model=TokenResponse)
async def submit_pin(
    req: PinRequest,
    response: Response,
    current: Optional[Session] = Depends(deps.optional_session),
):
    session, error = await unlock(req.pin, current)
    if session is None:
        if error == VERIFY_ERROR:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=error)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=error)

    token = set_session_cookie(response, session)
    return TokenResponse(access_token=token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(response: Response, session: Session = Depends(deps.require_session)) -> None:
    deps.sessions.discard(session.session_id)
    response.delete_cookie(SESSION_COOKIE)
    return None
