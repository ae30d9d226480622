from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Cookie, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

SESSION_COOKIE = "pinnotes_session"

bearer = HTTPBearer(auto_error=False)


def _secret() -> str:
    s = os.getenv("JWT_SECRET", "")
    if not s:
        raise RuntimeError("JWT_SECRET is not set")
    return s


def _algo() -> str:
    return os.getenv("JWT_ALGORITHM", "HS256")


def _exp_minutes() -> int:
    # 0 = no expiry; the PIN session lasts as long as the server keeps it
    try:
        return int(os.getenv("SESSION_EXP_MINUTES", "0"))
    except ValueError:
        return 0


def session_ttl() -> Optional[timedelta]:
    minutes = _exp_minutes()
    return timedelta(minutes=minutes) if minutes > 0 else None


def create_session_token(session_id: str, expires_at: Optional[datetime] = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {"sid": session_id, "iat": int(now.timestamp())}
    if expires_at is not None:
        payload["exp"] = int(expires_at.timestamp())
    return jwt.encode(payload, _secret(), algorithm=_algo())


def decode_token(token: str) -> dict:
    return jwt.decode(token, _secret(), algorithms=[_algo()])


def session_id_from_token(token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    try:
        payload = decode_token(token)
    except JWTError:
        return None
    sid = payload.get("sid")
    return str(sid) if sid else None


def get_session_id(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    cookie_token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> Optional[str]:
    """
    - Prefer Authorization: Bearer <token>
    - Fallback to the session cookie set by the PIN form
    """
    if creds is not None and creds.scheme.lower() == "bearer":
        return session_id_from_token(creds.credentials)
    return session_id_from_token(cookie_token)
