from typing import Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

import jwt
from jwt.exceptions import PyJWTError
from sqlmodel import Session, select

from cardvault.db import get_session
from cardvault.models.user import User
from cardvault.core.config import settings
from cardvault.core.context import set_user_id

# Browser clients send the token in this cookie instead of the header
COOKIE_NAME = "access_token"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token_subject(token: str) -> Optional[str]:
    """Email in the token's sub claim, None for an invalid or expired token."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except PyJWTError:
        return None
    return payload.get("sub")


def get_current_user(
    request: Request, header_token: Optional[str] = Depends(oauth2_scheme), session: Session = Depends(get_session)
) -> User:
    """
    Resolve the active user from the bearer header, falling back to the
    access_token cookie.
    """
    token = header_token or request.cookies.get(COOKIE_NAME)
    if not token:
        raise _unauthorized("Not authenticated")

    email = decode_token_subject(token)
    if email is None:
        raise _unauthorized("Could not validate credentials")

    user = session.exec(select(User).where(User.email == email)).first()
    if user is None or not user.is_active:
        raise _unauthorized("Could not validate credentials")

    set_user_id(user.id)
    return user
