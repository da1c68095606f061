# mentor_matching/dependencies/auth_dependencies.py
import logging
from typing import Optional
from fastapi import Cookie, Header, HTTPException, status
from ..schemas import Actor
from ..security import decode_access_token

logger = logging.getLogger("uvicorn.error")

def get_current_actor(
    authorization: Optional[str] = Header(None),
    access_token: Optional[str] = Cookie(None),
) -> Actor:
    """
    Accepts either Authorization: Bearer <token> OR the 'access_token' cookie.
    Prefers the Authorization header, falls back to the cookie.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = None
    if authorization:
        if authorization.startswith("Bearer "):
            token = authorization.split(" ", 1)[1]
        else:
            logger.info("Authorization header present but not Bearer.")

    if not token:
        token = access_token

    if not token:
        raise credentials_exception

    token_data = decode_access_token(token)
    if token_data is None:
        raise credentials_exception
    return Actor(id=token_data.user_id, role=token_data.role)
