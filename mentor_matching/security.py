import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from .config import get_settings
from .models import UserRole
from .schemas import TokenData

logger = logging.getLogger("uvicorn.error")

# --- JWT Token Handling ---
# Tokens are minted by the external auth component; create_access_token mirrors its format.

def create_access_token(user_id: int, role: UserRole, expires_delta: Optional[timedelta] = None) -> str:
    """Creates a JWT access token carrying the user id in 'sub' and the user's role."""
    settings = get_settings()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {"sub": str(user_id), "role": UserRole(role).value, "exp": expire}
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt

def decode_access_token(token: str) -> Optional[TokenData]:
    """Returns the token's claims, or None when the token is invalid, expired or incomplete."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info("JWT decode failed: %s", e)
        return None

    subject = payload.get("sub")
    role = payload.get("role")
    if subject is None or role not in {r.value for r in UserRole}:
        return None
    try:
        return TokenData(user_id=int(subject), role=UserRole(role))
    except ValueError:
        logger.info("JWT subject is not a user id: %r", subject)
        return None
