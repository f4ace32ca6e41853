"""
Identity layer.

Bearer tokens are opaque to the rest of the application: this module turns
one into a ``User`` with its role loaded, or rejects the request as
unauthenticated. Credentials are verified elsewhere; tokens are only issued
here for tooling and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config import settings
from newsdesk.constants import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM
from newsdesk.database import get_db
from newsdesk.exceptions import AuthenticationError, InvalidTokenError
from newsdesk.models.user import User
from newsdesk.services.permission_service import PermissionService

logger = logging.getLogger(__name__)

# auto_error is off so a missing token surfaces as our own 401 envelope
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if "sub" not in to_encode:
        raise ValueError("Missing 'sub' claim (email) in token data.")

    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the email carried in the token's ``sub`` claim."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        logger.info("Token expired")
        raise InvalidTokenError("Token has expired") from e
    except JWTError as e:
        logger.warning(f"JWT decoding failed: {str(e)}")
        raise InvalidTokenError() from e

    email = payload.get("sub")
    if email is None:
        logger.warning("Token is missing 'sub' claim")
        raise InvalidTokenError("Token does not contain 'sub' field.")
    return email


async def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Resolve the caller, or None when no token was sent."""
    token = token or request.cookies.get("access_token")
    if not token:
        return None

    email = decode_access_token(token)
    user = await PermissionService(db).get_user_by_email(email)
    if user is None:
        # Only reachable when the account was removed after the token was issued
        logger.warning(f"Token subject '{email}' has no account")
        raise AuthenticationError("Cannot find your login in the database")
    return user


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthenticationError()
    return user
