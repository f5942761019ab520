"""Authentication helpers and FastAPI security dependency.

This module provides utilities to decode JWT tokens and a FastAPI
dependency `get_current_admin` that validates the bearer token and
returns the corresponding `Admin` model instance from the database.

Token verification raises HTTPExceptions on failure so it can be used
directly inside route dependencies; the application's exception handler
turns them into envelopes.
"""

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session
import jwt
from .config import settings
from .database import get_session
from . import models, repositories

bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Returns the decoded payload on success or raises an HTTPException
    with status 401 on failure.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail='token expired')
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail='invalid token')


def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Security(bearer_scheme),
    db: Session = Depends(get_session),
) -> models.Admin:
    """FastAPI dependency that returns the authenticated admin.

    The function extracts the bearer token from the request, decodes it
    and looks the admin up. Any authentication issue, including an
    account deleted after the token was issued, raises 401.
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail='not authenticated', headers={'WWW-Authenticate': 'Bearer'})
    payload = decode_token(credentials.credentials)
    admin_id = payload.get('admin_id')
    if not admin_id:
        raise HTTPException(status_code=401, detail='invalid token payload')
    admin = repositories.AdminRepository(db).get(admin_id)
    if not admin:
        raise HTTPException(status_code=401, detail='admin not found')
    return admin
