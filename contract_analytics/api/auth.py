"""
Bearer token verification.

Tokens are issued by the web application; this service only verifies
them and reads the caller's user id from the "sub" claim.
"""
from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from contract_analytics.core.config import settings
from contract_analytics.core.logging import setup_logger

logger = setup_logger("INFO")

bearer_scheme = HTTPBearer(auto_error=False)


def decode_user_id(token: str) -> str:
    """
    Verify a JWT and return its subject.

    Raises:
        HTTPException 401: Expired, invalid, or subject-less token
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.warning("Token verification failed: expired")
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Token verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("sub") or payload.get("userId")
    if not user_id:
        logger.warning("Token verification failed: missing subject")
        raise HTTPException(status_code=401, detail="Invalid token")

    return str(user_id)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """FastAPI dependency resolving the authenticated user id."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return decode_user_id(credentials.credentials)
