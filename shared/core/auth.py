import logging
from typing import Optional
from fastapi import Depends, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError, jwt
from shared.core.config import settings
from shared.core.schemas import SessionClaims
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode

logger = logging.getLogger(__name__)

# Clerk puts the session token either in the Authorization header or in the __session cookie
security = HTTPBearer(auto_error=False)
SESSION_COOKIE = "__session"


def _verification_key() -> str:
    key = settings.CLERK_JWT_KEY
    if not key:
        return error_response(
            message="Session verification key is not configured",
            status_code=AppStatusCode.OPERATION_FAILED,
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    # PEM keys pasted into .env usually carry escaped newlines
    return key.replace("\\n", "\n")


def verify_token(token: str) -> SessionClaims:
    """Verify and decode a Clerk session token."""
    try:
        payload = jwt.decode(
            token,
            _verification_key(),
            algorithms=[settings.CLERK_JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except ExpiredSignatureError:
        return error_response(
            message="Session token has expired",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_EXPIRED,
            http_status=status.HTTP_401_UNAUTHORIZED
        )
    except JWTError:
        return error_response(
            message="Invalid session token",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    parties = settings.authorized_parties
    azp = payload.get("azp")
    if parties and azp and azp not in parties:
        logger.warning("Rejected session token issued for %s", azp)
        return error_response(
            message="Invalid session token",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    if not payload.get("sub"):
        return error_response(
            message="Invalid token structure",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    metadata = payload.get("metadata") or payload.get("public_metadata") or {}
    return SessionClaims(
        user_id=payload["sub"],
        session_id=payload.get("sid"),
        role=metadata.get("role") or metadata.get("userType"),
        metadata=metadata,
        exp=payload.get("exp"),
    )


def validate_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> SessionClaims:
    token = credentials.credentials if credentials else request.cookies.get(
        SESSION_COOKIE)
    if not token:
        return error_response(
            message="Unauthorized",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_MISSING,
            http_status=status.HTTP_401_UNAUTHORIZED
        )
    return verify_token(token)
