"""API dependencies for admin authentication."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from votetally.core.config import settings
from votetally.core.logging_config import security_logger
from votetally.core.security import AdminSession, decode_session

security = HTTPBearer(auto_error=False)


def client_ip(request: Request) -> str | None:
    """Address of the connected peer. Client-supplied forwarding headers are ignored."""
    return request.client.host if request.client else None


async def get_admin_session(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AdminSession:
    """
    Dependency to require a valid admin session.

    The session token is read from the Authorization header, falling back to
    the session cookie set at login.
    """
    token = credentials.credentials if credentials else None
    if not token:
        token = request.cookies.get(settings.ADMIN_SESSION_COOKIE)

    if not token:
        security_logger.log_unauthorized_access(
            request.url.path, client_ip(request), "missing session"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = decode_session(token)
    if session is None:
        security_logger.log_unauthorized_access(
            request.url.path, client_ip(request), "invalid or expired session"
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or invalid",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return session


AdminSessionDep = Annotated[AdminSession, Depends(get_admin_session)]
