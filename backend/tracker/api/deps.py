"""
Shared dependencies: bearer-token authentication, admin gate, pagination params.
The resolved User is passed explicitly into service functions by each route.
"""
import logging
from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from tracker.database import get_db
from tracker.models.user import User
from tracker.services import identity
from tracker.services.pagination import PageParams, page_params

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail, headers=_BEARER_CHALLENGE)


def _missing_token_detail(request: Request) -> str:
    if (request.headers.get("Authorization") or "").strip():
        return "Invalid authorization format. Use Bearer token"
    return "Authorization token is missing"


def _resolve(db: Session, token: str) -> User:
    result = identity.authenticate(db, token)
    if not result.ok:
        raise _unauthorized(result.message)
    return result.data


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Require a valid Bearer token that is the user's active session; return User or 401."""
    if not credentials or not (credentials.credentials or "").strip():
        logger.debug("Auth failed: no Bearer token in request")
        raise _unauthorized(_missing_token_detail(request))
    return _resolve(db, credentials.credentials)


def get_optional_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User | None:
    """Anonymous when no Authorization header; a header that is present must still be valid."""
    if not credentials:
        if (request.headers.get("Authorization") or "").strip():
            raise _unauthorized(_missing_token_detail(request))
        return None
    return _resolve(db, credentials.credentials)


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        logger.warning("Admin route denied: user=%s role=%s", current_user.id, current_user.role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"User role {current_user.role} is not authorized to access this route",
        )
    return current_user


def get_page(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
) -> PageParams:
    """Raw strings so junk values fall back to defaults instead of failing validation."""
    return page_params(page, limit)
