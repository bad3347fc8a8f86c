"""FastAPI application exposing the users resource and login."""

from typing import Any, Dict, List, Optional

import logging
import jwt
from fastapi import Depends, FastAPI, HTTPException, Request, status
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from prometheus_client import Counter

from pydantic import BaseModel

from sqlalchemy.orm import Session

from . import services
from .auth import get_current_user, get_db
from .config import settings
from .database import init_db
from .errors import ServiceError
from .repository import UserRepository
from .security import create_access_token, create_refresh_token, decode_token


limiter = Limiter(key_func=get_remote_address)
app = FastAPI(title=settings.api_title)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
init_db()
services.ensure_admin_user()

logger = logging.getLogger(__name__)

# Prometheus counter to track API requests by method, endpoint and status code
REQUEST_COUNTER = Counter(
    "api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests and their outcomes while updating metrics."""
    logger.info("request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        REQUEST_COUNTER.labels(
            method=request.method,
            endpoint=request.url.path,
            status=str(response.status_code),
        ).inc()
        logger.info(
            "response %s %s status %s",
            request.method,
            request.url.path,
            response.status_code,
        )
        return response
    except Exception:
        REQUEST_COUNTER.labels(
            method=request.method,
            endpoint=request.url.path,
            status="500",
        ).inc()
        logger.exception(
            "error handling %s %s", request.method, request.url.path
        )
        raise


def _http_error(exc: ServiceError) -> HTTPException:
    """Translate a service error into the HTTP response for the caller."""
    return HTTPException(
        status_code=exc.http_status(legacy=settings.legacy_status_codes),
        detail=exc.message,
    )


class UserSummary(BaseModel):
    """A user as returned by the list endpoint."""

    id: int
    username: str
    roles: List[str]
    active: bool


class MessageResponse(BaseModel):
    message: str


class UserCreate(BaseModel):
    """Request body for creating a user.

    Fields are left untyped so that malformed values reach the service
    validation and are reported as "All fields are required".
    """

    username: Any = None
    password: Any = None
    roles: Any = None


class UserUpdate(BaseModel):
    """Request body for updating a user."""

    id: Any = None
    username: Any = None
    roles: Any = None
    active: Any = None
    password: Any = None


class UserDelete(BaseModel):
    """Request body for deleting a user."""

    id: Any = None


class UserLogin(BaseModel):
    """Request body for user login."""

    username: Any = None
    password: Any = None


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    """JWT access and refresh tokens."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@app.post("/auth", response_model=TokenResponse)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, payload: Optional[UserLogin] = None):
    """Exchange valid credentials for access and refresh tokens."""
    if payload is None:
        payload = UserLogin()
    try:
        user = services.authenticate(payload.username, payload.password)
    except ServiceError as exc:
        raise _http_error(exc) from exc
    return TokenResponse(
        access_token=create_access_token(user["username"], user["roles"]),
        refresh_token=create_refresh_token(user["username"], user["roles"]),
    )


@app.post("/auth/refresh", response_model=AccessTokenResponse)
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)):
    """Issue a new access token from a valid refresh token."""
    try:
        claims = decode_token(payload.refresh_token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    if claims.get("type") != "refresh":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    user = UserRepository(db).find_by_username(claims.get("sub"))
    if user is None or not user.active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return AccessTokenResponse(
        access_token=create_access_token(user.username, list(user.roles))
    )


@app.get(
    "/users",
    response_model=List[UserSummary],
    dependencies=[Depends(get_current_user)],
)
def get_all_users():
    """Return all users without their password hashes."""
    try:
        return services.list_users()
    except ServiceError as exc:
        raise _http_error(exc) from exc


@app.post(
    "/users",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_user)],
)
def create_new_user(payload: Optional[UserCreate] = None) -> Dict[str, str]:
    """Create a new user."""
    if payload is None:
        payload = UserCreate()
    try:
        message = services.create_user(payload.username, payload.password, payload.roles)
    except ServiceError as exc:
        raise _http_error(exc) from exc
    return {"message": message}


@app.patch(
    "/users",
    response_model=MessageResponse,
    dependencies=[Depends(get_current_user)],
)
def update_user(payload: Optional[UserUpdate] = None) -> Dict[str, str]:
    """Update a user; the password changes only when one is supplied."""
    if payload is None:
        payload = UserUpdate()
    try:
        message = services.update_user(
            payload.id,
            payload.username,
            payload.roles,
            payload.active,
            payload.password,
        )
    except ServiceError as exc:
        raise _http_error(exc) from exc
    return {"message": message}


@app.delete(
    "/users",
    response_model=MessageResponse,
    dependencies=[Depends(get_current_user)],
)
def delete_user(payload: Optional[UserDelete] = None) -> Dict[str, str]:
    """Delete a user who has no notes."""
    if payload is None:
        payload = UserDelete()
    try:
        message = services.delete_user(payload.id)
    except ServiceError as exc:
        raise _http_error(exc) from exc
    return {"message": message}
