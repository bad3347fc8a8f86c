"""Service layer for the user resource."""

import logging
from typing import Any, Dict, List, Optional

from prometheus_client import Counter
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .config import settings
from .database import SessionLocal
from .errors import (
    Conflict,
    InvalidInput,
    NotFound,
    PersistenceError,
    ServiceError,
    Unauthorized,
)
from .models.user import User
from .repository import NoteRepository, UserRepository
from .security import MAX_PASSWORD_BYTES, hash_password, verify_password


logger = logging.getLogger(__name__)

USER_CREATED_COUNTER = Counter("users_created_total", "Total users created")
USER_UPDATED_COUNTER = Counter("users_updated_total", "Total users updated")
USER_DELETED_COUNTER = Counter("users_deleted_total", "Total users deleted")

ALL_FIELDS_REQUIRED = "All fields are required"


def _handle_service_error(session: Session, exc: Exception, message: str) -> None:
    """Rollback the transaction and translate storage failures."""
    session.rollback()
    if isinstance(exc, SQLAlchemyError):
        logger.exception("database error: %s", message)
        raise PersistenceError(message) from exc
    raise exc


def _valid_id(user_id: Any) -> bool:
    return isinstance(user_id, int) and not isinstance(user_id, bool) and user_id > 0


def _valid_roles(roles: Any) -> bool:
    if not isinstance(roles, list) or not roles:
        return False
    return all(isinstance(role, str) and role for role in roles)


def _check_password_length(password: str) -> None:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise InvalidInput("Password too long")


def _summary(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "roles": list(user.roles),
        "active": user.active,
    }


def list_users() -> List[Dict[str, Any]]:
    """Return every user without the password hash.

    Raises ``NotFound`` when there are no users at all.
    """
    session: Session = SessionLocal()
    try:
        users = [_summary(user) for user in UserRepository(session).find_all()]
        if not users:
            raise NotFound("No users found", legacy_status_code=400)
        return users
    except Exception as exc:
        _handle_service_error(session, exc, "Users could not be listed")
    finally:
        session.close()


def create_user(username: Any, password: Any, roles: Any) -> str:
    """Create a user with a salted password hash.

    Parameters
    ----------
    username: str
        Unique login name.
    password: str
        Plain text password, hashed before it is stored.
    roles: list of str
        At least one role label.

    Returns
    -------
    str
        Confirmation message naming the new user.
    """
    if (
        not username
        or not isinstance(username, str)
        or not password
        or not isinstance(password, str)
        or not _valid_roles(roles)
    ):
        raise InvalidInput(ALL_FIELDS_REQUIRED)
    _check_password_length(password)

    logger.info("create user username=%s roles=%s", username, roles)
    session: Session = SessionLocal()
    try:
        users = UserRepository(session)
        if users.find_by_username(username):
            raise Conflict("User already exists")

        user = users.create(
            {
                "username": username,
                "password": hash_password(password),
                "roles": list(roles),
                "active": True,
            }
        )
        if user is None:
            raise PersistenceError("User could not be created")
        session.commit()
        USER_CREATED_COUNTER.inc()
        logger.info("created user id=%s username=%s", user.id, username)
        return f"New user {username} created"
    except IntegrityError as exc:
        # Another request stored the same username after the pre-check.
        session.rollback()
        raise Conflict("User already exists") from exc
    except Exception as exc:
        _handle_service_error(session, exc, "User could not be created")
    finally:
        session.close()


def update_user(
    user_id: Any,
    username: Any,
    roles: Any,
    active: Any,
    password: Optional[str] = None,
) -> str:
    """Update a user's username, roles and active flag.

    The password hash is replaced only when a new password is supplied.
    """
    if (
        not _valid_id(user_id)
        or not username
        or not isinstance(username, str)
        or not _valid_roles(roles)
        or not isinstance(active, bool)
    ):
        raise InvalidInput(ALL_FIELDS_REQUIRED)
    if password is not None and not isinstance(password, str):
        raise InvalidInput(ALL_FIELDS_REQUIRED)
    if password:
        _check_password_length(password)

    logger.info("update user id=%s username=%s", user_id, username)
    session: Session = SessionLocal()
    try:
        users = UserRepository(session)
        user = users.find_by_id(user_id)
        if user is None:
            raise NotFound("User does not exist", legacy_status_code=409)

        duplicate = users.find_by_username(username)
        if duplicate is not None and duplicate.id != user.id:
            raise Conflict("Username already taken")

        user.username = username
        user.roles = list(roles)
        user.active = active
        if password:
            user.password = hash_password(password)

        if users.save(user) is None:
            raise PersistenceError("User could not be updated")
        session.commit()
        USER_UPDATED_COUNTER.inc()
        logger.info("updated user id=%s username=%s", user_id, username)
        return f"User {username} updated"
    except IntegrityError as exc:
        session.rollback()
        raise Conflict("Username already taken") from exc
    except Exception as exc:
        _handle_service_error(session, exc, "User could not be updated")
    finally:
        session.close()


def delete_user(user_id: Any) -> str:
    """Delete a user that owns no notes."""
    if user_id is None or user_id == "":
        raise InvalidInput("User ID required")
    if not _valid_id(user_id):
        raise InvalidInput("Invalid user ID")

    logger.info("delete user id=%s", user_id)
    session: Session = SessionLocal()
    try:
        users = UserRepository(session)
        user = users.find_by_id(user_id)
        if user is None:
            raise NotFound("User does not exist", legacy_status_code=409)

        if NoteRepository(session).find_by_user(user.id):
            raise Conflict("User has notes, cannot delete")

        username = user.username
        if not users.delete(user):
            raise PersistenceError("User could not be deleted")
        session.commit()
        USER_DELETED_COUNTER.inc()
        logger.info("deleted user id=%s username=%s", user_id, username)
        return f"User {username} deleted"
    except Exception as exc:
        _handle_service_error(session, exc, "User could not be deleted")
    finally:
        session.close()


def authenticate(username: Any, password: Any) -> Dict[str, Any]:
    """Check credentials and return the matching active user's summary."""
    if (
        not username
        or not isinstance(username, str)
        or not password
        or not isinstance(password, str)
    ):
        raise InvalidInput(ALL_FIELDS_REQUIRED)

    session: Session = SessionLocal()
    try:
        user = UserRepository(session).find_by_username(username)
        if user is None or not user.active or not verify_password(password, user.password):
            logger.info("rejected login username=%s", username)
            raise Unauthorized("Unauthorized")
        return _summary(user)
    except Exception as exc:
        _handle_service_error(session, exc, "Login could not be processed")
    finally:
        session.close()


def ensure_admin_user() -> bool:
    """Create the configured admin account when the users table is empty.

    Returns ``True`` when an account was created.
    """
    if not settings.admin_username or not settings.admin_password:
        return False

    session: Session = SessionLocal()
    try:
        existing = UserRepository(session).count()
    finally:
        session.close()
    if existing:
        return False

    try:
        create_user(settings.admin_username, settings.admin_password, ["Admin"])
    except ServiceError as exc:
        logger.error("could not bootstrap admin user %s: %s", settings.admin_username, exc.message)
        return False
    logger.info("bootstrapped admin user %s", settings.admin_username)
    return True
