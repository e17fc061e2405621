"""
Identity service: registration, login, token authentication, logout and admin user management.
One active session per user: the last issued token is stored on the user row and is the only one
`authenticate` accepts. Logging in elsewhere or logging out invalidates older tokens.
"""
import logging
import uuid

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tracker.models.completed_problem import CompletedProblem
from tracker.models.problem import ProblemCompletion
from tracker.models.user import User
from tracker.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
    UserUpdateRequest,
)
from tracker.services.auth import (
    TokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from tracker.services.pagination import PageParams, page_payload, paginate
from tracker.services.result import Ok, Result, conflict, invalid, not_found, unauthorized
from tracker.services.validation import like_pattern, parse_id

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email already in use"


def _find_by_email(db: Session, email: str, exclude_id: uuid.UUID | None = None) -> User | None:
    q = db.query(User).filter(func.lower(User.email) == email.strip().lower())
    if exclude_id is not None:
        q = q.filter(User.id != exclude_id)
    return q.first()


def _user_out(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


def _issue_token(db: Session, user: User) -> str:
    token = create_access_token(user.id, user.role)
    user.token = token
    db.commit()
    db.refresh(user)
    return token


def register(db: Session, data: RegisterRequest) -> Result:
    """Create a user (bcrypt hash only) and start its first session."""
    email = str(data.email).strip().lower()
    if _find_by_email(db, email):
        return conflict(EMAIL_TAKEN)
    user = User(
        name=data.name,
        email=email,
        password_hash=hash_password(data.password),
        role=data.role,
    )
    db.add(user)
    try:
        db.flush()
        token = _issue_token(db, user)
    except IntegrityError as e:
        # concurrent registration with the same email
        db.rollback()
        logger.warning("Register IntegrityError: %s", e)
        return conflict(EMAIL_TAKEN, str(getattr(e, "orig", e)))
    logger.info("User registered: id=%s role=%s", user.id, user.role)
    return Ok(
        AuthResponse(user=_user_out(user), token=token),
        "User registered successfully",
        201,
    )


def login(db: Session, data: LoginRequest) -> Result:
    """Check credentials (and role when given); overwrite the stored token with a new one."""
    user = _find_by_email(db, str(data.email))
    if user is not None and data.role is not None and user.role != data.role:
        user = None
    if user is None or not verify_password(data.password, user.password_hash):
        logger.warning("Failed login attempt: email=%s role=%s", data.email, data.role)
        return unauthorized("Invalid credentials")
    token = _issue_token(db, user)
    logger.info("User logged in: id=%s", user.id)
    return Ok(AuthResponse(user=_user_out(user), token=token), "Login successful")


def authenticate(db: Session, token: str | None) -> Result:
    """Resolve a bearer token to its user. Ok(data=User) or Err(UNAUTHORIZED)."""
    if not token or not token.strip():
        return unauthorized("Authorization token is missing")
    token = token.strip()
    try:
        payload = decode_access_token(token)
    except TokenError as e:
        logger.debug("Auth failed: %s", e)
        return unauthorized(str(e))
    user_id = parse_id(payload.get("sub"))
    if user_id is None:
        return unauthorized("Invalid token")
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        logger.warning("User not found for token: user_id=%s", user_id)
        return unauthorized("User not found for this token")
    if user.token != token:
        logger.warning("Token mismatch for user: id=%s", user.id)
        return unauthorized("Token has been invalidated")
    return Ok(user)


def get_me(user: User) -> Result:
    return Ok(_user_out(user), "User retrieved successfully")


def logout(db: Session, user: User) -> Result:
    user.token = None
    db.commit()
    logger.info("User logged out: id=%s", user.id)
    return Ok(None, "Logout successful")


def list_users(db: Session, params: PageParams, search: str | None = None) -> Result:
    """Newest first; search matches name or email, case-insensitively."""
    q = db.query(User)
    if search and search.strip():
        pattern = like_pattern(search.strip())
        q = q.filter(or_(User.name.ilike(pattern, escape="\\"), User.email.ilike(pattern, escape="\\")))
    users, meta = paginate(q.order_by(User.created_at.desc(), User.id), params)
    return Ok(page_payload([_user_out(u) for u in users], meta), "Users retrieved successfully")


def update_user(db: Session, actor: User, user_id: str, data: UserUpdateRequest) -> Result:
    """Apply name/email/role. The service does not gate callers; a role change from a non-admin actor is ignored."""
    uid = parse_id(user_id)
    if uid is None:
        return invalid("Invalid user ID format")
    user = db.query(User).filter(User.id == uid).first()
    if user is None:
        return not_found("User not found")
    changed = []
    if data.name is not None:
        user.name = data.name
        changed.append("name")
    if data.email is not None:
        email = str(data.email).strip().lower()
        if _find_by_email(db, email, exclude_id=user.id):
            return conflict(EMAIL_TAKEN)
        user.email = email
        changed.append("email")
    if data.role is not None and actor.is_admin:
        user.role = data.role
        changed.append("role")
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Update user IntegrityError: %s", e)
        return conflict(EMAIL_TAKEN, str(getattr(e, "orig", e)))
    db.refresh(user)
    logger.info("User updated: id=%s by=%s fields=%s", user.id, actor.id, changed)
    return Ok(_user_out(user), "User updated successfully")


def delete_user(db: Session, actor: User, user_id: str) -> Result:
    """Delete the user together with their completion records."""
    uid = parse_id(user_id)
    if uid is None:
        return invalid("Invalid user ID format")
    user = db.query(User).filter(User.id == uid).first()
    if user is None:
        return not_found("User not found")
    out = _user_out(user)
    db.query(CompletedProblem).filter(CompletedProblem.user_id == uid).delete(synchronize_session=False)
    db.query(ProblemCompletion).filter(ProblemCompletion.user_id == uid).delete(synchronize_session=False)
    db.delete(user)
    db.commit()
    logger.info("User deleted: id=%s by=%s", uid, actor.id)
    return Ok(out, "User deleted successfully")
