"""
Auth routes: register, login, me, logout; admin user management and dashboard statistics.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tracker.api.deps import get_current_user, get_page, require_admin
from tracker.api.responses import render
from tracker.database import get_db
from tracker.models.user import User
from tracker.schemas.auth import LoginRequest, RegisterRequest, UserUpdateRequest
from tracker.services import identity, stats
from tracker.services.pagination import PageParams

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Register a new user; returns the user and a session token."""
    return render(identity.register(db, data))


@router.post("/login")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Login with email/password (and optional role); replaces any previous session token."""
    return render(identity.login(db, data))


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return render(identity.get_me(current_user))


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Clear the stored token; the caller's token stops working immediately."""
    return render(identity.logout(db, current_user))


@router.get("/admin/users")
def list_users(
    search: str | None = None,
    params: PageParams = Depends(get_page),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return render(identity.list_users(db, params, search))


@router.put("/admin/update-details/{user_id}")
def update_user(
    user_id: str,
    data: UserUpdateRequest,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return render(identity.update_user(db, admin, user_id, data))


@router.delete("/admin/delete-user/{user_id}")
def delete_user(user_id: str, admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return render(identity.delete_user(db, admin, user_id))


@router.get("/admin/dashboard-stats")
def dashboard_stats(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    return render(stats.get_dashboard_stats(db))
