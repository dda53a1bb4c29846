# gymbook/deps.py

from datetime import datetime, timezone

from fastapi import Depends
from sqlmodel import Session

from .auth import get_current_user
from .db import get_session
from .errors import NotFoundError, PermissionDeniedError
from .models import Profile
from .schemas import Role


def require_role(profile: Profile, role: Role):
    if profile.role != role.value:
        raise PermissionDeniedError(f"Forbidden - {role.value} access required")


def get_current_profile(
    current_user: dict = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> Profile:
    profile = session.get(Profile, current_user["id"])
    if profile is None:
        raise NotFoundError("User profile not found")
    return profile


def get_admin_profile(profile: Profile = Depends(get_current_profile)) -> Profile:
    require_role(profile, Role.admin)
    return profile


def get_now() -> datetime:
    return datetime.now(timezone.utc)
