# gymbook/routers/users_routes.py

from fastapi import APIRouter, Depends
from sqlmodel import Session

from gymbook import crud
from gymbook.db import get_session
from gymbook.deps import get_current_profile
from gymbook.models import Profile
from gymbook.schemas import ProfilePublic, ProfileUpdate

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=ProfilePublic)
def me(profile: Profile = Depends(get_current_profile)):
    return profile


@router.patch("/me", response_model=ProfilePublic)
def update_me(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    profile: Profile = Depends(get_current_profile),
):
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(profile, field, value)

    session.add(profile)
    crud.commit_or_fail(session, "Failed to update profile")
    session.refresh(profile)
    return profile
