# gymbook/routers/admin_routes.py

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from gymbook import crud
from gymbook.db import get_session
from gymbook.deps import get_admin_profile
from gymbook.errors import NotFoundError
from gymbook.models import Booking, Profile
from gymbook.schemas import AdminBooking, Message, ProfilePublic, RoleUpdate

logger = logging.getLogger(__name__)

# Everything here skips ownership checks; the router-level dependency is
# the only gate.
router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_admin_profile)],
)


@router.get("/bookings", response_model=List[AdminBooking])
def list_all_bookings(session: Session = Depends(get_session)):
    rows = crud.list_bookings(session)
    return [
        {
            **booking.model_dump(),
            "owner_email": owner.email,
            "owner_flat_number": owner.flat_number,
        }
        for booking, owner in rows
    ]


@router.delete("/bookings/{booking_id}", response_model=Message)
def admin_cancel_booking(
    booking_id: int,
    session: Session = Depends(get_session),
    admin: Profile = Depends(get_admin_profile),
):
    booking = session.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")

    owner_id = booking.user_id
    # past or future, any owner
    crud.delete_booking(session, booking)
    logger.info(
        "Booking %s of user %s cancelled by admin %s",
        booking_id, owner_id, admin.id,
    )
    return {"message": "Booking cancelled successfully"}


@router.get("/users", response_model=List[ProfilePublic])
def list_users(session: Session = Depends(get_session)):
    return crud.list_profiles(session)


@router.patch("/users/{user_id}/role", response_model=ProfilePublic)
def change_user_role(
    user_id: int,
    payload: RoleUpdate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(get_admin_profile),
):
    profile = session.get(Profile, user_id)
    if profile is None:
        raise NotFoundError("User not found")

    previous = profile.role
    profile.role = payload.role.value
    session.add(profile)
    crud.commit_or_fail(session, "Failed to update user role")
    session.refresh(profile)

    logger.info(
        "Role of user %s changed from %s to %s by admin %s",
        user_id, previous, profile.role, admin.id,
    )
    return profile
