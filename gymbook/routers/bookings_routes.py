# gymbook/routers/bookings_routes.py

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel import Session

from gymbook import crud
from gymbook.config import get_settings
from gymbook.core import as_instant, evaluate_booking, precheck_start
from gymbook.db import get_session
from gymbook.deps import get_current_profile, get_now
from gymbook.errors import BookingValidationError, NotFoundError, PermissionDeniedError, rejection_error
from gymbook.models import Booking, Profile
from gymbook.schemas import (
    BookingCreate,
    BookingPublic,
    CalendarBooking,
    Message,
    Role,
    ValidateRequest,
    ValidateResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"],
)


@router.post("", response_model=BookingPublic, status_code=201)
def create_booking(
    payload: BookingCreate,
    session: Session = Depends(get_session),
    profile: Profile = Depends(get_current_profile),
    now: datetime = Depends(get_now),
):
    # labels are a trainer feature; admins may set them too
    client_reference = payload.client_reference
    if profile.role == Role.neighbor.value:
        client_reference = None

    # rules and insert run against the same snapshot, one request at a time
    with crud.booking_lock:
        decision = evaluate_booking(
            payload.start_time,
            payload.end_time,
            role=profile.role,
            user_id=profile.id,
            reader=crud.SessionBookingReader(session),
            now=now,
        )
        if not decision.ok:
            logger.info(
                "Booking rejected for user %s (%s): %s",
                profile.id, decision.rule.value, decision.message,
            )
            raise rejection_error(decision)

        booking = crud.create_booking(
            session,
            user_id=profile.id,
            start=decision.start,
            end=decision.end,
            client_reference=client_reference,
        )

    logger.info(
        "Booking %s created for user %s: %s - %s",
        booking.id, profile.id, booking.start_time.isoformat(), booking.end_time.isoformat(),
    )
    return booking


@router.get("", response_model=List[CalendarBooking])
def list_bookings(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    session: Session = Depends(get_session),
    profile: Profile = Depends(get_current_profile),
):
    settings = get_settings()
    range_start = as_instant(start, settings) if start is not None else None
    range_end = as_instant(end, settings) if end is not None else None

    rows = crud.list_bookings(session, start=range_start, end=range_end)
    return [
        {
            **booking.model_dump(),
            "owner_role": owner.role,
            "is_own": booking.user_id == profile.id,
        }
        for booking, owner in rows
    ]


@router.get("/mine", response_model=List[BookingPublic])
def list_my_bookings(
    session: Session = Depends(get_session),
    profile: Profile = Depends(get_current_profile),
    now: datetime = Depends(get_now),
):
    return crud.list_upcoming_for_user(session, user_id=profile.id, now=now)


@router.post("/validate", response_model=ValidateResponse)
def validate_booking(
    payload: ValidateRequest,
    profile: Profile = Depends(get_current_profile),
    now: datetime = Depends(get_now),
):
    decision = precheck_start(payload.start_time, role=profile.role, now=now)
    if not decision.ok:
        return JSONResponse(
            status_code=400,
            content={"valid": False, "error": decision.message},
        )
    return {"valid": True}


@router.delete("/{booking_id}", response_model=Message)
def cancel_booking(
    booking_id: int,
    session: Session = Depends(get_session),
    profile: Profile = Depends(get_current_profile),
    now: datetime = Depends(get_now),
):
    # 1) Find the booking
    booking = session.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking not found")

    # 2) Only the owner cancels through here
    if booking.user_id != profile.id:
        raise PermissionDeniedError("You can only cancel your own bookings")

    # 3) Started or finished bookings stay
    if booking.start_time < now:
        raise BookingValidationError("Cannot cancel bookings that have already started or passed")

    crud.delete_booking(session, booking)
    logger.info("Booking %s cancelled by owner %s", booking_id, profile.id)
    return {"message": "Booking cancelled successfully"}
