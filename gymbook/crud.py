# gymbook/crud.py

import logging
import threading
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from .errors import StorageError
from .models import Booking, Profile

logger = logging.getLogger(__name__)

# Serialises check-then-insert for bookings within this process.
booking_lock = threading.Lock()


class SessionBookingReader:
    """Reads existing bookings through the caller's session."""

    def __init__(self, session: Session):
        self.session = session

    def overlapping(self, start: datetime, end: datetime) -> List[int]:
        return self.session.exec(
            select(Booking.id)
            .where(Booking.start_time < end)
            .where(Booking.end_time > start)
            .limit(1)
        ).all()

    def owned_between(self, user_id: int, start: datetime, end: datetime) -> List[int]:
        return self.session.exec(
            select(Booking.id)
            .where(Booking.user_id == user_id)
            .where(Booking.start_time >= start)
            .where(Booking.start_time < end)
            .limit(1)
        ).all()


def commit_or_fail(session: Session, message: str) -> None:
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception(message)
        raise StorageError(message) from exc


def create_booking(
    session: Session,
    user_id: int,
    start: datetime,
    end: datetime,
    client_reference: Optional[str] = None,
) -> Booking:
    db_booking = Booking(
        user_id=user_id,
        start_time=start,
        end_time=end,
        is_recurring=False,
        recurring_parent_id=None,
        client_reference=client_reference,
    )
    session.add(db_booking)
    commit_or_fail(session, "Failed to create booking")
    session.refresh(db_booking)
    return db_booking


def delete_booking(session: Session, booking: Booking) -> None:
    session.delete(booking)
    commit_or_fail(session, "Failed to cancel booking")


def list_bookings(
    session: Session,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Tuple[Booking, Profile]]:
    stmt = select(Booking, Profile).join(Profile, Booking.user_id == Profile.id)
    if start is not None:
        stmt = stmt.where(Booking.start_time >= start)
    if end is not None:
        stmt = stmt.where(Booking.end_time <= end)
    stmt = stmt.order_by(Booking.start_time)
    return session.exec(stmt).all()


def list_upcoming_for_user(session: Session, user_id: int, now: datetime) -> List[Booking]:
    return session.exec(
        select(Booking)
        .where(Booking.user_id == user_id)
        .where(Booking.end_time > now)
        .order_by(Booking.start_time)
    ).all()


def list_profiles(session: Session) -> List[Profile]:
    return session.exec(
        select(Profile).order_by(Profile.created_at.desc(), Profile.id.desc())
    ).all()
