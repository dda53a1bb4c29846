# gymbook/models.py

from typing import Optional
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel, Field, Column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Stores instants as naive UTC and hands them back timezone-aware.

    SQLite drops tzinfo on the way in, so everything is normalised here to
    keep a booking's instants identical between write and read.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("naive datetime passed to a UTC column")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def _instant_column(**kwargs) -> Column:
    return Column(UTCDateTime(), nullable=False, **kwargs)


class Account(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    created_at: datetime = Field(default_factory=utcnow, sa_column=_instant_column())


class Profile(SQLModel, table=True):
    # id is the account id (the token subject resolves to it)
    id: int = Field(
        sa_column=Column(Integer, ForeignKey("account.id"), primary_key=True, autoincrement=False)
    )
    email: str = Field(index=True, unique=True)
    full_name: Optional[str] = None
    flat_number: Optional[str] = Field(default=None, index=True)
    role: str = "neighbor"  # neighbor, trainer or admin
    created_at: datetime = Field(default_factory=utcnow, sa_column=_instant_column())


class Booking(SQLModel, table=True):
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="valid_time_range"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="profile.id", index=True)
    start_time: datetime = Field(sa_column=_instant_column(index=True))
    end_time: datetime = Field(sa_column=_instant_column())
    is_recurring: bool = False
    recurring_parent_id: Optional[int] = Field(default=None, foreign_key="booking.id", index=True)
    client_reference: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_column=_instant_column())
