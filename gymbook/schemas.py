# gymbook/schemas.py

from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime
from typing import Optional


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class Role(str, Enum):
    neighbor = "neighbor"
    trainer = "trainer"
    admin = "admin"


class SignUp(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=8, max_length=72)
    flat_number: Optional[str] = Field(default=None, max_length=32)
    full_name: Optional[str] = Field(default=None, max_length=120)


class ProfilePublic(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    flat_number: Optional[str] = None
    role: Role
    created_at: datetime


class ProfileUpdate(BaseModel):
    # role is deliberately absent; only admins change it
    full_name: Optional[str] = Field(default=None, max_length=120)
    flat_number: Optional[str] = Field(default=None, max_length=32)


class RoleUpdate(BaseModel):
    role: Role


class BookingCreate(BaseModel):
    start_time: datetime
    end_time: datetime
    client_reference: Optional[str] = Field(default=None, max_length=120)


class BookingPublic(BaseModel):
    id: int
    user_id: int
    start_time: datetime
    end_time: datetime
    is_recurring: bool
    recurring_parent_id: Optional[int] = None
    client_reference: Optional[str] = None
    created_at: datetime


class CalendarBooking(BookingPublic):
    owner_role: Role
    is_own: bool


class AdminBooking(BookingPublic):
    owner_email: Optional[str] = None
    owner_flat_number: Optional[str] = None


class ValidateRequest(BaseModel):
    start_time: datetime


class ValidateResponse(BaseModel):
    valid: bool
    error: Optional[str] = None


class Message(BaseModel):
    message: str
