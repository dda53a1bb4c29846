# gymbook/auth.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from sqlmodel import Session, select

from .config import get_settings
from .db import get_session
from .errors import AuthenticationError
from .models import Account, Profile

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    settings = get_settings()
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def on_account_created(
    session: Session,
    account: Account,
    flat_number: Optional[str] = None,
    full_name: Optional[str] = None,
) -> Profile:
    """Signup hook: every account gets exactly one profile, as a neighbor."""
    profile = Profile(
        id=account.id,
        email=account.email,
        flat_number=flat_number,
        full_name=full_name,
        role="neighbor",
    )
    session.add(profile)
    return profile


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> dict:
    settings = get_settings()
    if token is None:
        token = request.cookies.get(settings.cookie_name)
    if not token:
        raise AuthenticationError("Unauthorized - Please log in")

    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        email = payload.get("sub")
        if email is None:
            raise AuthenticationError("Invalid token")
    except JWTError:
        raise AuthenticationError("Invalid token")

    account = session.exec(
        select(Account).where(Account.email == email)
    ).first()

    if account is None:
        logger.info("Token for unknown account %s", email)
        raise AuthenticationError("User not found")

    return {
        "id": account.id,
        "email": account.email,
    }
