# gymbook/routers/auth_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from gymbook import crud
from gymbook.auth import create_access_token, hash_password, on_account_created, verify_password
from gymbook.config import get_settings
from gymbook.db import get_session
from gymbook.models import Account
from gymbook.schemas import Message, ProfilePublic, SignUp, Token

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


@router.post("/signup", status_code=201, response_model=ProfilePublic)
def signup(
    payload: SignUp,
    session: Session = Depends(get_session),
):
    email = payload.email.strip().lower()

    # 1) Check if email already exists
    existing = session.exec(
        select(Account).where(Account.email == email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 2) Create the account, then its profile
    account = Account(email=email, password_hash=hash_password(payload.password))
    session.add(account)
    session.flush()  # fills account.id

    profile = on_account_created(
        session,
        account,
        flat_number=payload.flat_number,
        full_name=payload.full_name,
    )
    crud.commit_or_fail(session, "Failed to create account")
    session.refresh(profile)

    logger.info("Account %s signed up", account.id)
    return profile


@router.post("/login", response_model=Token)
def login(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    settings = get_settings()
    email = form_data.username.strip().lower()
    password = form_data.password

    account = session.exec(
        select(Account).where(Account.email == email)
    ).first()

    if account is None or not verify_password(password, account.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": account.email})
    response.set_cookie(
        settings.cookie_name,
        token,
        httponly=True,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
    )
    return {"access_token": token, "token_type": "bearer"}


@router.post("/logout", response_model=Message)
def logout(response: Response):
    response.delete_cookie(get_settings().cookie_name)
    return {"message": "Logged out"}
