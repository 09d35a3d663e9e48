"""
Login, logout and one-time signup.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from omondi.api.deps import get_db, get_settings, require_user
from omondi.core.config import Settings
from omondi.core.security import (
    COOKIE_NAME,
    create_token,
    hash_password,
    password_problem,
    verify_password,
)
from omondi.db import User
from omondi.schemas import Credentials, CurrentUser, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=MessageResponse)
def login(
    data: Credentials,
    response: Response,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Check credentials and set the session cookie."""
    if not data.username or not data.password:
        raise HTTPException(status_code=400, detail="Username and password are required.")

    user = db.query(User).filter(User.username == data.username).first()
    if not verify_password(data.password, user.password_hash if user else None):
        logger.info(f"Failed login for '{data.username}'")
        raise HTTPException(status_code=401, detail="Invalid username or password")

    token = create_token(user.username, settings.jwt_secret, settings.session_max_age)
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=settings.session_max_age,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    logger.info(f"User '{user.username}' logged in")
    return MessageResponse(message="Authentication successful")


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_settings)):
    """Clear the session cookie."""
    response.delete_cookie(
        COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
    )
    return MessageResponse(message="Logout successful")


@router.post("/signup", response_model=MessageResponse, status_code=201)
def signup(data: Credentials, db: Session = Depends(get_db)):
    """Create the studio's only account. Disabled once a user exists."""
    if not data.username or not data.password:
        raise HTTPException(status_code=400, detail="Username and password are required.")
    problem = password_problem(data.password)
    if problem:
        raise HTTPException(status_code=400, detail=problem)

    if db.query(User).count() > 0:
        raise HTTPException(status_code=409, detail="An account already exists. Signup is disabled.")

    db.add(User(username=data.username, password_hash=hash_password(data.password)))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="An account already exists. Signup is disabled.")

    logger.info(f"Created account '{data.username}'")
    return MessageResponse(message="User created successfully.")


@router.get("/me", response_model=CurrentUser)
def me(user: User = Depends(require_user)):
    return CurrentUser(username=user.username)
