"""
FastAPI dependencies. Everything comes from app.state, which create_app fills
explicitly; nothing here reaches for module-level globals.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from omondi.ai.provider import GeminiProvider, Provider
from omondi.core.config import Settings
from omondi.core.security import COOKIE_NAME, decode_token
from omondi.db import User
from omondi.runners import FFmpegRunner

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request):
    """Dependency for FastAPI endpoints."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_provider(request: Request) -> Provider:
    """The app's provider, built from settings on first use."""
    state = request.app.state
    if state.provider is None:
        state.provider = GeminiProvider.from_settings(state.settings)
    return state.provider


def get_runner(request: Request) -> FFmpegRunner:
    return request.app.state.runner


def _token_from(request: Request) -> Optional[str]:
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


def require_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """Reject the request with 401 unless it carries a valid session."""
    token = _token_from(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    username = decode_token(token, settings.jwt_secret)
    if not username:
        raise HTTPException(status_code=401, detail="Session expired or invalid")

    user = db.query(User).filter(User.username == username).first()
    if not user:
        raise HTTPException(status_code=401, detail="Session expired or invalid")
    return user
