from typing import Optional

from pydantic import BaseModel


class Credentials(BaseModel):
    """Login / signup body. Emptiness is checked in the routes to return 400."""
    username: Optional[str] = None
    password: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
    success: bool = True


class CurrentUser(BaseModel):
    username: str
