"""
Character library for the studio.

Each character is a named, ordered set of reference images used to keep a
subject consistent across generations:

    Character
    ├── name            unique, e.g. "Amina"
    ├── images          [{"data_uri": "data:image/png;base64,...", "size": 48213}, ...]
    └── size_bytes      sum of the image sizes

The total stored size across all characters is capped by the storage quota
(400MB by default); an upload that would cross it is rejected before anything
is written.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from omondi.core.errors import CharacterExistsError, QuotaExceededError
from omondi.core.media import MediaPart
from omondi.db import Character
from omondi.schemas.character import CharacterCreate

logger = logging.getLogger(__name__)


def parse_character_id(character_id: str) -> Optional[uuid.UUID]:
    """Return the UUID for a path id, or None if it is malformed."""
    try:
        return uuid.UUID(str(character_id))
    except (TypeError, ValueError):
        return None


def list_characters(db: Session) -> List[Character]:
    """All characters, newest first."""
    return db.query(Character).order_by(Character.created_at.desc()).all()


def total_storage(db: Session) -> int:
    """Bytes used by all stored reference images."""
    return int(db.query(func.coalesce(func.sum(Character.size_bytes), 0)).scalar() or 0)


def get_character(db: Session, character_id: uuid.UUID) -> Optional[Character]:
    return db.query(Character).filter(Character.id == character_id).first()


def get_character_images(db: Session, character_id: uuid.UUID) -> Optional[List[MediaPart]]:
    """Decoded reference images of a character, in upload order."""
    character = get_character(db, character_id)
    if not character:
        return None
    return [MediaPart.from_data_uri(image["data_uri"]) for image in character.images]


def create_character(db: Session, data: CharacterCreate, quota_bytes: int) -> Character:
    """
    Store a new character.

    Raises:
        CharacterExistsError: a character with this name already exists
        QuotaExceededError: the upload would push total storage over quota
    """
    if db.query(Character).filter(Character.name == data.name).first():
        raise CharacterExistsError(f"A character named '{data.name}' already exists.")

    used = total_storage(db)
    requested = data.size_bytes
    if used + requested > quota_bytes:
        logger.info(
            f"Rejected character '{data.name}': {used} + {requested} bytes exceeds {quota_bytes}"
        )
        raise QuotaExceededError(used, requested, quota_bytes)

    character = Character(
        name=data.name,
        images=[image.model_dump() for image in data.images],
        size_bytes=requested,
    )
    db.add(character)
    db.commit()
    db.refresh(character)
    logger.info(
        f"Created character '{character.name}' ({len(data.images)} images, {requested} bytes)"
    )
    return character


def delete_character(db: Session, character_id: uuid.UUID) -> bool:
    """Delete a character and all of its images. Returns False if not found."""
    character = get_character(db, character_id)
    if not character:
        return False
    db.delete(character)
    db.commit()
    logger.info(f"Deleted character {character_id}")
    return True
