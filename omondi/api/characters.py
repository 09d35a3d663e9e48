"""
Character library endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from omondi.api.deps import get_db, get_settings, require_user
from omondi.core import characters as store
from omondi.core.config import Settings
from omondi.schemas import CharacterCreate, CharacterCreated, CharacterList, CharacterResponse, MessageResponse

router = APIRouter(prefix="/api/characters", tags=["characters"], dependencies=[Depends(require_user)])


def _parse_id(character_id: str):
    parsed = store.parse_character_id(character_id)
    if parsed is None:
        raise HTTPException(status_code=400, detail="Invalid character ID.")
    return parsed


@router.get("", response_model=CharacterList)
def list_characters(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """All characters (newest first) with total storage used."""
    return CharacterList(
        characters=store.list_characters(db),
        total_size=store.total_storage(db),
        storage_limit=settings.storage_quota_bytes,
    )


@router.post("", response_model=CharacterCreated, status_code=201)
def create_character(
    data: CharacterCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Store a new character. Quota and name uniqueness are checked before writing."""
    character = store.create_character(db, data, settings.storage_quota_bytes)
    return CharacterCreated(character_id=character.id)


@router.get("/{character_id}", response_model=CharacterResponse)
def get_character(character_id: str, db: Session = Depends(get_db)):
    character = store.get_character(db, _parse_id(character_id))
    if not character:
        raise HTTPException(status_code=404, detail="Character not found.")
    return character


@router.delete("/{character_id}", response_model=MessageResponse)
def delete_character(character_id: str, db: Session = Depends(get_db)):
    if not store.delete_character(db, _parse_id(character_id)):
        raise HTTPException(status_code=404, detail="Character not found.")
    return MessageResponse(message="Character deleted successfully.")
