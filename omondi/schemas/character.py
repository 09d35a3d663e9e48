"""
Pydantic schemas for the character library.
"""
from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from omondi.core.media import decode_data_uri


class CharacterImage(BaseModel):
    """One uploaded reference image: a data URI plus its decoded byte size."""
    data_uri: str
    size: int = Field(ge=0)

    @model_validator(mode="after")
    def check_payload(self):
        _, data = decode_data_uri(self.data_uri)
        if len(data) != self.size:
            raise ValueError(
                f"Declared size {self.size} does not match the decoded image size {len(data)}."
            )
        return self


class StoredImage(BaseModel):
    """A reference image as stored; validated once on upload."""
    data_uri: str
    size: int


class CharacterCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    images: List[CharacterImage] = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Character name is required.")
        return value

    @property
    def size_bytes(self) -> int:
        return sum(image.size for image in self.images)


class CharacterResponse(BaseModel):
    id: UUID
    name: str
    images: List[StoredImage]
    size_bytes: int
    created_at: datetime

    class Config:
        from_attributes = True


class CharacterList(BaseModel):
    success: bool = True
    characters: List[CharacterResponse]
    total_size: int
    storage_limit: int


class CharacterCreated(BaseModel):
    success: bool = True
    message: str = "Character created successfully."
    character_id: UUID
