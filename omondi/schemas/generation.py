"""
Request/response schemas for the generation endpoints.

Image and video requests are tagged unions on `mode`, resolved once when the
request body is parsed.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, Field, model_validator

from omondi.core.media import decode_data_uri


def _check_data_uri(value: str) -> str:
    decode_data_uri(value)
    return value


DataUri = Annotated[str, AfterValidator(_check_data_uri)]


# ----------------------------------------------------------------- images

class DescriptionImageRequest(BaseModel):
    """Plain text-to-image."""
    mode: Literal["description"] = "description"
    description: str = Field(min_length=1)


class EnhanceImageRequest(BaseModel):
    """Enhance one or more uploaded images, optionally guided by a prompt."""
    mode: Literal["enhance"] = "enhance"
    images: List[DataUri] = Field(min_length=1)
    prompt: Optional[str] = None


class CharacterImageRequest(BaseModel):
    """Place a saved (or inline) character into a described scene."""
    mode: Literal["character"] = "character"
    prompt: str = Field(min_length=1)
    character_id: Optional[str] = None
    character_images: List[DataUri] = Field(default_factory=list)

    @model_validator(mode="after")
    def require_character(self):
        if not self.character_id and not self.character_images:
            raise ValueError("Provide a character_id or at least one character image.")
        return self


ImageRequest = Annotated[
    Union[DescriptionImageRequest, EnhanceImageRequest, CharacterImageRequest],
    Field(discriminator="mode"),
]


class StyleTransferRequest(BaseModel):
    base_image_prompt: str = Field(min_length=1)
    style_image: DataUri
    style_strength: float = Field(default=0.5, ge=0.0, le=1.0)


class ImageResponse(BaseModel):
    image_url: str


class PromptImproveRequest(BaseModel):
    original_prompt: str = Field(min_length=1)


class PromptImproveResponse(BaseModel):
    improved_prompt: str


# ----------------------------------------------------------------- video

class StillVideoRequest(BaseModel):
    """Loop a still image, optionally narrated."""
    mode: Literal["still"] = "still"
    image: DataUri
    narration: Optional[str] = None
    prompt: Optional[str] = None


class AnimatedVideoRequest(BaseModel):
    """Ask the provider's video model for a clip, optionally narrated."""
    mode: Literal["animate"] = "animate"
    prompt: str = Field(min_length=1)
    image: Optional[DataUri] = None
    narration: Optional[str] = None


VideoRequest = Annotated[
    Union[StillVideoRequest, AnimatedVideoRequest],
    Field(discriminator="mode"),
]


class VideoResponse(BaseModel):
    video_url: str
    audio_url: Optional[str] = None


# ----------------------------------------------------------------- chat

class ChatMessage(BaseModel):
    role: Literal["user", "model"]
    content: str


class ChartData(BaseModel):
    title: str
    data: List[Dict[str, Any]]
    categories: List[str]
    index: str
    type: Literal["bar", "line", "area"] = "bar"


class ChatRequest(BaseModel):
    history: List[ChatMessage] = Field(default_factory=list)
    new_message: str = Field(min_length=1)


class ChatOutput(BaseModel):
    response: str
    chart: Optional[ChartData] = None
