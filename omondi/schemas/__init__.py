from omondi.schemas.auth import Credentials, CurrentUser, MessageResponse
from omondi.schemas.character import (
    CharacterCreate,
    CharacterCreated,
    CharacterImage,
    CharacterList,
    CharacterResponse,
    StoredImage,
)
from omondi.schemas.generation import (
    AnimatedVideoRequest,
    CharacterImageRequest,
    ChartData,
    ChatMessage,
    ChatOutput,
    ChatRequest,
    DescriptionImageRequest,
    EnhanceImageRequest,
    ImageRequest,
    ImageResponse,
    PromptImproveRequest,
    PromptImproveResponse,
    StillVideoRequest,
    StyleTransferRequest,
    VideoRequest,
    VideoResponse,
)

__all__ = [
    "Credentials",
    "CurrentUser",
    "MessageResponse",
    "CharacterCreate",
    "CharacterCreated",
    "CharacterImage",
    "CharacterList",
    "CharacterResponse",
    "StoredImage",
    "AnimatedVideoRequest",
    "CharacterImageRequest",
    "ChartData",
    "ChatMessage",
    "ChatOutput",
    "ChatRequest",
    "DescriptionImageRequest",
    "EnhanceImageRequest",
    "ImageRequest",
    "ImageResponse",
    "PromptImproveRequest",
    "PromptImproveResponse",
    "StillVideoRequest",
    "StyleTransferRequest",
    "VideoRequest",
    "VideoResponse",
]
