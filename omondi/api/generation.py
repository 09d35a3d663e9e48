"""
Generation endpoints: images, style transfer, prompt help, video and chat.
"""

import logging

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from omondi.ai import images, video
from omondi.ai.chat import chat as run_chat_turn
from omondi.ai.provider import Provider
from omondi.api.deps import get_db, get_provider, get_runner, get_settings, require_user
from omondi.core import characters as store
from omondi.core.config import Settings
from omondi.core.media import MediaPart
from omondi.runners import FFmpegRunner
from omondi.schemas import (
    CharacterImageRequest,
    ChatOutput,
    ChatRequest,
    ImageRequest,
    ImageResponse,
    PromptImproveRequest,
    PromptImproveResponse,
    StyleTransferRequest,
    VideoRequest,
    VideoResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["generation"], dependencies=[Depends(require_user)])


def _resolve_character(request: CharacterImageRequest, db: Session) -> CharacterImageRequest:
    """Fill in reference images for a saved character."""
    if not request.character_id:
        return request
    character_id = store.parse_character_id(request.character_id)
    if character_id is None:
        raise HTTPException(status_code=400, detail="Invalid character ID.")
    character = store.get_character(db, character_id)
    if not character:
        raise HTTPException(status_code=404, detail="Character not found.")
    stored = [image["data_uri"] for image in character.images]
    return request.model_copy(update={"character_images": stored + list(request.character_images)})


@router.post("/images", response_model=ImageResponse)
def generate_image(
    request: ImageRequest = Body(...),
    db: Session = Depends(get_db),
    provider: Provider = Depends(get_provider),
):
    """Text-to-image, enhancement or character scene, chosen by `mode`."""
    if isinstance(request, CharacterImageRequest):
        request = _resolve_character(request, db)
    return ImageResponse(image_url=images.handle_image_request(provider, request))


@router.post("/images/style", response_model=ImageResponse)
def style_transfer(data: StyleTransferRequest, provider: Provider = Depends(get_provider)):
    image_url = images.transfer_style(
        provider,
        data.base_image_prompt,
        MediaPart.from_data_uri(data.style_image),
        data.style_strength,
    )
    return ImageResponse(image_url=image_url)


@router.post("/prompts/improve", response_model=PromptImproveResponse)
def improve_prompt(data: PromptImproveRequest, provider: Provider = Depends(get_provider)):
    return PromptImproveResponse(improved_prompt=images.improve_prompt(provider, data.original_prompt))


@router.post("/videos", response_model=VideoResponse)
def generate_video(
    request: VideoRequest = Body(...),
    provider: Provider = Depends(get_provider),
    runner: FFmpegRunner = Depends(get_runner),
    settings: Settings = Depends(get_settings),
):
    """Still-image or provider-animated clip, optionally narrated."""
    ctx = video.VideoContext.from_settings(settings, provider, runner)
    result = video.generate_video(ctx, request)
    return VideoResponse(
        video_url=result.video.to_data_uri(),
        audio_url=result.audio.to_data_uri() if result.audio else None,
    )


@router.post("/chat", response_model=ChatOutput)
def chat(data: ChatRequest, provider: Provider = Depends(get_provider)):
    return run_chat_turn(provider, data.history, data.new_message)
