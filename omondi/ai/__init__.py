# Provider glue and generation flows

from omondi.ai.chat import chart_frame, chat
from omondi.ai.images import (
    enhance_images,
    generate_image_from_description,
    generate_image_with_character,
    handle_image_request,
    improve_prompt,
    transfer_style,
)
from omondi.ai.provider import GeminiProvider, GenerationResult, Provider, VideoOperation
from omondi.ai.video import VideoContext, VideoResult, generate_video, synthesize_narration

__all__ = [
    "chart_frame",
    "chat",
    "enhance_images",
    "generate_image_from_description",
    "generate_image_with_character",
    "handle_image_request",
    "improve_prompt",
    "transfer_style",
    "GeminiProvider",
    "GenerationResult",
    "Provider",
    "VideoOperation",
    "VideoContext",
    "VideoResult",
    "generate_video",
    "synthesize_narration",
]
