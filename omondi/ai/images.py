"""
Image flows: text-to-image, multi-image enhancement, character scenes,
style transfer and prompt improvement.

Each image flow makes exactly one provider call and returns one data URI.
"""

import logging
from typing import List, Optional, Sequence

from omondi.ai import prompts
from omondi.ai.provider import IMAGE, TEXT, Provider
from omondi.core.errors import GenerationError
from omondi.core.media import MediaPart
from omondi.schemas import CharacterImageRequest, DescriptionImageRequest, EnhanceImageRequest

logger = logging.getLogger(__name__)

IMAGE_MODALITIES = (TEXT, IMAGE)


def _generate_image(provider: Provider, prompt, flow: str) -> str:
    result = provider.generate(prompt, IMAGE_MODALITIES)
    if result.media is None:
        logger.error(f"[{flow}] Provider returned no image")
        raise GenerationError("No image was generated.")
    logger.info(f"[{flow}] Generated {result.media.mime_type} ({result.media.size} bytes)")
    return result.media.to_data_uri()


def generate_image_from_description(provider: Provider, description: str) -> str:
    return _generate_image(provider, description, "description")


def enhance_images(
    provider: Provider, images: Sequence[MediaPart], prompt: Optional[str] = None
) -> str:
    """Send every image, then the instruction, in a single call."""
    if not images:
        raise ValueError("At least one image is required.")
    parts: List = list(images)
    parts.append(prompt or prompts.DEFAULT_ENHANCE_PROMPT)
    return _generate_image(provider, parts, "enhance")


def generate_image_with_character(
    provider: Provider, prompt: str, character_images: Sequence[MediaPart]
) -> str:
    """Identity-lock text, all reference images, then the scene description."""
    if not character_images:
        raise ValueError("At least one character image is required.")
    parts: List = [prompts.CHARACTER_IDENTITY_LOCK]
    parts.extend(character_images)
    parts.append(prompts.CHARACTER_SCENE.format(prompt=prompt))
    return _generate_image(provider, parts, "character")


def transfer_style(
    provider: Provider, base_prompt: str, style_image: MediaPart, strength: float = 0.5
) -> str:
    if not 0.0 <= strength <= 1.0:
        raise ValueError("Style strength must be between 0 and 1.")
    parts = [style_image, prompts.STYLE_TRANSFER.format(prompt=base_prompt, strength=strength)]
    return _generate_image(provider, parts, "style")


def improve_prompt(provider: Provider, original_prompt: str) -> str:
    result = provider.generate(prompts.IMPROVE_PROMPT.format(prompt=original_prompt), (TEXT,))
    improved = (result.text or "").strip()
    if not improved:
        raise GenerationError("No improved prompt was returned.")
    return improved


# One handler per request variant

def _handle_description(provider: Provider, request: DescriptionImageRequest) -> str:
    return generate_image_from_description(provider, request.description)


def _handle_enhance(provider: Provider, request: EnhanceImageRequest) -> str:
    images = [MediaPart.from_data_uri(uri) for uri in request.images]
    return enhance_images(provider, images, request.prompt)


def _handle_character(provider: Provider, request: CharacterImageRequest) -> str:
    images = [MediaPart.from_data_uri(uri) for uri in request.character_images]
    return generate_image_with_character(provider, request.prompt, images)


IMAGE_HANDLERS = {
    DescriptionImageRequest: _handle_description,
    EnhanceImageRequest: _handle_enhance,
    CharacterImageRequest: _handle_character,
}


def handle_image_request(provider: Provider, request) -> str:
    """Dispatch a parsed image request to its handler and return a data URI."""
    handler = IMAGE_HANDLERS.get(type(request))
    if handler is None:
        raise TypeError(f"Unsupported image request: {type(request).__name__}")
    return handler(provider, request)
