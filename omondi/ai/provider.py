"""
Generative-AI provider.

The flows only depend on the small Provider contract:

    generate(prompt, modalities) -> GenerationResult(media?, text?)
    start_video(prompt, image?)  -> VideoOperation
    poll_video(operation)        -> VideoOperation(done, video | error)

GeminiProvider implements it on top of google-genai.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

from google import genai
from google.genai import types

from omondi.core.errors import ConfigurationError, GenerationError
from omondi.core.media import MediaPart

logger = logging.getLogger(__name__)

TEXT = "TEXT"
IMAGE = "IMAGE"
AUDIO = "AUDIO"

PromptItem = Union[str, MediaPart]
Prompt = Union[str, Sequence[PromptItem]]


@dataclass
class GenerationResult:
    media: Optional[MediaPart] = None
    text: Optional[str] = None


@dataclass
class VideoOperation:
    name: str
    done: bool = False
    video: Optional[MediaPart] = None
    error: Optional[str] = None
    handle: Any = None  # provider-native operation object


class Provider:
    """Black-box generative capability used by the flows."""

    def generate(
        self,
        prompt: Prompt,
        modalities: Sequence[str] = (TEXT,),
        *,
        system_instruction: Optional[str] = None,
        history: Optional[Sequence[Any]] = None,
        json_output: bool = False,
        safety_settings: Optional[Sequence[tuple]] = None,
    ) -> GenerationResult:
        raise NotImplementedError

    def start_video(self, prompt: str, image: Optional[MediaPart] = None) -> VideoOperation:
        raise NotImplementedError

    def poll_video(self, operation: VideoOperation) -> VideoOperation:
        raise NotImplementedError


class GeminiProvider(Provider):
    """
    Provider backed by the Gemini API.

    The model is picked from the requested modalities: IMAGE uses the image
    model, AUDIO the TTS model with a prebuilt voice, anything else the text
    model.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        image_model: str = "gemini-2.0-flash-preview-image-generation",
        text_model: str = "gemini-2.0-flash",
        tts_model: str = "gemini-2.5-flash-preview-tts",
        tts_voice: str = "Algenib",
        video_model: str = "veo-2.0-generate-001",
        client: Optional[genai.Client] = None,
    ):
        if client is None:
            if not api_key:
                raise ConfigurationError("GEMINI_API_KEY is not configured")
            client = genai.Client(api_key=api_key)
        self.client = client
        self.image_model = image_model
        self.text_model = text_model
        self.tts_model = tts_model
        self.tts_voice = tts_voice
        self.video_model = video_model

    @classmethod
    def from_settings(cls, settings) -> "GeminiProvider":
        return cls(
            api_key=settings.gemini_api_key,
            image_model=settings.image_model,
            text_model=settings.text_model,
            tts_model=settings.tts_model,
            tts_voice=settings.tts_voice,
            video_model=settings.video_model,
        )

    def _model_for(self, modalities: Sequence[str]) -> str:
        if IMAGE in modalities:
            return self.image_model
        if AUDIO in modalities:
            return self.tts_model
        return self.text_model

    @staticmethod
    def _parts(prompt: Prompt) -> List[types.Part]:
        if isinstance(prompt, str):
            return [types.Part.from_text(text=prompt)]
        parts = []
        for item in prompt:
            if isinstance(item, MediaPart):
                parts.append(types.Part.from_bytes(data=item.data, mime_type=item.mime_type))
            else:
                parts.append(types.Part.from_text(text=item))
        return parts

    def _config(
        self,
        modalities: Sequence[str],
        system_instruction: Optional[str],
        json_output: bool,
        safety_settings: Optional[Sequence[tuple]],
    ) -> types.GenerateContentConfig:
        kwargs = {"response_modalities": list(modalities)}
        if system_instruction:
            kwargs["system_instruction"] = system_instruction
        if json_output:
            kwargs["response_mime_type"] = "application/json"
        if safety_settings:
            kwargs["safety_settings"] = [
                types.SafetySetting(category=category, threshold=threshold)
                for category, threshold in safety_settings
            ]
        if AUDIO in modalities:
            kwargs["speech_config"] = types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=self.tts_voice)
                )
            )
        return types.GenerateContentConfig(**kwargs)

    def generate(
        self,
        prompt: Prompt,
        modalities: Sequence[str] = (TEXT,),
        *,
        system_instruction: Optional[str] = None,
        history: Optional[Sequence[Any]] = None,
        json_output: bool = False,
        safety_settings: Optional[Sequence[tuple]] = None,
    ) -> GenerationResult:
        model = self._model_for(modalities)
        contents = [
            types.Content(role=message.role, parts=[types.Part.from_text(text=message.content)])
            for message in history or []
        ]
        contents.append(types.Content(role="user", parts=self._parts(prompt)))

        logger.info(f"Calling {model} (modalities={list(modalities)}, parts={len(contents[-1].parts)})")
        try:
            response = self.client.models.generate_content(
                model=model,
                contents=contents,
                config=self._config(modalities, system_instruction, json_output, safety_settings),
            )
        except Exception as e:
            logger.error(f"Provider call to {model} failed: {e}", exc_info=True)
            raise GenerationError(f"Provider call failed: {e}") from e

        return self._result(response)

    @staticmethod
    def _result(response) -> GenerationResult:
        media = None
        texts = []
        candidates = getattr(response, "candidates", None) or []
        if candidates and candidates[0].content:
            for part in candidates[0].content.parts or []:
                if part.inline_data and part.inline_data.data:
                    if media is None:
                        media = MediaPart(
                            mime_type=part.inline_data.mime_type or "application/octet-stream",
                            data=part.inline_data.data,
                        )
                elif part.text:
                    texts.append(part.text)
        return GenerationResult(media=media, text="".join(texts) or None)

    def start_video(self, prompt: str, image: Optional[MediaPart] = None) -> VideoOperation:
        logger.info(f"Starting video operation on {self.video_model}")
        try:
            operation = self.client.models.generate_videos(
                model=self.video_model,
                prompt=prompt,
                image=types.Image(image_bytes=image.data, mime_type=image.mime_type) if image else None,
                config=types.GenerateVideosConfig(aspect_ratio="16:9", number_of_videos=1),
            )
        except Exception as e:
            logger.error(f"Could not start video operation: {e}", exc_info=True)
            raise GenerationError(f"Video generation could not start: {e}") from e
        return self._wrap(operation)

    def poll_video(self, operation: VideoOperation) -> VideoOperation:
        try:
            refreshed = self.client.operations.get(operation.handle)
        except Exception as e:
            logger.error(f"Polling {operation.name} failed: {e}", exc_info=True)
            raise GenerationError(f"Video operation poll failed: {e}") from e
        return self._wrap(refreshed)

    def _wrap(self, operation) -> VideoOperation:
        name = getattr(operation, "name", None) or "video-operation"
        if not operation.done:
            return VideoOperation(name=name, done=False, handle=operation)

        if operation.error:
            message = operation.error.get("message", str(operation.error))
            return VideoOperation(name=name, done=True, error=message, handle=operation)

        generated = getattr(operation.response, "generated_videos", None) or []
        if not generated or not generated[0].video:
            return VideoOperation(name=name, done=True, error="No video was returned.", handle=operation)

        video = generated[0].video
        data = video.video_bytes or self.client.files.download(file=video)
        return VideoOperation(
            name=name,
            done=True,
            video=MediaPart(mime_type=video.mime_type or "video/mp4", data=data),
            handle=operation,
        )
