"""
Video flows.

Two request variants:
    still   - loop an uploaded image into an MP4 with ffmpeg, optionally
              narrated with synthesized speech
    animate - ask the provider's video model for a clip via its long-running
              operation, optionally muxing narration onto it

Steps run sequentially inside one request. All temp files live in a single
TemporaryDirectory that is removed on every exit path.
"""

import logging
import os
import tempfile
import time
from dataclasses import dataclass
from typing import Callable, Optional

from omondi.ai.provider import AUDIO, Provider, VideoOperation
from omondi.core.errors import GenerationError
from omondi.core.media import MediaPart, pcm_to_wav
from omondi.runners.ffmpeg_runner import DEFAULT_DURATION, FFmpegRunner
from omondi.schemas import AnimatedVideoRequest, StillVideoRequest

logger = logging.getLogger(__name__)


@dataclass
class VideoResult:
    video: MediaPart
    audio: Optional[MediaPart] = None


@dataclass
class VideoContext:
    """Collaborators and limits for one video request."""
    provider: Provider
    runner: FFmpegRunner
    temp_root: Optional[str] = None
    poll_interval: float = 10.0
    poll_timeout: float = 600.0
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.monotonic

    @classmethod
    def from_settings(cls, settings, provider: Provider, runner: FFmpegRunner) -> "VideoContext":
        return cls(
            provider=provider,
            runner=runner,
            temp_root=settings.temp_dir,
            poll_interval=settings.video_poll_interval,
            poll_timeout=settings.video_poll_timeout,
        )

    def workdir(self) -> tempfile.TemporaryDirectory:
        if self.temp_root:
            os.makedirs(self.temp_root, exist_ok=True)
        return tempfile.TemporaryDirectory(prefix="omondi-video-", dir=self.temp_root)


def synthesize_narration(provider: Provider, text: str) -> MediaPart:
    """Text to speech, returned as a WAV payload."""
    result = provider.generate(text, (AUDIO,))
    if result.media is None:
        raise GenerationError("No narration audio was generated.")
    if result.media.mime_type.startswith("audio/wav"):
        return result.media
    # Raw PCM (audio/L16) needs a WAV header before ffmpeg or a browser can use it
    return MediaPart(mime_type="audio/wav", data=pcm_to_wav(result.media.data))


def _write(workdir: str, name: str, media: MediaPart) -> str:
    path = os.path.join(workdir, f"{name}{media.extension}")
    with open(path, "wb") as f:
        f.write(media.data)
    return path


def _read_video(path: str) -> MediaPart:
    with open(path, "rb") as f:
        return MediaPart(mime_type="video/mp4", data=f.read())


def wait_for_video(ctx: VideoContext, operation: VideoOperation) -> MediaPart:
    """Poll a video operation until it finishes, fails or times out."""
    deadline = ctx.clock() + ctx.poll_timeout
    while not operation.done:
        if ctx.clock() >= deadline:
            raise GenerationError(
                f"Video operation {operation.name} did not finish within {ctx.poll_timeout} seconds"
            )
        ctx.sleep(ctx.poll_interval)
        operation = ctx.provider.poll_video(operation)
        logger.info(f"Video operation {operation.name}: done={operation.done}")

    if operation.error:
        raise GenerationError(f"Video operation failed: {operation.error}")
    if operation.video is None:
        raise GenerationError("Video operation finished without a video.")
    return operation.video


def _narration_text(request) -> Optional[str]:
    text = (request.narration or "").strip()
    return text or None


def _generate_still(ctx: VideoContext, request: StillVideoRequest) -> VideoResult:
    image = MediaPart.from_data_uri(request.image)
    narration = _narration_text(request)

    with ctx.workdir() as workdir:
        audio = None
        audio_path = None
        duration = DEFAULT_DURATION

        if narration:
            audio = synthesize_narration(ctx.provider, narration)
            audio_path = _write(workdir, "narration", audio)
            duration = ctx.runner.probe_duration(audio_path)

        image_path = _write(workdir, "input", image)
        output_path = os.path.join(workdir, "output.mp4")
        ctx.runner.compose_still(image_path, output_path, duration=duration, audio_path=audio_path)
        video = _read_video(output_path)

    logger.info(f"Composed {duration:.2f}s still video ({video.size} bytes, narrated={audio is not None})")
    return VideoResult(video=video, audio=audio)


def _generate_animated(ctx: VideoContext, request: AnimatedVideoRequest) -> VideoResult:
    image = MediaPart.from_data_uri(request.image) if request.image else None
    narration = _narration_text(request)

    audio = synthesize_narration(ctx.provider, narration) if narration else None

    operation = ctx.provider.start_video(request.prompt, image)
    clip = wait_for_video(ctx, operation)

    if audio is None:
        return VideoResult(video=clip)

    with ctx.workdir() as workdir:
        clip_path = _write(workdir, "clip", clip)
        audio_path = _write(workdir, "narration", audio)
        output_path = os.path.join(workdir, "output.mp4")
        ctx.runner.mux_audio(clip_path, audio_path, output_path)
        video = _read_video(output_path)

    return VideoResult(video=video, audio=audio)


VIDEO_HANDLERS = {
    StillVideoRequest: _generate_still,
    AnimatedVideoRequest: _generate_animated,
}


def generate_video(ctx: VideoContext, request) -> VideoResult:
    """Dispatch a parsed video request to its handler."""
    handler = VIDEO_HANDLERS.get(type(request))
    if handler is None:
        raise TypeError(f"Unsupported video request: {type(request).__name__}")
    return handler(ctx, request)
