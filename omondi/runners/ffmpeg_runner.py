"""
FFmpeg Runner - Wrapper for the ffmpeg/ffprobe binaries.

Every call is a single blocking subprocess with a fixed argument template.
"""

import logging
import shutil
import subprocess
from typing import List, Optional

from omondi.core.errors import GenerationError

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 5.0
SILENT_AUDIO = "anullsrc=r=44100:cl=mono"


class FFmpegRunner:
    """
    Wrapper for ffmpeg still-image video assembly and audio muxing.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        width: int = 1280,
        height: int = 720,
        timeout: int = 300,
    ):
        """
        Initialize ffmpeg runner.

        Args:
            ffmpeg_path: ffmpeg executable (name on PATH or absolute path)
            ffprobe_path: ffprobe executable
            width: Output width (default 1280)
            height: Output height (default 720)
            timeout: Per-process timeout in seconds (default 5 minutes)
        """
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.width = width
        self.height = height
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "FFmpegRunner":
        return cls(ffmpeg_path=settings.ffmpeg_path, ffprobe_path=settings.ffprobe_path)

    def is_available(self) -> bool:
        return bool(shutil.which(self.ffmpeg_path) and shutil.which(self.ffprobe_path))

    @property
    def video_filter(self) -> str:
        w, h = self.width, self.height
        return (
            f"scale={w}:{h}:force_original_aspect_ratio=decrease,"
            f"pad={w}:{h}:(ow-iw)/2:(oh-ih)/2,setsar=1"
        )

    def _run(self, cmd: List[str], label: str) -> subprocess.CompletedProcess:
        logger.info(f"Running {label}: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise GenerationError(f"{label} timed out after {self.timeout} seconds")
        except FileNotFoundError as e:
            raise GenerationError(f"{label} executable not found: {cmd[0]}") from e

        if result.returncode != 0:
            logger.error(f"{label} stderr: {result.stderr}")
            raise GenerationError(f"{label} failed with code {result.returncode}: {result.stderr}")
        return result

    def probe_duration(self, media_path: str) -> float:
        """Duration of a media file in seconds."""
        cmd = [
            self.ffprobe_path,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            media_path,
        ]
        result = self._run(cmd, "ffprobe")
        try:
            return float(result.stdout.strip())
        except ValueError:
            raise GenerationError(f"ffprobe returned no duration for {media_path}")

    def compose_still(
        self,
        image_path: str,
        output_path: str,
        duration: float = DEFAULT_DURATION,
        audio_path: Optional[str] = None,
    ) -> str:
        """
        Loop a still image into an H.264 MP4.

        Args:
            image_path: Input still image
            output_path: Path for output video
            duration: Clip length in seconds
            audio_path: Optional audio track; a silent track is used otherwise

        Returns:
            Path to generated video
        """
        cmd = [self.ffmpeg_path, "-loop", "1", "-i", image_path]

        if audio_path:
            cmd.extend(["-i", audio_path, "-c:a", "aac", "-b:a", "192k"])
        else:
            cmd.extend(["-f", "lavfi", "-i", SILENT_AUDIO])

        cmd.extend(
            [
                "-t",
                f"{duration}",
                "-c:v",
                "libx264",
                "-pix_fmt",
                "yuv420p",
                "-vf",
                self.video_filter,
                "-y",
                output_path,
            ]
        )

        self._run(cmd, "ffmpeg")
        return output_path

    def mux_audio(self, video_path: str, audio_path: str, output_path: str) -> str:
        """Replace the audio track of a video, re-encoding audio only."""
        cmd = [
            self.ffmpeg_path,
            "-y",
            "-i",
            video_path,
            "-i",
            audio_path,
            "-c:v",
            "copy",
            "-c:a",
            "aac",
            "-b:a",
            "192k",
            "-map",
            "0:v:0",
            "-map",
            "1:a:0",
            "-shortest",
            output_path,
        ]
        self._run(cmd, "ffmpeg")
        return output_path
