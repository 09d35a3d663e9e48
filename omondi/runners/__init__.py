# External media tools

from omondi.runners.ffmpeg_runner import FFmpegRunner

__all__ = ["FFmpegRunner"]
