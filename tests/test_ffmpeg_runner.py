"""
FFmpeg Runner Tests
Argument templates and failure handling, with subprocess.run patched out.
"""
import subprocess

import pytest

from omondi.core.errors import GenerationError
from omondi.runners import FFmpegRunner
from omondi.runners.ffmpeg_runner import SILENT_AUDIO

pytestmark = pytest.mark.unit


class RecordingRun:
    def __init__(self, returncode=0, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.commands = []

    def __call__(self, cmd, **kwargs):
        self.commands.append(cmd)
        self.kwargs = kwargs
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


@pytest.fixture
def fake_run(monkeypatch):
    run = RecordingRun()
    monkeypatch.setattr(subprocess, "run", run)
    return run


def test_still_without_audio_uses_silent_track(fake_run):
    runner = FFmpegRunner()
    runner.compose_still("in.png", "out.mp4", duration=5.0)

    cmd = fake_run.commands[0]
    assert cmd[:5] == ["ffmpeg", "-loop", "1", "-i", "in.png"]
    assert cmd[5:9] == ["-f", "lavfi", "-i", SILENT_AUDIO]
    assert cmd[cmd.index("-t") + 1] == "5.0"
    assert cmd[cmd.index("-c:v") + 1] == "libx264"
    assert cmd[cmd.index("-pix_fmt") + 1] == "yuv420p"
    assert cmd[cmd.index("-vf") + 1] == (
        "scale=1280:720:force_original_aspect_ratio=decrease,pad=1280:720:(ow-iw)/2:(oh-ih)/2,setsar=1"
    )
    assert cmd[-2:] == ["-y", "out.mp4"]
    assert fake_run.kwargs["timeout"] == runner.timeout


def test_still_with_audio(fake_run):
    FFmpegRunner(ffmpeg_path="/usr/bin/ffmpeg").compose_still(
        "in.png", "out.mp4", duration=12.5, audio_path="voice.wav"
    )

    cmd = fake_run.commands[0]
    assert cmd[0] == "/usr/bin/ffmpeg"
    assert cmd[5:11] == ["-i", "voice.wav", "-c:a", "aac", "-b:a", "192k"]
    assert "lavfi" not in cmd
    assert cmd[cmd.index("-t") + 1] == "12.5"


def test_mux_audio(fake_run):
    FFmpegRunner().mux_audio("clip.mp4", "voice.wav", "out.mp4")
    assert fake_run.commands[0] == [
        "ffmpeg", "-y", "-i", "clip.mp4", "-i", "voice.wav",
        "-c:v", "copy", "-c:a", "aac", "-b:a", "192k",
        "-map", "0:v:0", "-map", "1:a:0", "-shortest", "out.mp4",
    ]


def test_nonzero_exit_raises(monkeypatch):
    monkeypatch.setattr(subprocess, "run", RecordingRun(returncode=1, stderr="Invalid data found"))
    with pytest.raises(GenerationError, match="Invalid data found"):
        FFmpegRunner().compose_still("in.png", "out.mp4")


def test_timeout_raises(monkeypatch):
    def hang(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(subprocess, "run", hang)
    with pytest.raises(GenerationError, match="timed out"):
        FFmpegRunner(timeout=3).compose_still("in.png", "out.mp4")


def test_missing_binary_raises(monkeypatch):
    def missing(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(subprocess, "run", missing)
    with pytest.raises(GenerationError, match="not found"):
        FFmpegRunner(ffmpeg_path="no-such-ffmpeg").compose_still("in.png", "out.mp4")


def test_probe_duration(monkeypatch):
    run = RecordingRun(stdout="8.437000\n")
    monkeypatch.setattr(subprocess, "run", run)

    assert FFmpegRunner().probe_duration("voice.wav") == pytest.approx(8.437)
    cmd = run.commands[0]
    assert cmd[0] == "ffprobe"
    assert "format=duration" in cmd
    assert cmd[-1] == "voice.wav"


def test_probe_duration_without_output(monkeypatch):
    monkeypatch.setattr(subprocess, "run", RecordingRun(stdout="N/A\n"))
    with pytest.raises(GenerationError):
        FFmpegRunner().probe_duration("voice.wav")


def test_is_available(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
    assert FFmpegRunner().is_available() is True
    monkeypatch.setattr("shutil.which", lambda name: None)
    assert FFmpegRunner().is_available() is False
