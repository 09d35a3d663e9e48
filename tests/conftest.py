"""
Omondi AI Test Fixtures
Shared fixtures for all test modules.
"""
import os
import sys
from pathlib import Path

# The app module builds a default app at import time; keep it off PostgreSQL
os.environ.setdefault("DATABASE_URL", "sqlite://")

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from omondi.ai.provider import AUDIO, IMAGE, GenerationResult, Provider, VideoOperation  # noqa: E402
from omondi.core.config import Settings  # noqa: E402
from omondi.core.media import MediaPart  # noqa: E402
from omondi.db import Database  # noqa: E402
from omondi.main import create_app  # noqa: E402
from omondi.runners import FFmpegRunner  # noqa: E402

TEST_USERNAME = "omondi"
TEST_PASSWORD = "studio-pass-123"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
PCM_BYTES = b"\x00\x01" * 2400


def png_data_uri(payload: bytes = PNG_BYTES) -> str:
    return MediaPart(mime_type="image/png", data=payload).to_data_uri()


class FakeProvider(Provider):
    """Records every call and answers from canned results."""

    def __init__(self, image=None, text="ok", audio=None, video_polls=None):
        self.calls = []
        self.image = image if image is not None else MediaPart("image/png", b"generated-image")
        self.text = text
        self.audio = audio if audio is not None else MediaPart("audio/L16;codec=pcm;rate=24000", PCM_BYTES)
        self.video_polls = list(video_polls or [])
        self.started = []
        self.polls = 0

    def generate(self, prompt, modalities=("TEXT",), **options):
        self.calls.append({"prompt": prompt, "modalities": tuple(modalities), **options})
        if IMAGE in modalities:
            return GenerationResult(media=self.image or None, text="Here is your image.")
        if AUDIO in modalities:
            return GenerationResult(media=self.audio or None)
        return GenerationResult(text=self.text)

    def start_video(self, prompt, image=None):
        self.started.append({"prompt": prompt, "image": image})
        return VideoOperation(name="operations/video-1", done=False)

    def poll_video(self, operation):
        self.polls += 1
        return self.video_polls.pop(0)


class FakeRunner(FFmpegRunner):
    """FFmpegRunner that writes placeholder files instead of spawning ffmpeg."""

    def __init__(self, duration=2.5, fail=False):
        super().__init__()
        self.duration = duration
        self.fail = fail
        self.composed = []
        self.muxed = []
        self.probed = []

    def is_available(self):
        return True

    def probe_duration(self, media_path):
        self.probed.append(media_path)
        return self.duration

    def compose_still(self, image_path, output_path, duration=5.0, audio_path=None):
        self.composed.append(
            {"image_path": image_path, "duration": duration, "audio_path": audio_path, "output_path": output_path}
        )
        if self.fail:
            from omondi.core.errors import GenerationError

            raise GenerationError("ffmpeg failed with code 1")
        with open(output_path, "wb") as f:
            f.write(b"still-mp4")
        return output_path

    def mux_audio(self, video_path, audio_path, output_path):
        self.muxed.append({"video_path": video_path, "audio_path": audio_path})
        with open(output_path, "wb") as f:
            f.write(b"muxed-mp4")
        return output_path


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        jwt_secret="test-secret-that-is-at-least-32-bytes-long",
        gemini_api_key="test-key",
        cookie_secure=False,
        shared_data_path=str(tmp_path / "shared_data"),
        video_poll_interval=0.0,
        video_poll_timeout=5.0,
    )


@pytest.fixture
def database():
    db = Database(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def app(settings, database, provider, runner):
    return create_app(settings=settings, database=database, provider=provider, runner=runner)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_client(client):
    """Client with an account created and a live session cookie."""
    response = client.post(
        "/api/auth/signup", json={"username": TEST_USERNAME, "password": TEST_PASSWORD}
    )
    assert response.status_code == 201
    response = client.post(
        "/api/auth/login", json={"username": TEST_USERNAME, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    return client
