"""
Gemini Provider Tests
Request building and response parsing against a stub google-genai client.
"""
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from omondi.ai.provider import AUDIO, IMAGE, TEXT, GeminiProvider, VideoOperation
from omondi.core.errors import ConfigurationError, GenerationError
from omondi.core.media import MediaPart

pytestmark = pytest.mark.unit


def _part(text=None, data=None, mime_type=None):
    inline = SimpleNamespace(data=data, mime_type=mime_type) if data is not None else None
    return SimpleNamespace(text=text, inline_data=inline)


def _response(*parts):
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=list(parts)))])


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def provider(client):
    return GeminiProvider(
        client=client,
        image_model="image-model",
        text_model="text-model",
        tts_model="tts-model",
        tts_voice="Algenib",
        video_model="video-model",
    )


def test_requires_api_key():
    with pytest.raises(ConfigurationError):
        GeminiProvider(api_key=None)


@pytest.mark.parametrize(
    "modalities, model",
    [((TEXT, IMAGE), "image-model"), ((AUDIO,), "tts-model"), ((TEXT,), "text-model")],
)
def test_model_follows_modalities(provider, client, modalities, model):
    client.models.generate_content.return_value = _response(_part(text="ok"))
    provider.generate("hello", modalities)
    assert client.models.generate_content.call_args.kwargs["model"] == model


def test_media_parts_are_sent_in_order(provider, client):
    client.models.generate_content.return_value = _response(_part(text="ok"))
    provider.generate([MediaPart("image/png", b"one"), "then text"], (TEXT, IMAGE))

    contents = client.models.generate_content.call_args.kwargs["contents"]
    parts = contents[-1].parts
    assert parts[0].inline_data.data == b"one"
    assert parts[0].inline_data.mime_type == "image/png"
    assert parts[1].text == "then text"


def test_history_becomes_prior_contents(provider, client):
    client.models.generate_content.return_value = _response(_part(text="ok"))
    history = [SimpleNamespace(role="user", content="Hi"), SimpleNamespace(role="model", content="Hello")]
    provider.generate("Next", (TEXT,), history=history, system_instruction="Be brief", json_output=True)

    kwargs = client.models.generate_content.call_args.kwargs
    assert [c.role for c in kwargs["contents"]] == ["user", "model", "user"]
    assert kwargs["config"].system_instruction == "Be brief"
    assert kwargs["config"].response_mime_type == "application/json"


def test_speech_config_uses_voice(provider, client):
    client.models.generate_content.return_value = _response(_part(data=b"pcm", mime_type="audio/L16"))
    result = provider.generate("Say hi", (AUDIO,))

    config = client.models.generate_content.call_args.kwargs["config"]
    assert config.speech_config.voice_config.prebuilt_voice_config.voice_name == "Algenib"
    assert result.media == MediaPart("audio/L16", b"pcm")


def test_first_inline_media_wins_and_text_is_joined(provider, client):
    client.models.generate_content.return_value = _response(
        _part(text="Here "),
        _part(data=b"first", mime_type="image/png"),
        _part(data=b"second", mime_type="image/png"),
        _part(text="it is"),
    )
    result = provider.generate("draw", (TEXT, IMAGE))
    assert result.media.data == b"first"
    assert result.text == "Here it is"


def test_empty_response(provider, client):
    client.models.generate_content.return_value = SimpleNamespace(candidates=[])
    result = provider.generate("draw", (TEXT, IMAGE))
    assert result.media is None
    assert result.text is None


def test_client_errors_become_generation_errors(provider, client):
    client.models.generate_content.side_effect = RuntimeError("503 UNAVAILABLE")
    with pytest.raises(GenerationError):
        provider.generate("draw", (TEXT, IMAGE))


def test_video_operation_lifecycle(provider, client):
    pending = SimpleNamespace(name="operations/abc", done=False, error=None, response=None)
    video = SimpleNamespace(video_bytes=None, mime_type="video/mp4")
    finished = SimpleNamespace(
        name="operations/abc",
        done=True,
        error=None,
        response=SimpleNamespace(generated_videos=[SimpleNamespace(video=video)]),
    )
    client.models.generate_videos.return_value = pending
    client.operations.get.return_value = finished
    client.files.download.return_value = b"mp4-bytes"

    started = provider.start_video("waves", MediaPart("image/png", b"frame"))
    assert started == VideoOperation(name="operations/abc", done=False, handle=pending)
    assert client.models.generate_videos.call_args.kwargs["model"] == "video-model"

    polled = provider.poll_video(started)
    client.operations.get.assert_called_once_with(pending)
    assert polled.done is True
    assert polled.video == MediaPart("video/mp4", b"mp4-bytes")


def test_video_operation_error(provider, client):
    client.models.generate_videos.return_value = SimpleNamespace(
        name="operations/abc", done=True, error={"message": "blocked"}, response=None
    )
    operation = provider.start_video("waves")
    assert operation.error == "blocked"
    assert operation.video is None
