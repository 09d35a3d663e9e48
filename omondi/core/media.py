"""
Media payloads exchanged with the provider and the API.

All media travels as self-describing data URIs:
    data:<mime type>;base64,<payload>
"""

import base64
import binascii
import io
import mimetypes
import wave
from dataclasses import dataclass

from omondi.core.errors import InvalidMediaError

# Gemini TTS returns raw 16-bit mono PCM at 24kHz
PCM_SAMPLE_RATE = 24000
PCM_CHANNELS = 1
PCM_SAMPLE_WIDTH = 2


@dataclass(frozen=True)
class MediaPart:
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        """File extension for temp files, e.g. '.png'."""
        ext = mimetypes.guess_extension(self.mime_type.split(";")[0].strip())
        if ext:
            return ext
        subtype = self.mime_type.split("/")[-1].split(";")[0].strip()
        return f".{subtype}" if subtype else ".bin"

    def to_data_uri(self) -> str:
        payload = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"

    @classmethod
    def from_data_uri(cls, uri: str) -> "MediaPart":
        mime_type, data = decode_data_uri(uri)
        return cls(mime_type=mime_type, data=data)


def decode_data_uri(uri: str):
    """Split a base64 data URI into (mime_type, bytes)."""
    if not isinstance(uri, str) or not uri.startswith("data:"):
        raise InvalidMediaError("Expected a data URI of the form 'data:<mimetype>;base64,<data>'")

    header, sep, payload = uri.partition(",")
    if not sep:
        raise InvalidMediaError("Data URI has no payload")

    meta = header[len("data:"):]
    if not meta.endswith(";base64"):
        raise InvalidMediaError("Data URI must use base64 encoding")

    mime_type = meta[: -len(";base64")]
    if "/" not in mime_type:
        raise InvalidMediaError(f"Data URI has an invalid MIME type: {mime_type!r}")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidMediaError(f"Data URI payload is not valid base64: {e}") from e
    if not data:
        raise InvalidMediaError("Data URI payload is empty")

    return mime_type, data


def pcm_to_wav(
    pcm: bytes,
    channels: int = PCM_CHANNELS,
    rate: int = PCM_SAMPLE_RATE,
    sample_width: int = PCM_SAMPLE_WIDTH,
) -> bytes:
    """Wrap raw PCM frames in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(rate)
        wf.writeframes(pcm)
    return buffer.getvalue()
