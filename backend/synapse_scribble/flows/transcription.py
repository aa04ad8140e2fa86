"""
Transcription flow (simulated).

Real speech-to-text is out of scope: the flow validates the recording and
answers with a templated Danish stub describing what it received. No
backend call is made.
"""

import logging

from synapse_scribble.config import settings
from synapse_scribble.data_uri import decode_data_uri
from synapse_scribble.flows import messages
from synapse_scribble.schemas.flows import (
    FailureKind,
    FlowResult,
    TranscribeAudioInput,
    TranscribeAudioOutput,
)

logger = logging.getLogger(__name__)

Result = FlowResult[TranscribeAudioOutput]


def _invalid(reason: str) -> Result:
    logger.warning("transcribe_audio: %s", reason)
    return Result(
        output=TranscribeAudioOutput(transcription=messages.TRANSCRIPTION_INVALID_AUDIO),
        failure=FailureKind.INVALID_INPUT,
    )


async def transcribe_audio(payload: TranscribeAudioInput) -> Result:
    """Turn an audio data URI into a placeholder transcript."""
    try:
        decoded = decode_data_uri(payload.audio_data_uri)
    except ValueError as e:
        return _invalid(f"recording is not a base64 data URI ({e})")

    if not decoded.mime_type.startswith("audio/"):
        return _invalid(f"unsupported MIME type {decoded.mime_type}")
    if not decoded.data:
        return _invalid("recording is empty")
    if len(decoded.data) > settings.max_audio_size:
        return _invalid(
            f"recording of {len(decoded.data)} bytes exceeds {settings.max_audio_size} bytes"
        )

    transcription = messages.TRANSCRIPTION_STUB.format(
        mime_type=decoded.mime_type,
        size_kb=len(decoded.data) / 1024,
    )
    logger.info(
        "transcribe_audio: simulated transcript for %s recording (%d bytes)",
        decoded.mime_type,
        len(decoded.data),
    )
    return Result(output=TranscribeAudioOutput(transcription=transcription))
