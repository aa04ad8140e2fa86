"""Whiteboard-ideas flow: voice prompt + themes + current board → refined board."""

import logging

from synapse_scribble.flows import messages
from synapse_scribble.flows.base import call_text_model
from synapse_scribble.flows.prompts import render_whiteboard_prompt
from synapse_scribble.schemas.flows import (
    FailureKind,
    FlowResult,
    GenerateWhiteboardIdeasInput,
    GenerateWhiteboardIdeasOutput,
)
from synapse_scribble.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

Result = FlowResult[GenerateWhiteboardIdeasOutput]

# Earlier-step outputs starting with these are fallbacks, not content
_FALLBACK_PREFIXES = ("Fejl", "Kunne ikke", "Ingen specifikke temaer", "Ingen temaer")
_FALLBACK_VALUES = (messages.THEMES_UNAVAILABLE, messages.SUMMARY_UNAVAILABLE)


def is_usable_text(value: str) -> bool:
    """True when value is non-blank and not one of the flows' fallback texts."""
    stripped = value.strip()
    return bool(stripped) and not stripped.startswith(_FALLBACK_PREFIXES) and stripped not in _FALLBACK_VALUES


async def generate_whiteboard_ideas(payload: GenerateWhiteboardIdeasInput) -> Result:
    voice_prompt = payload.voice_prompt.strip()
    transcription = payload.transcription if is_usable_text(payload.transcription) else ""

    if not voice_prompt and not transcription:
        logger.warning("generate_whiteboard_ideas: no usable voice prompt or transcription")
        return Result(
            output=GenerateWhiteboardIdeasOutput(
                refined_whiteboard_content=messages.WHITEBOARD_INVALID_INPUT
            ),
            failure=FailureKind.INVALID_INPUT,
        )

    themes = payload.identified_themes
    if not is_usable_text(themes):
        logger.warning(
            "generate_whiteboard_ideas: unusable themes %r, continuing without them", themes
        )
        themes = ""

    text = await call_text_model(
        gemini_service,
        "generate_whiteboard_ideas",
        render_whiteboard_prompt(
            voice_prompt=voice_prompt,
            transcription=transcription,
            identified_themes=themes,
            current_whiteboard_content=payload.current_whiteboard_content,
        ),
    )
    if text is None:
        return Result(
            output=GenerateWhiteboardIdeasOutput(refined_whiteboard_content=messages.WHITEBOARD_FAILED),
            failure=FailureKind.BACKEND_ERROR,
        )
    if not text:
        logger.error("generate_whiteboard_ideas: model returned empty whiteboard content")
        return Result(
            output=GenerateWhiteboardIdeasOutput(
                refined_whiteboard_content=messages.WHITEBOARD_EMPTY_OUTPUT
            ),
            failure=FailureKind.INVALID_OUTPUT,
        )
    return Result(output=GenerateWhiteboardIdeasOutput(refined_whiteboard_content=text))
