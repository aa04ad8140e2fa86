"""Theme identification flow: any text → comma-separated theme phrases."""

import logging

from synapse_scribble.flows import messages
from synapse_scribble.flows.base import call_text_model
from synapse_scribble.flows.prompts import render_themes_prompt
from synapse_scribble.schemas.flows import (
    FailureKind,
    FlowResult,
    IdentifyThemesInput,
    IdentifyThemesOutput,
)
from synapse_scribble.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

Result = FlowResult[IdentifyThemesOutput]


def normalize_themes(raw: str, limit: int = messages.MAX_THEMES) -> str:
    """
    Clean a model answer into "a, b, c".

    Accepts commas or newlines as separators, drops list bullets and
    surrounding quotes, removes case-insensitive duplicates and keeps at
    most `limit` phrases.
    """
    phrases = []
    seen = set()
    for chunk in raw.replace("\n", ",").split(","):
        phrase = chunk.strip().lstrip("-*•").strip().strip("\"'").rstrip(".").strip()
        key = phrase.casefold()
        if not phrase or key in seen:
            continue
        seen.add(key)
        phrases.append(phrase)
        if len(phrases) == limit:
            break
    return ", ".join(phrases)


async def identify_themes(payload: IdentifyThemesInput) -> Result:
    if not payload.text_to_analyze.strip():
        logger.warning("identify_themes: no text to analyze, skipping backend call")
        return Result(
            output=IdentifyThemesOutput(identified_themes_text=messages.THEMES_EMPTY_TEXT),
            failure=FailureKind.INVALID_INPUT,
        )

    text = await call_text_model(
        gemini_service,
        "identify_themes",
        render_themes_prompt(payload.text_to_analyze),
    )
    if text is None:
        return Result(
            output=IdentifyThemesOutput(identified_themes_text=messages.THEMES_UNAVAILABLE),
            failure=FailureKind.BACKEND_ERROR,
        )

    themes = normalize_themes(text)
    if not themes:
        logger.error("identify_themes: model answer contained no themes: %r", text)
        return Result(
            output=IdentifyThemesOutput(identified_themes_text=messages.THEMES_UNAVAILABLE),
            failure=FailureKind.INVALID_OUTPUT,
        )
    return Result(output=IdentifyThemesOutput(identified_themes_text=themes))
