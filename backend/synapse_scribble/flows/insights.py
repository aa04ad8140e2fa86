"""
Insights flow: conversation context (+ generated image) → new perspectives.

Closes a cycle. The insights can seed the next cycle's transcript.
"""

import logging

from synapse_scribble.data_uri import decode_data_uri
from synapse_scribble.flows import messages
from synapse_scribble.flows.base import call_text_model
from synapse_scribble.flows.prompts import render_insights_prompt
from synapse_scribble.schemas.flows import (
    FailureKind,
    FlowResult,
    GenerateInsightsInput,
    GenerateInsightsOutput,
)
from synapse_scribble.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

Result = FlowResult[GenerateInsightsOutput]


def _usable_image(image_data_uri: str) -> bool:
    if not image_data_uri.startswith(messages.IMAGE_STATUS_SUCCESS_MARKER):
        return False
    try:
        return bool(decode_data_uri(image_data_uri).data)
    except ValueError:
        logger.warning("generate_insights: ignoring malformed image data URI")
        return False


async def generate_insights(payload: GenerateInsightsInput) -> Result:
    if not payload.conversation_context.strip():
        logger.warning("generate_insights: missing conversation context, skipping backend call")
        return Result(
            output=GenerateInsightsOutput(insights_text=messages.INSIGHTS_UNAVAILABLE),
            failure=FailureKind.INVALID_INPUT,
        )

    images = [payload.image_data_uri] if _usable_image(payload.image_data_uri) else []
    text = await call_text_model(
        gemini_service,
        "generate_insights",
        render_insights_prompt(payload.conversation_context, has_image=bool(images)),
        image_data_uris=images,
    )
    if text is None:
        return Result(
            output=GenerateInsightsOutput(insights_text=messages.INSIGHTS_FAILED),
            failure=FailureKind.BACKEND_ERROR,
        )
    if not text:
        return Result(
            output=GenerateInsightsOutput(insights_text=messages.INSIGHTS_FAILED),
            failure=FailureKind.INVALID_OUTPUT,
        )
    return Result(output=GenerateInsightsOutput(insights_text=text))
