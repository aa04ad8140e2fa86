"""Summarization flow: transcript → key points and action items."""

import logging

from synapse_scribble.flows import messages
from synapse_scribble.flows.base import call_text_model
from synapse_scribble.flows.prompts import render_summarize_prompt
from synapse_scribble.schemas.flows import (
    FailureKind,
    FlowResult,
    SummarizeTranscriptionInput,
    SummarizeTranscriptionOutput,
)
from synapse_scribble.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

Result = FlowResult[SummarizeTranscriptionOutput]


async def summarize_transcription(payload: SummarizeTranscriptionInput) -> Result:
    """
    Summarize a conversation transcript.

    Returns:
        The model summary, or SUMMARY_UNAVAILABLE for a blank transcript
        (backend not called), or SUMMARY_FAILED when the call fails or the
        model answers with nothing.
    """
    if not payload.transcription.strip():
        logger.warning("summarize_transcription: empty transcription, skipping backend call")
        return Result(
            output=SummarizeTranscriptionOutput(summary=messages.SUMMARY_UNAVAILABLE),
            failure=FailureKind.INVALID_INPUT,
        )

    text = await call_text_model(
        gemini_service,
        "summarize_transcription",
        render_summarize_prompt(payload.transcription),
    )
    if text is None:
        return Result(
            output=SummarizeTranscriptionOutput(summary=messages.SUMMARY_FAILED),
            failure=FailureKind.BACKEND_ERROR,
        )
    if not text:
        logger.error("summarize_transcription: model returned an empty summary")
        return Result(
            output=SummarizeTranscriptionOutput(summary=messages.SUMMARY_FAILED),
            failure=FailureKind.INVALID_OUTPUT,
        )
    return Result(output=SummarizeTranscriptionOutput(summary=text))
