"""
Synapse Scribble Backend - Stateless Flow Routes
================================================

What:  One POST endpoint per flow under /api/flows.
How:   The body is the flow input, the response is the flow's FlowResult.
       Fallbacks come back as 200 with `ok: false`; only image generation
       can fail with an error status (502).
Who:   Called by the frontend for single flow calls, and by scripts.
"""

import logging

from fastapi import APIRouter

from synapse_scribble.flows.image import generate_image
from synapse_scribble.flows.insights import generate_insights
from synapse_scribble.flows.report import generate_session_report
from synapse_scribble.flows.summarize import summarize_transcription
from synapse_scribble.flows.themes import identify_themes
from synapse_scribble.flows.transcription import transcribe_audio
from synapse_scribble.flows.whiteboard import generate_whiteboard_ideas
from synapse_scribble.schemas.flows import (
    FlowResult,
    GenerateImageInput,
    GenerateImageOutput,
    GenerateInsightsInput,
    GenerateInsightsOutput,
    GenerateWhiteboardIdeasInput,
    GenerateWhiteboardIdeasOutput,
    IdentifyThemesInput,
    IdentifyThemesOutput,
    SessionReportInput,
    SessionReportOutput,
    SummarizeTranscriptionInput,
    SummarizeTranscriptionOutput,
    TranscribeAudioInput,
    TranscribeAudioOutput,
)
from synapse_scribble.schemas.session import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/flows", tags=["Flows"])


@router.post(
    "/transcribe",
    response_model=FlowResult[TranscribeAudioOutput],
    summary="Transcribe an audio recording (simulated)",
)
async def transcribe(payload: TranscribeAudioInput) -> FlowResult[TranscribeAudioOutput]:
    return await transcribe_audio(payload)


@router.post(
    "/summarize",
    response_model=FlowResult[SummarizeTranscriptionOutput],
    summary="Summarize a conversation transcript",
)
async def summarize(payload: SummarizeTranscriptionInput) -> FlowResult[SummarizeTranscriptionOutput]:
    return await summarize_transcription(payload)


@router.post(
    "/themes",
    response_model=FlowResult[IdentifyThemesOutput],
    summary="Identify 3-5 central themes of a text",
)
async def themes(payload: IdentifyThemesInput) -> FlowResult[IdentifyThemesOutput]:
    return await identify_themes(payload)


@router.post(
    "/whiteboard-ideas",
    response_model=FlowResult[GenerateWhiteboardIdeasOutput],
    summary="Refine whiteboard content",
)
async def whiteboard_ideas(
    payload: GenerateWhiteboardIdeasInput,
) -> FlowResult[GenerateWhiteboardIdeasOutput]:
    return await generate_whiteboard_ideas(payload)


@router.post(
    "/image",
    response_model=FlowResult[GenerateImageOutput],
    responses={
        502: {"description": "The model produced no image", "model": ErrorResponse},
        503: {"description": "AI service unavailable", "model": ErrorResponse},
    },
    summary="Generate a whiteboard illustration",
)
async def image(payload: GenerateImageInput) -> FlowResult[GenerateImageOutput]:
    # ImageGenerationError propagates to the global handler (502)
    return await generate_image(payload)


@router.post(
    "/insights",
    response_model=FlowResult[GenerateInsightsOutput],
    summary="Generate new insights from a conversation and its image",
)
async def insights(payload: GenerateInsightsInput) -> FlowResult[GenerateInsightsOutput]:
    return await generate_insights(payload)


@router.post(
    "/report",
    response_model=FlowResult[SessionReportOutput],
    summary="Generate a Markdown session report",
    description=(
        "Builds one report over all given cycles. Optional metadata defaults to "
        "'(Ikke specificeret)'; the date in the report is today's date as d.m.yyyy."
    ),
)
async def report(payload: SessionReportInput) -> FlowResult[SessionReportOutput]:
    return await generate_session_report(payload)
