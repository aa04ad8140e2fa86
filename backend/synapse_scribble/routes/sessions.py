"""
Synapse Scribble Backend - Session Routes
=========================================

What:  Stateful endpoints driving the record → analyze → refine → report loop.
How:   Looks up the session in the in-memory store and delegates to
       SessionService; every mutating endpoint answers with the full
       session state plus the notices produced by the action.
Who:   Called by the recording page.

Endpoint Map:
    POST   /api/sessions                                   start a session
    GET    /api/sessions/{id}                              current state
    DELETE /api/sessions/{id}                              end the session
    POST   /api/sessions/{id}/transcribe                   record → full cycle
    POST   /api/sessions/{id}/analyze                      text → full cycle
    POST   /api/sessions/{id}/whiteboard-ideas             refine the whiteboard
    POST   /api/sessions/{id}/cycles/{n}/use-insights      seed the next cycle
    POST   /api/sessions/{id}/report                       session report
"""

import logging
import uuid

from fastapi import APIRouter, Path, Response

from synapse_scribble.schemas.flows import FlowResult, SessionReportOutput
from synapse_scribble.schemas.session import (
    CreateSessionRequest,
    ErrorResponse,
    SessionAnalyzeRequest,
    SessionReportRequest,
    SessionResponse,
    SessionTranscribeRequest,
    SessionWhiteboardRequest,
    UserInfo,
)
from synapse_scribble.services.session_service import session_service, session_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sessions", tags=["Sessions"])

_NOT_FOUND = {404: {"description": "Unknown session", "model": ErrorResponse}}
_RULE_VIOLATION = {400: {"description": "Business rule violated", "model": ErrorResponse}}


@router.post(
    "",
    status_code=201,
    response_model=SessionResponse,
    summary="Start a new session",
)
async def create_session(payload: CreateSessionRequest) -> SessionResponse:
    session = session_store.create(
        user=UserInfo(
            user_name=payload.user_name,
            user_email=payload.user_email,
            user_organization=payload.user_organization,
        ),
        max_cycles=payload.max_cycles,
    )
    return SessionResponse.from_context(session)


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    responses=_NOT_FOUND,
    summary="Get the current session state",
)
async def get_session(session_id: uuid.UUID) -> SessionResponse:
    return SessionResponse.from_context(session_store.get(session_id))


@router.delete(
    "/{session_id}",
    status_code=204,
    responses=_NOT_FOUND,
    summary="End a session and discard its state",
)
async def end_session(session_id: uuid.UUID) -> Response:
    session_store.end(session_id)
    return Response(status_code=204)


@router.post(
    "/{session_id}/transcribe",
    response_model=SessionResponse,
    responses={**_NOT_FOUND, **_RULE_VIOLATION},
    summary="Transcribe a recording and run an analysis cycle on it",
)
async def transcribe(session_id: uuid.UUID, payload: SessionTranscribeRequest) -> SessionResponse:
    session = session_store.get(session_id)
    notices = await session_service.transcribe_audio(session, payload.audio_data_uri)
    return SessionResponse.from_context(session, notices)


@router.post(
    "/{session_id}/analyze",
    response_model=SessionResponse,
    responses={**_NOT_FOUND, **_RULE_VIOLATION},
    summary="Run an analysis cycle on a transcript",
)
async def analyze(session_id: uuid.UUID, payload: SessionAnalyzeRequest) -> SessionResponse:
    session = session_store.get(session_id)
    notices = await session_service.start_analysis(session, payload.transcription)
    return SessionResponse.from_context(session, notices)


@router.post(
    "/{session_id}/whiteboard-ideas",
    response_model=SessionResponse,
    responses={**_NOT_FOUND, **_RULE_VIOLATION},
    summary="Refine the whiteboard with a voice prompt",
)
async def whiteboard_ideas(session_id: uuid.UUID, payload: SessionWhiteboardRequest) -> SessionResponse:
    session = session_store.get(session_id)
    notices = await session_service.generate_whiteboard_ideas(session, payload.voice_prompt)
    return SessionResponse.from_context(session, notices)


@router.post(
    "/{session_id}/cycles/{cycle_number}/use-insights",
    response_model=SessionResponse,
    responses={**_NOT_FOUND, **_RULE_VIOLATION},
    summary="Use a cycle's insights as the next transcript",
)
async def use_insights(
    session_id: uuid.UUID,
    cycle_number: int = Path(..., ge=1, description="1-based cycle number"),
) -> SessionResponse:
    session = session_store.get(session_id)
    session_service.use_insights(session, cycle_number)
    return SessionResponse.from_context(session)


@router.post(
    "/{session_id}/report",
    response_model=FlowResult[SessionReportOutput],
    responses=_NOT_FOUND,
    summary="Generate the session report over all completed cycles",
)
async def report(session_id: uuid.UUID, payload: SessionReportRequest) -> FlowResult[SessionReportOutput]:
    session = session_store.get(session_id)
    return await session_service.generate_report(session, payload)
