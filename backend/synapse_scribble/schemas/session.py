"""
Synapse Scribble Backend - Session & API Schemas
================================================

What:  Pydantic models for the session endpoints, the in-memory session
       context, and the shared error/health responses.
Who:   SessionService (state), routes (request/response models).
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from synapse_scribble.schemas.flows import CycleRecord


# ══════════════════════════════════════════════════════════════════════════
# Session Context
# ══════════════════════════════════════════════════════════════════════════


class UserInfo(BaseModel):
    """Optional details from the info panel, used in reports."""

    user_name: str = Field(default="", max_length=200)
    user_email: str = Field(default="", max_length=320)
    user_organization: str = Field(default="", max_length=200)


class SessionContext(BaseModel):
    """
    All state of one browser session.

    Lifecycle:
        1. Created by SessionStore.create() when the page starts a session
        2. Mutated only by SessionService after a flow call completes
        3. Discarded by SessionStore.end(); never persisted

    The `active` fields mirror the cycle currently shown in the UI; a
    CycleRecord snapshot is appended to `cycles` when a cycle completes.
    """

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    user: UserInfo = Field(default_factory=UserInfo)
    max_cycles: int = Field(default=5, ge=1)

    transcription: str = ""
    summary: str = ""
    identified_themes: str = ""
    whiteboard_content: str = ""
    generated_image_data_uri: str = ""
    new_insights: str = ""

    cycles: List[CycleRecord] = Field(default_factory=list)

    @property
    def can_start_new_cycle(self) -> bool:
        return len(self.cycles) < self.max_cycles

    def reset_ai_outputs(self) -> None:
        """Clear everything derived from the current transcript."""
        self.summary = ""
        self.identified_themes = ""
        self.whiteboard_content = ""
        self.generated_image_data_uri = ""
        self.new_insights = ""


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CreateSessionRequest(UserInfo):
    max_cycles: Optional[int] = Field(
        default=None,
        ge=1,
        le=50,
        description="Override the configured cycle cap for this session",
    )


class SessionTranscribeRequest(BaseModel):
    audio_data_uri: str = Field(description="Recording as a base64 audio data URI")


class SessionAnalyzeRequest(BaseModel):
    transcription: str = Field(description="Transcript text to run a full analysis cycle on")


class SessionWhiteboardRequest(BaseModel):
    voice_prompt: str = Field(description="Instruction for refining the whiteboard")


class SessionReportRequest(BaseModel):
    report_title: Optional[str] = None
    project_name: Optional[str] = None
    contact_persons: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SessionResponse(BaseModel):
    """Session state as the results and whiteboard panels render it."""

    id: uuid.UUID
    created_at: datetime
    user: UserInfo
    max_cycles: int
    can_start_new_cycle: bool
    transcription: str
    summary: str
    identified_themes: str
    themes: List[str] = Field(description="identified_themes split into badges")
    whiteboard_content: str
    generated_image_data_uri: str
    new_insights: str
    cycles: List[CycleRecord]
    notices: List[str] = Field(
        default_factory=list,
        description="Transient user-facing messages from the last action (toasts)",
    )

    @classmethod
    def from_context(cls, session: SessionContext, notices: Optional[List[str]] = None) -> "SessionResponse":
        return cls(
            id=session.id,
            created_at=session.created_at,
            user=session.user,
            max_cycles=session.max_cycles,
            can_start_new_cycle=session.can_start_new_cycle,
            transcription=session.transcription,
            summary=session.summary,
            identified_themes=session.identified_themes,
            themes=[t.strip() for t in session.identified_themes.split(",") if t.strip()],
            whiteboard_content=session.whiteboard_content,
            generated_image_data_uri=session.generated_image_data_uri,
            new_insights=session.new_insights,
            cycles=session.cycles,
            notices=notices or [],
        )


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Transskription er tom. Kan ikke starte analyse.",
            "details": {"field": "transcription"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    gemini: str = Field(description="Gemini API status: available, unavailable, circuit_open")
    active_sessions: int = Field(description="Sessions currently held in memory")
    uptime_seconds: float = Field(description="Seconds since service started")
