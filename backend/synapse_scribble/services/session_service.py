"""
Synapse Scribble Backend - Session Service (Cycle Orchestrator)
===============================================================

What:  Runs the analysis cycle for a session and keeps its state.
How:   Composes the flows; every state change happens after a flow call
       has completed, so a session is never left half-updated by an error.
Who:   Called by the /api/sessions route handlers.

Analysis Cycle (POST /api/sessions/{id}/analyze):
    ┌────────────┐   ┌─────────┐   ┌────────┐   ┌────────────┐   ┌───────┐   ┌──────────┐
    │ Transcript │──▶│ Summary │──▶│ Themes │──▶│ Whiteboard │──▶│ Image │──▶│ Insights │
    └────────────┘   └─────────┘   └────────┘   └────────────┘   └───────┘   └──────────┘
                                                                                   │
                                             CycleRecord appended to session ◀─────┘

    A failing step never aborts the cycle: the step's fallback text is
    stored, a notice is returned for the UI, and the next step continues.
    Insights of a finished cycle can seed the next one (use_insights).
"""

import logging
import uuid
from typing import Dict, List, Optional, Tuple

from synapse_scribble.config import settings
from synapse_scribble.exceptions import (
    CircuitBreakerOpenError,
    NotFoundError,
    ScribbleError,
    ValidationError,
)
from synapse_scribble.flows import messages
from synapse_scribble.flows.image import build_image_prompt, generate_image
from synapse_scribble.flows.insights import generate_insights
from synapse_scribble.flows.report import generate_session_report
from synapse_scribble.flows.summarize import summarize_transcription
from synapse_scribble.flows.themes import identify_themes
from synapse_scribble.flows.transcription import transcribe_audio
from synapse_scribble.flows.whiteboard import generate_whiteboard_ideas
from synapse_scribble.schemas.flows import (
    CycleRecord,
    FlowResult,
    GenerateImageInput,
    GenerateInsightsInput,
    GenerateWhiteboardIdeasInput,
    IdentifyThemesInput,
    SessionReportInput,
    SessionReportOutput,
    SummarizeTranscriptionInput,
    TranscribeAudioInput,
)
from synapse_scribble.schemas.session import SessionContext, SessionReportRequest, UserInfo

logger = logging.getLogger(__name__)

# Lower-cased fragments of provider errors that mean "try again later"
_OVERLOAD_MARKERS = (
    "503",
    "service unavailable",
    "overloaded",
    "model is not available",
)


def describe_ai_error(exc: BaseException, base_message: str) -> str:
    """
    Turn a backend exception into the text shown to the user.

    Overload and availability errors get one fixed message; anything else
    becomes "<base_message>: <error>". An error whose message already
    starts with base_message is returned as is.
    """
    if isinstance(exc, CircuitBreakerOpenError):
        return messages.AI_OVERLOADED

    if isinstance(exc, ScribbleError):
        detail = exc.message
        raw = f"{exc.message} {exc.context.get('error', '')}"
    else:
        detail = str(exc)
        raw = detail

    if any(marker in raw.lower() for marker in _OVERLOAD_MARKERS):
        return messages.AI_OVERLOADED
    if not detail:
        return f"{base_message}: {messages.AI_UNKNOWN_ERROR}"
    if detail.startswith(base_message):
        return detail
    return f"{base_message}: {detail}"


# ══════════════════════════════════════════════════════════════════════════
# Session Store
# ══════════════════════════════════════════════════════════════════════════


class SessionStore:
    """
    In-memory registry of live sessions.

    One dict in one process: sessions vanish on restart and are not shared
    between uvicorn workers.
    """

    def __init__(self):
        self._sessions: Dict[uuid.UUID, SessionContext] = {}

    def create(self, user: Optional[UserInfo] = None, max_cycles: Optional[int] = None) -> SessionContext:
        session = SessionContext(
            user=user or UserInfo(),
            max_cycles=max_cycles or settings.max_cycles,
        )
        self._sessions[session.id] = session
        logger.info("Session %s started (max_cycles=%d)", session.id, session.max_cycles)
        return session

    def get(self, session_id: uuid.UUID) -> SessionContext:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError(resource="Session", resource_id=str(session_id))
        return session

    def end(self, session_id: uuid.UUID) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise NotFoundError(resource="Session", resource_id=str(session_id))
        logger.info("Session %s ended after %d cycles", session_id, len(session.cycles))

    def count(self) -> int:
        return len(self._sessions)

    def clear(self) -> None:
        self._sessions.clear()


# ══════════════════════════════════════════════════════════════════════════
# Session Service
# ══════════════════════════════════════════════════════════════════════════


class SessionService:
    """
    Business logic behind the recording page.

    Methods return the user-facing notices produced along the way (the
    toasts of the page); the updated state lives on the session itself.
    Business-rule violations raise ValidationError before any flow runs.
    """

    async def transcribe_audio(self, session: SessionContext, audio_data_uri: str) -> List[str]:
        """Transcribe a recording, then run a full analysis cycle on the result."""
        result = await transcribe_audio(TranscribeAudioInput(audio_data_uri=audio_data_uri))
        if not result.ok:
            session.transcription = ""
            return [f"{messages.SESSION_TRANSCRIPTION_FAILED}: {result.output.transcription}"]

        return await self.start_analysis(session, result.output.transcription)

    async def start_analysis(self, session: SessionContext, text: str) -> List[str]:
        """
        Run summary → themes → whiteboard → image → insights on `text`.

        Raises:
            ValidationError: Blank text, or the session already holds
                max_cycles cycles.
        """
        if not text.strip():
            raise ValidationError(messages.SESSION_EMPTY_TRANSCRIPTION, field="transcription")
        if not session.can_start_new_cycle:
            raise ValidationError(
                messages.SESSION_CYCLE_LIMIT.format(max_cycles=session.max_cycles),
                context={"cycles": len(session.cycles)},
            )

        cycle_number = len(session.cycles) + 1
        logger.info("Session %s: starting analysis cycle %d", session.id, cycle_number)

        session.transcription = text
        session.reset_ai_outputs()
        notices: List[str] = []

        # ── Step 1: Summary ───────────────────────────────────────────────
        summary = await summarize_transcription(SummarizeTranscriptionInput(transcription=text))
        # The active summary stays empty on failure; the cycle keeps the fallback
        if summary.ok:
            session.summary = summary.output.summary
        else:
            notices.append(f"{messages.SESSION_SUMMARY_FAILED}: {summary.output.summary}")

        # ── Step 2: Themes (from the summary) ─────────────────────────────
        themes_text, themes_notice = await self._identify_themes(session.summary)
        session.identified_themes = themes_text
        if themes_notice:
            notices.append(themes_notice)

        # ── Step 3: Whiteboard (transcript as context, no voice prompt) ───
        whiteboard = await generate_whiteboard_ideas(
            GenerateWhiteboardIdeasInput(
                voice_prompt="",
                identified_themes=session.identified_themes,
                current_whiteboard_content=session.whiteboard_content,
                transcription=text,
            )
        )
        session.whiteboard_content = whiteboard.output.refined_whiteboard_content
        if not whiteboard.ok:
            notices.append(
                f"{messages.SESSION_WHITEBOARD_FAILED}: {whiteboard.output.refined_whiteboard_content}"
            )

        # ── Step 4: Image ─────────────────────────────────────────────────
        image_value, image_notice = await self._generate_image(
            build_image_prompt(themes_text, context=text)
        )
        session.generated_image_data_uri = image_value
        if image_notice:
            notices.append(image_notice)

        # ── Step 5: Insights ──────────────────────────────────────────────
        insights = await generate_insights(
            GenerateInsightsInput(
                conversation_context=session.summary or text,
                image_data_uri=session.generated_image_data_uri,
            )
        )
        session.new_insights = insights.output.insights_text
        if not insights.ok:
            notices.append(f"{messages.SESSION_INSIGHTS_FAILED}: {insights.output.insights_text}")

        session.cycles.append(
            CycleRecord(
                transcription=session.transcription,
                summary=summary.output.summary,
                identified_themes=session.identified_themes,
                whiteboard_content=session.whiteboard_content,
                generated_image_data_uri=session.generated_image_data_uri,
                new_insights=session.new_insights,
            )
        )
        logger.info(
            "Session %s: cycle %d completed with %d notices",
            session.id,
            cycle_number,
            len(notices),
        )
        return notices

    async def _identify_themes(self, summary: str) -> Tuple[str, Optional[str]]:
        if not summary:
            return messages.THEMES_GENERAL, None

        themes = await identify_themes(IdentifyThemesInput(text_to_analyze=summary))
        if not themes.ok:
            logger.warning("Theme identification failed, falling back to general themes")
            return messages.THEMES_GENERAL, messages.SESSION_THEMES_FAILED
        return themes.output.identified_themes_text, None

    async def _generate_image(self, prompt: str) -> Tuple[str, Optional[str]]:
        """Returns (value stored on the cycle, notice or None)."""
        try:
            image = await generate_image(GenerateImageInput(prompt=prompt))
        except ScribbleError as e:
            logger.warning("Image generation failed: %s", e.message)
            message = describe_ai_error(e, messages.IMAGE_FAILED_PREFIX)
            if message == messages.AI_OVERLOADED:
                return f"{messages.IMAGE_FAILED_PREFIX}: {message}", message
            return message, message

        if not image.ok:
            return image.output.image_data_uri, image.output.image_data_uri
        return image.output.image_data_uri, None

    async def generate_whiteboard_ideas(self, session: SessionContext, voice_prompt: str) -> List[str]:
        """
        Refine the active whiteboard with a voice prompt.

        Raises:
            ValidationError: Blank voice prompt, or no summary yet. The
                session is left untouched and no flow runs.
        """
        if not voice_prompt.strip():
            raise ValidationError(messages.SESSION_MISSING_VOICE_PROMPT, field="voice_prompt")
        if not session.summary.strip():
            raise ValidationError(messages.SESSION_MISSING_SUMMARY, field="summary")

        result = await generate_whiteboard_ideas(
            GenerateWhiteboardIdeasInput(
                voice_prompt=voice_prompt,
                identified_themes=session.identified_themes,
                current_whiteboard_content=session.whiteboard_content,
                transcription=session.transcription,
            )
        )
        if not result.ok:
            return [f"{messages.SESSION_WHITEBOARD_FAILED}: {result.output.refined_whiteboard_content}"]

        session.whiteboard_content = result.output.refined_whiteboard_content
        return []

    def use_insights(self, session: SessionContext, cycle_number: int) -> None:
        """
        Seed the next cycle with the insights of cycle `cycle_number` (1-based).

        Only the transcript changes. The active outputs stay on screen until
        the next analysis resets them.
        """
        if not 1 <= cycle_number <= len(session.cycles):
            raise NotFoundError(resource="Cycle", resource_id=str(cycle_number))

        insights = session.cycles[cycle_number - 1].new_insights
        if not insights.strip():
            raise ValidationError(messages.SESSION_NO_INSIGHTS, field="new_insights")

        session.transcription = insights
        logger.info("Session %s: insights of cycle %d loaded as next transcript", session.id, cycle_number)

    async def generate_report(
        self,
        session: SessionContext,
        request: Optional[SessionReportRequest] = None,
    ) -> FlowResult[SessionReportOutput]:
        request = request or SessionReportRequest()
        return await generate_session_report(
            SessionReportInput(
                session_cycles=list(session.cycles),
                report_title=request.report_title,
                project_name=request.project_name,
                contact_persons=request.contact_persons,
                user_name=session.user.user_name or None,
                user_email=session.user.user_email or None,
                user_organization=session.user.user_organization or None,
            )
        )


# ── Singleton Instances ───────────────────────────────────────────────────
session_store = SessionStore()
session_service = SessionService()
