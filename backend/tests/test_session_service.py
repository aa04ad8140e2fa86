"""
Synapse Scribble Backend - Session Service Unit Tests
=====================================================

What:  Tests for the cycle orchestration and session store.
How:   Either the Gemini backend is mocked (full chain through real flows)
       or the flow functions imported by the service are patched.

What we test:
    ✅ Full analysis cycle appends one CycleRecord
    ✅ Failed steps store fallbacks and produce notices, never abort
    ✅ Business rules (blank text, cycle cap, whiteboard without summary)
    ✅ Insights seed the next cycle
    ✅ Store lookups raise NotFoundError
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from synapse_scribble.exceptions import (
    CircuitBreakerOpenError,
    ImageGenerationError,
    LLMServiceError,
    NotFoundError,
    ValidationError,
)
from synapse_scribble.flows import messages
from synapse_scribble.flows.summarize import summarize_transcription
from synapse_scribble.schemas.flows import CycleRecord
from synapse_scribble.schemas.session import SessionReportRequest, UserInfo
from synapse_scribble.services.session_service import (
    SessionService,
    SessionStore,
    describe_ai_error,
    session_store,
)

from conftest import PNG_DATA_URI


def _answers(**by_marker):
    """generate_text side effect picking the answer by a marker in the prompt."""
    async def answer(prompt, image_data_uris=None):
        for marker, text in by_marker.items():
            if marker in prompt:
                return text
        return ""
    return answer


# Ordered: the insights prompt mentions the whiteboard, the whiteboard prompt mentions themes
HAPPY_PATH = _answers(
    facilitator="- Hvad koster en forsinket ansættelse?",
    whiteboard="- Ansæt to udviklere\n- Fastlæg Q3-budget",
    Summarize="Budget for Q3 og ansættelser.",
    temaer="Budget, Ansættelser, Planlægning, Økonomi, Rekruttering, Kultur",
)


class TestDescribeAIError:

    @pytest.mark.parametrize(
        "error",
        [
            RuntimeError("503 Service Unavailable"),
            RuntimeError("The model is overloaded. Please try again later."),
            LLMServiceError(context={"error": "model is not available"}),
            CircuitBreakerOpenError(recovery_time=10),
        ],
    )
    def test_overload_errors_get_fixed_message(self, error):
        assert describe_ai_error(error, "Resumé fejlede") == messages.AI_OVERLOADED

    def test_other_errors_are_prefixed(self):
        assert describe_ai_error(RuntimeError("quota exceeded"), "Resumé fejlede") == (
            "Resumé fejlede: quota exceeded"
        )

    def test_already_prefixed_message_is_kept(self):
        error = ImageGenerationError(message=f"{messages.IMAGE_FAILED_PREFIX}: quota exceeded")
        assert describe_ai_error(error, messages.IMAGE_FAILED_PREFIX) == error.message

    def test_empty_error(self):
        assert describe_ai_error(RuntimeError(), "Fejl") == f"Fejl: {messages.AI_UNKNOWN_ERROR}"


class TestSessionStore:

    def test_create_get_end(self):
        store = SessionStore()
        session = store.create(user=UserInfo(user_name="Mette"), max_cycles=3)

        assert store.get(session.id) is session
        assert store.count() == 1
        assert session.max_cycles == 3

        store.end(session.id)
        assert store.count() == 0

    def test_unknown_session_raises(self):
        store = SessionStore()
        with pytest.raises(NotFoundError):
            store.get(uuid.uuid4())
        with pytest.raises(NotFoundError):
            store.end(uuid.uuid4())

    def test_default_cycle_cap_from_settings(self):
        assert SessionStore().create().max_cycles == 5


class TestStartAnalysis:

    def setup_method(self):
        self.service = SessionService()

    @pytest.mark.asyncio
    async def test_full_cycle(self, mock_llm, session):
        mock_llm.generate_text.side_effect = HAPPY_PATH

        notices = await self.service.start_analysis(session, "We discussed Q3 budget and hiring plans.")

        assert notices == []
        assert session.summary == "Budget for Q3 og ansættelser."
        assert len(session.identified_themes.split(", ")) == 5
        assert session.whiteboard_content.startswith("- Ansæt")
        assert session.generated_image_data_uri == PNG_DATA_URI
        assert session.new_insights.startswith("- Hvad koster")

        assert len(session.cycles) == 1
        cycle = session.cycles[0]
        assert cycle.transcription == "We discussed Q3 budget and hiring plans."
        assert cycle.identified_themes == session.identified_themes

        # summary, themes, whiteboard, insights
        assert mock_llm.generate_text.await_count == 4
        mock_llm.generate_image.assert_awaited_once()
        image_prompt = mock_llm.generate_image.await_args.args[0]
        assert "Budget" in image_prompt

    @pytest.mark.asyncio
    async def test_summarize_called_once_and_themes_bounded(self, mock_llm, session):
        mock_llm.generate_text.side_effect = _answers(
            facilitator="- Indsigt",
            whiteboard="- Board",
            Summarize="Budget og ansættelser for Q3.",
            temaer="Budget, Ansættelser, Q3, Planlægning, Økonomi, Vækst, Strategi",
        )
        summarize = AsyncMock(wraps=summarize_transcription)

        with patch("synapse_scribble.services.session_service.summarize_transcription", new=summarize):
            await self.service.start_analysis(session, "We discussed Q3 budget and hiring plans.")

        summarize.assert_awaited_once()
        assert summarize.await_args.args[0].transcription == "We discussed Q3 budget and hiring plans."
        assert session.summary == "Budget og ansættelser for Q3."
        themes = [t.strip() for t in session.identified_themes.split(",")]
        assert 1 <= len(themes) <= 5
        assert all(themes)

    @pytest.mark.asyncio
    async def test_failing_steps_store_fallbacks(self, mock_llm, session):
        mock_llm.generate_text.side_effect = LLMServiceError(context={"error": "quota exceeded"})
        mock_llm.generate_image.side_effect = LLMServiceError(context={"error": "quota exceeded"})

        notices = await self.service.start_analysis(session, "Vi talte om budgettet.")

        assert session.summary == ""
        assert session.cycles[0].summary == messages.SUMMARY_FAILED
        assert session.identified_themes == messages.THEMES_GENERAL
        assert session.whiteboard_content == messages.WHITEBOARD_FAILED
        assert session.generated_image_data_uri == f"{messages.IMAGE_FAILED_PREFIX}: quota exceeded"
        assert session.new_insights == messages.INSIGHTS_FAILED
        assert len(session.cycles) == 1
        assert len(notices) == 4

    @pytest.mark.asyncio
    async def test_region_blocked_image_is_recorded(self, mock_llm, session):
        mock_llm.generate_text.side_effect = HAPPY_PATH
        mock_llm.generate_image.side_effect = LLMServiceError(
            context={"error": "Image generation is not available in your country."}
        )

        notices = await self.service.start_analysis(session, "Vi talte om budgettet.")

        stored = session.cycles[0].generated_image_data_uri
        assert stored.startswith(messages.IMAGE_FAILED_PREFIX)
        assert messages.IMAGE_STATUS_REGION_MARKER in stored
        assert notices == [stored]

    @pytest.mark.asyncio
    async def test_overloaded_image_backend(self, mock_llm, session):
        mock_llm.generate_text.side_effect = HAPPY_PATH
        mock_llm.generate_image.side_effect = LLMServiceError(context={"error": "503 overloaded"})

        notices = await self.service.start_analysis(session, "Vi talte om budgettet.")

        assert notices == [messages.AI_OVERLOADED]
        assert session.generated_image_data_uri == (
            f"{messages.IMAGE_FAILED_PREFIX}: {messages.AI_OVERLOADED}"
        )

    @pytest.mark.asyncio
    async def test_blank_text_rejected(self, mock_llm, session):
        with pytest.raises(ValidationError):
            await self.service.start_analysis(session, "   ")
        mock_llm.generate_text.assert_not_awaited()
        assert session.cycles == []

    @pytest.mark.asyncio
    async def test_cycle_cap(self, mock_llm):
        session = session_store.create(max_cycles=2)
        session.cycles = [CycleRecord(), CycleRecord()]

        with pytest.raises(ValidationError):
            await self.service.start_analysis(session, "Endnu en runde")
        mock_llm.generate_text.assert_not_awaited()


class TestTranscribeAudio:

    @pytest.mark.asyncio
    async def test_transcription_starts_analysis(self, mock_llm, session, audio_data_uri):
        mock_llm.generate_text.side_effect = HAPPY_PATH

        await SessionService().transcribe_audio(session, audio_data_uri)

        assert "simuleret" in session.transcription
        assert len(session.cycles) == 1

    @pytest.mark.asyncio
    async def test_invalid_audio_resets_transcription(self, mock_llm, session):
        session.transcription = "gammel tekst"

        notices = await SessionService().transcribe_audio(session, "data:text/plain;base64,aGVq")

        assert session.transcription == ""
        assert session.cycles == []
        assert notices[0].startswith(messages.SESSION_TRANSCRIPTION_FAILED)
        mock_llm.generate_text.assert_not_awaited()


class TestGenerateWhiteboardIdeas:

    def setup_method(self):
        self.service = SessionService()

    @pytest.mark.asyncio
    async def test_blocked_without_summary(self, session):
        session.whiteboard_content = "- Eksisterende idé"
        with patch(
            "synapse_scribble.services.session_service.generate_whiteboard_ideas",
            new=AsyncMock(),
        ) as mock_flow:
            with pytest.raises(ValidationError):
                await self.service.generate_whiteboard_ideas(session, "expand on hiring")

            mock_flow.assert_not_awaited()
        assert session.whiteboard_content == "- Eksisterende idé"

    @pytest.mark.asyncio
    async def test_blocked_after_failed_summary(self, mock_llm, session):
        async def answer(prompt, image_data_uris=None):
            if "Summarize" in prompt:
                raise LLMServiceError(context={"error": "quota exceeded"})
            return await HAPPY_PATH(prompt, image_data_uris)

        mock_llm.generate_text.side_effect = answer
        await self.service.start_analysis(session, "Vi talte om budgettet.")
        # summary (failed), whiteboard, insights; themes skipped
        assert mock_llm.generate_text.await_count == 3

        with pytest.raises(ValidationError):
            await self.service.generate_whiteboard_ideas(session, "expand on hiring")

        assert mock_llm.generate_text.await_count == 3
        assert session.summary == ""

    @pytest.mark.asyncio
    async def test_blocked_without_voice_prompt(self, mock_llm, session):
        session.summary = "Resumé"
        with pytest.raises(ValidationError):
            await self.service.generate_whiteboard_ideas(session, "  ")
        mock_llm.generate_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refines_board(self, mock_llm, session):
        session.summary = "Resumé"
        session.identified_themes = "Ansættelser"
        session.whiteboard_content = "- Ansættelser"
        mock_llm.generate_text.return_value = "- Ansættelser\n- To nye udviklere"

        notices = await self.service.generate_whiteboard_ideas(session, "expand on hiring")

        assert notices == []
        assert session.whiteboard_content == "- Ansættelser\n- To nye udviklere"

    @pytest.mark.asyncio
    async def test_failure_keeps_board(self, mock_llm, session):
        session.summary = "Resumé"
        session.whiteboard_content = "- Ansættelser"
        mock_llm.generate_text.side_effect = LLMServiceError()

        notices = await self.service.generate_whiteboard_ideas(session, "expand on hiring")

        assert session.whiteboard_content == "- Ansættelser"
        assert len(notices) == 1


class TestUseInsightsAndReport:

    def setup_method(self):
        self.service = SessionService()

    def test_use_insights_seeds_transcription(self, session, sample_cycles):
        session.cycles = list(sample_cycles)
        session.summary = "gammelt resumé"

        self.service.use_insights(session, 1)

        assert session.transcription == "Hvordan prioriterer vi?"
        assert session.summary == "gammelt resumé"
        assert session.cycles == sample_cycles

    def test_use_insights_unknown_cycle(self, session, sample_cycles):
        session.cycles = list(sample_cycles)
        with pytest.raises(NotFoundError):
            self.service.use_insights(session, 4)

    def test_use_insights_without_insights(self, session, sample_cycles):
        session.cycles = list(sample_cycles)
        with pytest.raises(ValidationError):
            self.service.use_insights(session, 2)

    @pytest.mark.asyncio
    async def test_report_uses_session_user(self, session, sample_cycles):
        session.user = UserInfo(user_name="Mette", user_email="mette@example.com")
        session.cycles = list(sample_cycles)
        with patch(
            "synapse_scribble.services.session_service.generate_session_report",
            new=AsyncMock(),
        ) as mock_report:
            await self.service.generate_report(session, SessionReportRequest(project_name="Projekt X"))

        payload = mock_report.await_args.args[0]
        assert payload.user_name == "Mette"
        assert payload.user_email == "mette@example.com"
        assert payload.user_organization is None
        assert payload.project_name == "Projekt X"
        assert len(payload.session_cycles) == 3
