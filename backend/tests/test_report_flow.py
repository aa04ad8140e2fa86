"""
Synapse Scribble Backend - Session Report Tests
===============================================

What:  Tests for the report flow and its pure helpers.

What we test:
    ✅ Image status classification, first matching rule wins
    ✅ Metadata defaults (title, project, contacts)
    ✅ Date placeholder replaced by d.m.yyyy
    ✅ Empty cycle list answers without a backend call
    ✅ Prompt lists every cycle with its 1-based index
"""

from datetime import date
from unittest.mock import patch

import pytest

from synapse_scribble.flows import messages
from synapse_scribble.flows.prompts import render_session_report_prompt
from synapse_scribble.flows.report import (
    classify_image_status,
    format_report_date,
    generate_session_report,
    process_cycles,
    resolve_report_context,
    substitute_report_date,
)
from synapse_scribble.schemas.flows import FailureKind, SessionReportInput

from conftest import PNG_DATA_URI


class TestClassifyImageStatus:

    def test_success(self):
        assert classify_image_status(PNG_DATA_URI) == messages.IMAGE_STATUS_SUCCESS

    @pytest.mark.parametrize(
        "value",
        [
            "Fejl under billedgenerering: quota exceeded",
            "Billedgenerering fejlede eller returnerede ikke en gyldig billed-URL.",
            "Kunne ikke generere billede.",
        ],
    )
    def test_error_prefixes_pass_through(self, value):
        assert classify_image_status(value) == value

    def test_skip_prefix_passes_through(self):
        assert classify_image_status(messages.IMAGE_SKIPPED) == messages.IMAGE_SKIPPED

    def test_region_block(self):
        value = f"{messages.IMAGE_FAILED_PREFIX}: {messages.IMAGE_REGION_UNAVAILABLE}"
        assert classify_image_status(value) == messages.IMAGE_STATUS_REGION

    def test_invalid_sentinel(self):
        assert classify_image_status("Ugyldig prompt") == "Billedgenerering fejlede: Ugyldig prompt"

    def test_other_text_passes_through(self):
        assert classify_image_status("https://example.com/skitse.png") == "https://example.com/skitse.png"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_no_data(self, value):
        assert classify_image_status(value) == messages.IMAGE_STATUS_NO_DATA


class TestReportHelpers:

    def test_format_report_date_has_no_zero_padding(self):
        assert format_report_date(date(2025, 7, 3)) == "3.7.2025"
        assert format_report_date(date(2025, 12, 24)) == "24.12.2025"

    def test_substitute_report_date_replaces_every_placeholder(self):
        text = f"Dato: {messages.REPORT_DATE_PLACEHOLDER}\nIgen: {messages.REPORT_DATE_PLACEHOLDER}"
        assert substitute_report_date(text, "3.7.2025") == "Dato: 3.7.2025\nIgen: 3.7.2025"

    def test_context_defaults(self):
        context = resolve_report_context(SessionReportInput(), date(2025, 7, 3))

        assert context.report_title == "AI Analyse Sessionsrapport 3.7.2025"
        assert context.project_name == messages.REPORT_NOT_SPECIFIED
        assert context.contact_persons == messages.REPORT_NOT_SPECIFIED
        assert context.formatted_date == "3.7.2025"

    def test_context_uses_user_info(self):
        context = resolve_report_context(
            SessionReportInput(user_name="Mette", user_organization="Synapse ApS"),
            date(2025, 7, 3),
        )

        assert context.project_name == "Synapse ApS"
        assert context.contact_persons == "Mette (N/A)"

    def test_explicit_metadata_wins(self):
        context = resolve_report_context(
            SessionReportInput(
                report_title="Workshop",
                project_name="Projekt X",
                contact_persons="Anna, Bo",
                user_name="Mette",
                user_email="mette@example.com",
                user_organization="Synapse ApS",
            ),
            date(2025, 7, 3),
        )

        assert context.report_title == "Workshop"
        assert context.project_name == "Projekt X"
        assert context.contact_persons == "Anna, Bo"

    def test_process_cycles_indexes_and_classifies(self, sample_cycles):
        processed = process_cycles(sample_cycles)

        assert [c.display_index for c in processed] == [1, 2, 3]
        assert processed[0].processed_generated_image_status == messages.IMAGE_STATUS_SUCCESS
        assert processed[1].processed_generated_image_status.startswith(messages.IMAGE_FAILED_PREFIX)
        assert processed[2].processed_generated_image_status == messages.IMAGE_STATUS_NO_DATA
        # Source records are left untouched
        assert sample_cycles[0].generated_image_data_uri == PNG_DATA_URI

    def test_prompt_contains_every_cycle(self, sample_cycles):
        context = resolve_report_context(SessionReportInput(), date(2025, 7, 3))
        prompt = render_session_report_prompt(context, process_cycles(sample_cycles))

        for index in (1, 2, 3):
            assert f"### Cyklus {index} – Formål" in prompt
        assert messages.REPORT_NO_INSIGHTS in prompt
        assert messages.REPORT_DATE_PLACEHOLDER in prompt
        assert PNG_DATA_URI not in prompt


class TestGenerateSessionReport:

    @pytest.mark.asyncio
    async def test_no_cycles_skips_backend(self, mock_llm):
        result = await generate_session_report(SessionReportInput(session_cycles=[]))

        assert result.output.report_text == messages.REPORT_NO_CYCLES
        assert result.failure == FailureKind.INVALID_INPUT
        mock_llm.generate_text.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_date_placeholder_is_replaced(self, mock_llm, sample_cycles):
        mock_llm.generate_text.return_value = (
            f"# Rapporttitel: Workshop\nVersion/Dato: {messages.REPORT_DATE_PLACEHOLDER}"
        )

        with patch("synapse_scribble.flows.report._today", return_value=date(2025, 7, 3)):
            result = await generate_session_report(SessionReportInput(session_cycles=sample_cycles))

        assert result.ok
        assert result.output.report_text.endswith("Version/Dato: 3.7.2025")
        mock_llm.generate_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_backend_error_returns_fallback(self, mock_llm, sample_cycles):
        mock_llm.generate_text.side_effect = RuntimeError("503 Service Unavailable")

        result = await generate_session_report(SessionReportInput(session_cycles=sample_cycles))

        assert result.output.report_text == messages.REPORT_FAILED
        assert result.failure == FailureKind.BACKEND_ERROR

    @pytest.mark.asyncio
    async def test_empty_answer_returns_fallback(self, mock_llm, sample_cycles):
        mock_llm.generate_text.return_value = ""

        result = await generate_session_report(SessionReportInput(session_cycles=sample_cycles))

        assert result.output.report_text == messages.REPORT_EMPTY_OUTPUT
        assert result.failure == FailureKind.INVALID_OUTPUT
