"""
Session-report flow
===================

What:  Assembles one long-form Markdown report from all cycles of a session.
How:   1. Classify each cycle's image field into a status line
       2. Resolve optional metadata to display defaults
       3. Render the report prompt and call the text model once
       4. Replace the date placeholder in the answer with today's date

Steps 1, 2 and 4 are pure functions so they can be tested without a backend.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence

from synapse_scribble.flows import messages
from synapse_scribble.flows.base import call_text_model
from synapse_scribble.flows.prompts import render_session_report_prompt
from synapse_scribble.schemas.flows import (
    CycleRecord,
    FailureKind,
    FlowResult,
    ProcessedCycle,
    ReportContext,
    SessionReportInput,
    SessionReportOutput,
)
from synapse_scribble.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

Result = FlowResult[SessionReportOutput]


def _today() -> date:
    return date.today()


def format_report_date(day: date) -> str:
    """day.month.year without zero padding: 3 July 2025 → "3.7.2025"."""
    return f"{day.day}.{day.month}.{day.year}"


def classify_image_status(value: Optional[str]) -> str:
    """
    Describe a cycle's image field in one line, first match wins.

    success marker > region block > error prefix > skip prefix
    > invalid sentinel > any other text > "no data".
    """
    if not value or not value.strip():
        return messages.IMAGE_STATUS_NO_DATA
    if value.startswith(messages.IMAGE_STATUS_SUCCESS_MARKER):
        return messages.IMAGE_STATUS_SUCCESS
    if messages.IMAGE_STATUS_REGION_MARKER in value:
        return messages.IMAGE_STATUS_REGION
    if value.startswith(messages.IMAGE_STATUS_ERROR_PREFIXES):
        return value
    if value.startswith(messages.IMAGE_STATUS_SKIP_PREFIXES):
        return value
    if value.startswith(messages.IMAGE_STATUS_INVALID_PREFIX):
        return messages.IMAGE_STATUS_INVALID.format(value=value)
    return value


def process_cycles(cycles: Sequence[CycleRecord]) -> List[ProcessedCycle]:
    return [
        ProcessedCycle(
            **cycle.model_dump(),
            display_index=index,
            processed_generated_image_status=classify_image_status(cycle.generated_image_data_uri),
        )
        for index, cycle in enumerate(cycles, start=1)
    ]


def resolve_report_context(payload: SessionReportInput, today: date) -> ReportContext:
    formatted_date = format_report_date(today)

    if payload.contact_persons:
        contacts = payload.contact_persons
    elif payload.user_name:
        contacts = f"{payload.user_name} ({payload.user_email or 'N/A'})"
    else:
        contacts = messages.REPORT_NOT_SPECIFIED

    return ReportContext(
        report_title=payload.report_title or f"{messages.REPORT_DEFAULT_TITLE} {formatted_date}",
        project_name=payload.project_name or payload.user_organization or messages.REPORT_NOT_SPECIFIED,
        contact_persons=contacts,
        formatted_date=formatted_date,
    )


def substitute_report_date(report_text: str, formatted_date: str) -> str:
    return report_text.replace(messages.REPORT_DATE_PLACEHOLDER, formatted_date)


async def generate_session_report(payload: SessionReportInput) -> Result:
    if not payload.session_cycles:
        logger.info("generate_session_report: no cycles, skipping backend call")
        return Result(
            output=SessionReportOutput(report_text=messages.REPORT_NO_CYCLES),
            failure=FailureKind.INVALID_INPUT,
        )

    context = resolve_report_context(payload, _today())
    cycles = process_cycles(payload.session_cycles)
    prompt = render_session_report_prompt(context, cycles)

    logger.info(
        "generate_session_report: rendering report for %d cycles (%d prompt chars)",
        len(cycles),
        len(prompt),
    )
    text = await call_text_model(gemini_service, "generate_session_report", prompt)
    if text is None:
        return Result(
            output=SessionReportOutput(report_text=messages.REPORT_FAILED),
            failure=FailureKind.BACKEND_ERROR,
        )
    if not text:
        logger.error("generate_session_report: model returned an empty report")
        return Result(
            output=SessionReportOutput(report_text=messages.REPORT_EMPTY_OUTPUT),
            failure=FailureKind.INVALID_OUTPUT,
        )
    return Result(
        output=SessionReportOutput(report_text=substitute_report_date(text, context.formatted_date))
    )
