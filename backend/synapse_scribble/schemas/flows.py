"""
Synapse Scribble Backend - Flow Request/Response Schemas
========================================================

What:  Pydantic models for the input and output shape of every flow, the
       cycle records that feed the session report, and the tagged
       FlowResult wrapper returned by all flows.
Who:   Used by flows (validation), routes (request/response models) and the
       session service.

Every field is a string; absent optional fields default to "" so templates
never see None.
"""

import uuid
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, computed_field


# ══════════════════════════════════════════════════════════════════════════
# Tagged Result
# ══════════════════════════════════════════════════════════════════════════


class FailureKind(str, Enum):
    """Why a flow answered with its fallback text instead of model output."""

    INVALID_INPUT = "invalid_input"    # short-circuited, backend never called
    BACKEND_ERROR = "backend_error"    # backend call raised
    INVALID_OUTPUT = "invalid_output"  # backend answered, output failed validation


OutputT = TypeVar("OutputT", bound=BaseModel)


class FlowResult(BaseModel, Generic[OutputT]):
    """
    Success or fallback outcome of a single flow invocation.

    `output` always holds a valid output shape. On failure it carries the
    flow's fixed fallback text and `failure` says which kind of failure
    produced it, so callers can either render the output or branch on it.
    """

    output: OutputT
    failure: Optional[FailureKind] = Field(
        default=None,
        description="Null on success; otherwise the failure classification",
    )

    @computed_field  # type: ignore[misc]
    @property
    def ok(self) -> bool:
        return self.failure is None


# ══════════════════════════════════════════════════════════════════════════
# Flow Inputs / Outputs
# ══════════════════════════════════════════════════════════════════════════


class TranscribeAudioInput(BaseModel):
    audio_data_uri: str = Field(
        description="Recording as 'data:<mimetype>;base64,<encoded_data>'"
    )


class TranscribeAudioOutput(BaseModel):
    transcription: str = Field(description="Transcript text (simulated stub)")


class SummarizeTranscriptionInput(BaseModel):
    transcription: str = Field(description="The transcription of the conversation")


class SummarizeTranscriptionOutput(BaseModel):
    summary: str = Field(description="Key points and action items of the conversation")


class IdentifyThemesInput(BaseModel):
    text_to_analyze: str = Field(description="Text to analyze, e.g. a summary or transcript")


class IdentifyThemesOutput(BaseModel):
    identified_themes_text: str = Field(
        description="Comma-separated list of at most 5 short theme phrases"
    )


class GenerateWhiteboardIdeasInput(BaseModel):
    """
    Inputs for refining the whiteboard.

    voice_prompt is the user's spoken/typed instruction; transcription is the
    full conversation when the refinement runs as part of an analysis cycle.
    At least one of the two must be non-blank.
    """

    voice_prompt: str = Field(default="", description="User instruction for the whiteboard")
    identified_themes: str = Field(default="", description="Themes identified from the summary")
    current_whiteboard_content: str = Field(default="", description="Existing whiteboard text")
    transcription: str = Field(default="", description="Full conversation transcript")


class GenerateWhiteboardIdeasOutput(BaseModel):
    refined_whiteboard_content: str


class GenerateImageInput(BaseModel):
    prompt: str = Field(
        description="Fully constructed image prompt, including style instructions"
    )


class GenerateImageOutput(BaseModel):
    image_data_uri: str = Field(
        description="Generated image as 'data:<mimetype>;base64,<encoded_data>', "
                    "or the skip message when the prompt was rejected"
    )


class GenerateInsightsInput(BaseModel):
    conversation_context: str = Field(description="Summary or transcript the insights build on")
    image_data_uri: str = Field(
        default="",
        description="Generated whiteboard image; anything but an image data URI is ignored",
    )


class GenerateInsightsOutput(BaseModel):
    insights_text: str


# ══════════════════════════════════════════════════════════════════════════
# Session Report
# ══════════════════════════════════════════════════════════════════════════


class CycleRecord(BaseModel):
    """One completed transcribe → ... → insights pass."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    transcription: str = ""
    summary: str = ""
    identified_themes: str = ""
    whiteboard_content: str = ""
    generated_image_data_uri: str = Field(
        default="",
        description="Image data URI, or the error/skip message of the image step",
    )
    new_insights: str = ""


class ProcessedCycle(CycleRecord):
    """CycleRecord as the report template sees it; recomputed on every call."""

    display_index: int = Field(description="1-based position in the session")
    processed_generated_image_status: str = Field(
        description="Human-readable classification of generated_image_data_uri"
    )


class SessionReportInput(BaseModel):
    session_cycles: List[CycleRecord] = Field(
        default_factory=list,
        description="All completed cycles, in order",
    )
    report_title: Optional[str] = None
    project_name: Optional[str] = None
    contact_persons: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    user_organization: Optional[str] = None


class ReportContext(BaseModel):
    """Report metadata with every optional field resolved to its display value."""

    report_title: str
    project_name: str
    contact_persons: str
    formatted_date: str


class SessionReportOutput(BaseModel):
    report_text: str = Field(description="Markdown-formatted session report")
