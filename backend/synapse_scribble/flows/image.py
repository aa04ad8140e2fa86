"""
Image-generation flow: text prompt → embedded image.

Unlike the text flows, a backend that produces no image is an error the
caller must handle: ImageGenerationError is raised instead of returning a
fallback. Only a prompt rejected before the call yields a fallback result.
"""

import logging

from synapse_scribble.exceptions import (
    CircuitBreakerOpenError,
    ImageGenerationError,
    LLMServiceError,
)
from synapse_scribble.flows import messages
from synapse_scribble.flows.prompts import render_image_prompt
from synapse_scribble.schemas.flows import (
    FailureKind,
    FlowResult,
    GenerateImageInput,
    GenerateImageOutput,
)
from synapse_scribble.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

Result = FlowResult[GenerateImageOutput]

_REGION_BLOCK_MARKER = "Image generation is not available in your country"


def is_valid_image_prompt(prompt: str) -> bool:
    return bool(prompt.strip()) and not any(m in prompt for m in messages.INVALID_PROMPT_MARKERS)


def build_image_prompt(themes: str, context: str = "") -> str:
    """
    Styled whiteboard-sketch prompt for a cycle.

    The concepts are the themes, else the first 150 characters of the
    context, else a generic "abstract visualisation" concept.
    """
    concepts = themes.strip() or context[:150].strip() or messages.IMAGE_DEFAULT_CONCEPT
    return render_image_prompt(concepts)


async def generate_image(payload: GenerateImageInput) -> Result:
    """
    Generate an illustration for a fully constructed prompt.

    Raises:
        ImageGenerationError: The model returned no image, image generation
            is blocked in the caller's region, or the backend call failed.
        CircuitBreakerOpenError: Gemini has been failing repeatedly.
    """
    if not is_valid_image_prompt(payload.prompt):
        logger.warning(
            "generate_image: invalid or insufficient prompt %r, skipping image generation",
            payload.prompt[:200],
        )
        return Result(
            output=GenerateImageOutput(image_data_uri=messages.IMAGE_SKIPPED),
            failure=FailureKind.INVALID_INPUT,
        )

    try:
        image_data_uri = await gemini_service.generate_image(payload.prompt)
    except CircuitBreakerOpenError:
        raise
    except LLMServiceError as e:
        error = str(e.context.get("error", e.message))
        if _REGION_BLOCK_MARKER in error:
            logger.warning("generate_image: %s (original error: %s)", messages.IMAGE_REGION_UNAVAILABLE, error)
            raise ImageGenerationError(
                message=messages.IMAGE_REGION_UNAVAILABLE,
                context={"error": error},
            ) from e
        logger.error("generate_image: backend call failed: %s", error)
        raise ImageGenerationError(
            message=f"{messages.IMAGE_FAILED_PREFIX}: {error}",
            context=e.context,
        ) from e

    if not image_data_uri:
        logger.error("generate_image: backend returned no image")
        raise ImageGenerationError(message=messages.IMAGE_NO_IMAGE)

    return Result(output=GenerateImageOutput(image_data_uri=image_data_uri))
