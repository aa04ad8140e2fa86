"""
Shared plumbing for flows that wrap a single text-model call.

Each flow owns its input checks and fallback texts; this module owns the
part they all share: calling the backend, logging the failure, and telling
the flow whether it got usable text back.
"""

import logging
from typing import Optional, Sequence

from synapse_scribble.exceptions import ScribbleError
from synapse_scribble.services.llm_base import LLMService

logger = logging.getLogger(__name__)


async def call_text_model(
    llm: LLMService,
    flow_name: str,
    prompt: str,
    image_data_uris: Optional[Sequence[str]] = None,
) -> Optional[str]:
    """
    Run one text generation and swallow backend failures.

    Returns:
        The stripped model answer (possibly ""), or None when the backend
        call raised. The failure is logged here so flows only map None to
        their backend-error fallback.
    """
    try:
        return (await llm.generate_text(prompt, image_data_uris=image_data_uris)).strip()
    except ScribbleError as e:
        logger.error("%s: backend call failed: %s | context=%s", flow_name, e.message, e.context)
        return None
    except Exception as e:
        logger.error("%s: unexpected backend error: %s", flow_name, str(e), exc_info=True)
        return None
