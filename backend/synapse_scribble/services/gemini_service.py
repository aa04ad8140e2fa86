"""
Synapse Scribble Backend - Google Gemini Service Implementation
===============================================================

What:  Concrete LLM service backed by Google Gemini for text and images.
How:   Text prompts go through the google-generativeai GenerativeModel;
       image prompts go through the google-genai client with the combined
       TEXT + IMAGE response modalities. Both paths share one circuit breaker
       and the tenacity retry settings.
Who:   Instantiated once at import; called by every flow.

Resilience Strategy:
    1. Circuit breaker rejects calls instantly while Gemini keeps failing
    2. Tenacity retry wrapper (settings.retry_max_attempts, default 1 = no retry)
    3. Per-request timeout handed to the SDK
    4. Every call logs its duration and output size
"""

import logging
import time
import uuid
from typing import List, Optional, Sequence

import google.generativeai as genai
from google import genai as google_genai
from google.genai import types as genai_types
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential_jitter,
    retry_if_exception_type,
    before_sleep_log,
)

from synapse_scribble.config import settings
from synapse_scribble.data_uri import decode_data_uri, encode_data_uri
from synapse_scribble.exceptions import LLMServiceError, CircuitBreakerOpenError
from synapse_scribble.services.llm_base import LLMService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker Implementation
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Circuit breaker guarding every Gemini call.

    State Machine:
        CLOSED (normal operation)
            → On failure: increment failure_count
            → When failure_count >= threshold: transition to OPEN

        OPEN (rejecting all requests)
            → All calls raise CircuitBreakerOpenError immediately
            → After recovery_timeout seconds: transition to HALF_OPEN

        HALF_OPEN (testing recovery)
            → Allow ONE request through
            → On success: transition to CLOSED (reset failure_count)
            → On failure: transition back to OPEN (reset timer)

    Not thread-safe: uvicorn async workers share a single process and the
    counters are only touched from the event loop.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Check if a request is allowed through the circuit breaker.

        Returns:
            True if the request can proceed (CLOSED or HALF_OPEN after timeout).

        Raises:
            CircuitBreakerOpenError if circuit is OPEN and recovery timeout hasn't elapsed.
        """
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed >= self.recovery_timeout:
                logger.info(
                    "Circuit breaker transitioning to HALF_OPEN after %.1fs",
                    elapsed,
                )
                self.state = self.HALF_OPEN
                return True
            remaining = int(self.recovery_timeout - elapsed)
            raise CircuitBreakerOpenError(recovery_time=remaining)

        # HALF_OPEN: allow the test request through
        return True

    def record_success(self) -> None:
        """Record a successful API call. Resets the circuit breaker to CLOSED."""
        if self.state == self.HALF_OPEN:
            logger.info("Circuit breaker transitioning to CLOSED (service recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        """Record a failed API call. May trigger CLOSED → OPEN transition."""
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Circuit breaker returning to OPEN (test request failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Gemini Service
# ══════════════════════════════════════════════════════════════════════════

_gemini_retry = retry(
    retry=retry_if_exception_type(Exception),
    stop=stop_after_attempt(settings.retry_max_attempts),
    wait=wait_exponential_jitter(
        initial=settings.retry_min_wait,
        max=settings.retry_max_wait,
        jitter=1,
    ),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


class GeminiService(LLMService):
    """
    Google Gemini implementation of the LLM contract.

    Error Handling Chain:
        Circuit open → CircuitBreakerOpenError (no SDK call)
        SDK call fails → tenacity (retry_max_attempts) → record failure
        → LLMServiceError with the provider error in context["error"]
    """

    def __init__(self):
        # The legacy SDK keeps auth in module-level state
        if self._has_api_key():
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(settings.gemini_text_model)

        # Created on first image request; the google-genai client refuses
        # to construct without an API key
        self._image_client: Optional[google_genai.Client] = None

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

        logger.info(
            "GeminiService initialized with text_model=%s, image_model=%s, "
            "circuit_breaker(threshold=%d, recovery=%ds)",
            settings.gemini_text_model,
            settings.gemini_image_model,
            settings.cb_failure_threshold,
            settings.cb_recovery_timeout,
        )

    @staticmethod
    def _has_api_key() -> bool:
        return bool(settings.gemini_api_key) and settings.gemini_api_key != "your_gemini_api_key_here"

    def _get_image_client(self) -> google_genai.Client:
        if self._image_client is None:
            self._image_client = google_genai.Client(
                api_key=settings.gemini_api_key,
                http_options=genai_types.HttpOptions(
                    timeout=settings.gemini_request_timeout * 1000,
                ),
            )
        return self._image_client

    # ── Text ──────────────────────────────────────────────────────────────

    async def generate_text(
        self,
        prompt: str,
        image_data_uris: Optional[Sequence[str]] = None,
    ) -> str:
        """
        Send a rendered prompt (plus optional inline images) to the text model.

        Raises:
            CircuitBreakerOpenError: Circuit is open (too many recent failures)
            LLMServiceError: Gemini failed after the configured attempts
        """
        request_id = str(uuid.uuid4())[:8]
        self.circuit_breaker.can_execute()

        parts: List[object] = [prompt]
        for uri in image_data_uris or ():
            decoded = decode_data_uri(uri)
            parts.append({"mime_type": decoded.mime_type, "data": decoded.data})

        logger.info(
            "[%s] Starting Gemini text request (%d prompt chars, %d images)",
            request_id,
            len(prompt),
            len(parts) - 1,
        )

        try:
            result = await self._call_text_with_retry(parts, request_id)
            self.circuit_breaker.record_success()
            return result
        except Exception as e:
            self.circuit_breaker.record_failure()
            logger.error("[%s] Gemini text error: %s", request_id, str(e), exc_info=True)
            raise LLMServiceError(
                message="An unexpected error occurred during text generation.",
                context={"request_id": request_id, "error_type": type(e).__name__, "error": str(e)},
            )

    @_gemini_retry
    async def _call_text_with_retry(self, parts: List[object], request_id: str) -> str:
        start_time = time.time()
        try:
            response = await self.model.generate_content_async(
                parts,
                request_options={"timeout": settings.gemini_request_timeout},
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(
                "[%s] Gemini API call failed after %.0fms: %s",
                request_id,
                duration_ms,
                str(e),
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        try:
            text = response.text or ""
        except ValueError:
            # Blocked or empty candidates: .text refuses to build a string
            logger.warning("[%s] Gemini response carried no text parts", request_id)
            text = ""

        text = text.strip()
        logger.info(
            "[%s] Gemini text completed in %.0fms, produced %d chars",
            request_id,
            duration_ms,
            len(text),
        )
        return text

    # ── Image ─────────────────────────────────────────────────────────────

    async def generate_image(self, prompt: str) -> Optional[str]:
        """
        Ask the image model for an illustration and return it as a data URI.

        Returns None when the model answered with text only.
        """
        request_id = str(uuid.uuid4())[:8]
        self.circuit_breaker.can_execute()

        logger.info(
            "[%s] Starting Gemini image request with model=%s",
            request_id,
            settings.gemini_image_model,
        )

        try:
            result = await self._call_image_with_retry(prompt, request_id)
            self.circuit_breaker.record_success()
            return result
        except Exception as e:
            self.circuit_breaker.record_failure()
            logger.error("[%s] Gemini image error: %s", request_id, str(e), exc_info=True)
            raise LLMServiceError(
                message="An unexpected error occurred during image generation.",
                context={"request_id": request_id, "error_type": type(e).__name__, "error": str(e)},
            )

    @_gemini_retry
    async def _call_image_with_retry(self, prompt: str, request_id: str) -> Optional[str]:
        start_time = time.time()
        client = self._get_image_client()
        response = await client.aio.models.generate_content(
            model=settings.gemini_image_model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                response_modalities=["TEXT", "IMAGE"],
            ),
        )
        duration_ms = (time.time() - start_time) * 1000

        image_uri = extract_inline_image(response)
        logger.info(
            "[%s] Gemini image completed in %.0fms, image=%s",
            request_id,
            duration_ms,
            "yes" if image_uri else "no",
        )
        return image_uri

    async def health_check(self) -> bool:
        """
        Check if Gemini API is reachable.

        Lists available models (no token cost). Returns False on any error.
        """
        try:
            models = genai.list_models()
            model_names = [m.name for m in models]
            target = f"models/{settings.gemini_text_model}"
            if target not in model_names:
                logger.warning("Configured model %s not found in available models", target)
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False


def extract_inline_image(response) -> Optional[str]:
    """Return the first inline image of a google-genai response as a data URI."""
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                return encode_data_uri(inline.data, inline.mime_type or "image/png")
    return None


# ── Singleton Instance ────────────────────────────────────────────────────
# Holds the circuit breaker state shared by all requests
gemini_service = GeminiService()
