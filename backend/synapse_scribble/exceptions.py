"""
Synapse Scribble Backend - Custom Exception Hierarchy
=====================================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, flows and middleware; caught by global handlers.

Exception Hierarchy:
    ScribbleError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found (unknown session/cycle)
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── ImageGenerationError     → 502 Bad Gateway (model returned no image)
    ├── LLMServiceError          → 503 Service Unavailable (retry later)
    └── CircuitBreakerOpenError  → 503 Service Unavailable (circuit open)

Expected failures inside a flow (empty input, model error) do NOT use this
hierarchy: flows return a FlowResult carrying a fallback text. These
exceptions cover the cases that must reach the HTTP caller.
"""

from typing import Any, Dict, Optional


class ScribbleError(Exception):
    """
    Base exception for all Synapse Scribble application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client
                  unless the handler chooses to)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ScribbleError):
    """
    Raised when client input fails a business rule.

    When:    Blank transcript for analysis, cycle cap reached, whiteboard
             refinement requested without a summary or voice prompt.
    HTTP:    400 Bad Request

    FastAPI already answers schema violations with 422; this covers the
    rules pydantic cannot express.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(ScribbleError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown session ID, or a cycle number outside the session.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class LLMServiceError(ScribbleError):
    """
    Raised when the Gemini backend call fails.

    What:    Gemini returned an error or timed out after the configured attempts.
    HTTP:    503 Service Unavailable

    Text flows catch this and return their fallback; it only reaches the
    client through image generation or the health probe.
    """

    def __init__(
        self,
        message: str = "AI service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class CircuitBreakerOpenError(ScribbleError):
    """
    Raised when the circuit breaker is in OPEN state.

    When:    After cb_failure_threshold consecutive Gemini failures.
    HTTP:    503 Service Unavailable

    State cycle:
        CLOSED → (threshold failures) → OPEN → (recovery timeout)
        → HALF_OPEN → success: CLOSED / failure: OPEN
    """

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"AI service is temporarily unavailable due to repeated failures. "
            f"The service will automatically retry in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time


class ImageGenerationError(ScribbleError):
    """
    Raised by the image flow when no image could be produced.

    When:    The image model answered without an inline image, the region
             does not allow image generation, or the backend call failed.
    HTTP:    502 Bad Gateway

    The message is already user-facing Danish text; the session layer
    stores it on the cycle so the report can classify it.
    """

    def __init__(
        self,
        message: str = "Billedgenerering fejlede eller returnerede ikke et gyldigt billede.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ScribbleError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
