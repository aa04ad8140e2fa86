"""
Synapse Scribble Backend - Abstract LLM Service Interface
=========================================================

What:  Abstract base class defining the contract for generative-AI backends.
How:   Concrete implementations inherit from LLMService and implement
       generate_text() and generate_image().
Who:   Called by every flow in synapse_scribble.flows.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence


class LLMService(ABC):
    """
    Abstract interface for text and image generation.

    Contract:
        - generate_text() returns the model's plain-text answer (stripped)
        - generate_image() returns a data URI, or None when the model
          answered without an image
        - Provider errors are wrapped in LLMServiceError
        - CircuitBreakerOpenError is raised without calling the provider

    Implementations:
        - GeminiService: Google Gemini (default)
    """

    @abstractmethod
    async def generate_text(
        self,
        prompt: str,
        image_data_uris: Optional[Sequence[str]] = None,
    ) -> str:
        """
        Generate a text answer for a fully rendered prompt.

        Args:
            prompt: Prompt string with every template field already filled.
            image_data_uris: Optional `data:image/...;base64,...` payloads
                sent as additional inline parts (multimodal prompts).

        Returns:
            The model answer with surrounding whitespace removed. May be
            empty; callers decide whether that counts as a failure.

        Raises:
            LLMServiceError: Provider call failed.
            CircuitBreakerOpenError: Too many recent failures.
        """
        ...

    @abstractmethod
    async def generate_image(self, prompt: str) -> Optional[str]:
        """
        Generate an illustration for the prompt.

        Returns:
            `data:<mime>;base64,<data>` for the first inline image, or None.

        Raises:
            LLMServiceError: Provider call failed.
            CircuitBreakerOpenError: Too many recent failures.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the provider is reachable and authenticated.

        Returns:
            True if the service is available, False otherwise.
            Must NOT raise exceptions.
        """
        ...
