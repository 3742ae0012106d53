"""Model and translation collaborators."""

from .gemini_client import GeminiClient, ModelClient, ModelError, ModelResponse, Translator

__all__ = [
    "GeminiClient",
    "ModelClient",
    "ModelError",
    "ModelResponse",
    "Translator",
]
