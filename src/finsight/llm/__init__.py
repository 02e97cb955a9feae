"""Language-model clients."""
from .base import LanguageModel
from .gemini import GeminiClient

__all__ = ["LanguageModel", "GeminiClient"]
