"""Language-model interface used by the document pipeline."""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence


class LanguageModel(ABC):
    """Embedding and completion calls against a language-model provider."""

    @abstractmethod
    def embed(self, texts: Sequence[str], task_type: Optional[str] = None) -> List[List[float]]:
        """Return one embedding vector per input text, in order."""
        ...

    @abstractmethod
    def complete(
        self,
        system_instruction: str,
        prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 500
    ) -> str:
        """Return the completion text for a single prompt."""
        ...
