"""Gemini client using the google-genai SDK."""
from typing import List, Optional, Sequence

import httpx
from google import genai
from google.genai import errors, types

from .base import LanguageModel
from finsight.utils.exceptions import ExternalServiceError, RetryableExternalServiceError
from finsight.utils.logger import get_logger
from finsight.utils.retry import retry_with_backoff

logger = get_logger()


class GeminiClient(LanguageModel):
    """Embeds text and answers prompts with Gemini models."""

    def __init__(
        self,
        api_key: str,
        embedding_model: str = "gemini-embedding-001",
        completion_model: str = "gemini-2.5-flash-lite",
        max_retries: int = 3,
        initial_delay: float = 1.0,
        backoff_factor: float = 2.0
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Google AI API key
            embedding_model: Model id for embeddings
            completion_model: Model id for answers
            max_retries: Attempts per call for transient failures
            initial_delay: Seconds before the first retry
            backoff_factor: Multiplier between retries
        """
        self.client = genai.Client(api_key=api_key)
        self.embedding_model = embedding_model
        self.completion_model = completion_model

        retry = retry_with_backoff(
            max_retries=max_retries,
            initial_delay=initial_delay,
            backoff_factor=backoff_factor
        )
        self._embed = retry(self._embed_once)
        self._complete = retry(self._complete_once)

        logger.info(f"Gemini client initialized with {embedding_model} and {completion_model}")

    def embed(self, texts: Sequence[str], task_type: Optional[str] = None) -> List[List[float]]:
        try:
            return self._embed(list(texts), task_type)
        except RetryableExternalServiceError as e:
            raise ExternalServiceError(f"Embedding request failed: {e}")

    def complete(
        self,
        system_instruction: str,
        prompt: str,
        temperature: float = 0.0,
        max_tokens: int = 500
    ) -> str:
        try:
            return self._complete(system_instruction, prompt, temperature, max_tokens)
        except RetryableExternalServiceError as e:
            raise ExternalServiceError(f"Completion request failed: {e}")

    def _embed_once(self, texts: List[str], task_type: Optional[str]) -> List[List[float]]:
        config = types.EmbedContentConfig(task_type=task_type) if task_type else None
        try:
            response = self.client.models.embed_content(
                model=self.embedding_model,
                contents=texts,
                config=config
            )
        except errors.APIError as e:
            raise self._wrap(e)
        except (httpx.TransportError, ConnectionError, TimeoutError) as e:
            raise RetryableExternalServiceError(str(e))

        embeddings = response.embeddings or []
        if len(embeddings) != len(texts):
            raise ExternalServiceError(
                f"Embedding response has {len(embeddings)} vectors for {len(texts)} inputs"
            )
        return [list(embedding.values) for embedding in embeddings]

    def _complete_once(self, system_instruction: str, prompt: str, temperature: float, max_tokens: int) -> str:
        try:
            response = self.client.models.generate_content(
                model=self.completion_model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    temperature=temperature,
                    max_output_tokens=max_tokens
                )
            )
        except errors.APIError as e:
            raise self._wrap(e)
        except (httpx.TransportError, ConnectionError, TimeoutError) as e:
            raise RetryableExternalServiceError(str(e))

        if not response.text:
            raise ExternalServiceError("Language model returned an empty answer")
        return response.text

    @staticmethod
    def _wrap(error: errors.APIError) -> ExternalServiceError:
        """Rate limits and server errors are retryable; other API errors are not."""
        code = getattr(error, "code", None) or 0
        if code == 429 or code >= 500:
            return RetryableExternalServiceError(f"Gemini API error {code}: {error}")
        return ExternalServiceError(f"Gemini API error {code}: {error}")
