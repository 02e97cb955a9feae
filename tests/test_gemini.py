"""Tests for the Gemini client wrapper."""
import unittest
from unittest import mock

import httpx
from google.genai import errors

from finsight.llm import GeminiClient
from finsight.utils.exceptions import ExternalServiceError, RetryableExternalServiceError


class TestGeminiClient(unittest.TestCase):
    """Test GeminiClient with the SDK client mocked out."""

    def setUp(self):
        """Set up test fixtures."""
        patcher = mock.patch("finsight.llm.gemini.genai.Client")
        self.sdk = patcher.start().return_value
        self.addCleanup(patcher.stop)
        self.client = GeminiClient("test-key", max_retries=3, initial_delay=0)

    def test_embed(self):
        """Test embeddings are returned as float lists."""
        self.sdk.models.embed_content.return_value = mock.Mock(embeddings=[
            mock.Mock(values=[0.1, 0.2]),
            mock.Mock(values=[0.3, 0.4]),
        ])

        vectors = self.client.embed(["a", "b"], task_type="RETRIEVAL_DOCUMENT")

        self.assertEqual(vectors, [[0.1, 0.2], [0.3, 0.4]])
        kwargs = self.sdk.models.embed_content.call_args.kwargs
        self.assertEqual(kwargs["model"], "gemini-embedding-001")
        self.assertEqual(kwargs["contents"], ["a", "b"])
        self.assertEqual(kwargs["config"].task_type, "RETRIEVAL_DOCUMENT")

    def test_embed_count_mismatch(self):
        """Test a short embedding response is an error."""
        self.sdk.models.embed_content.return_value = mock.Mock(embeddings=[mock.Mock(values=[0.1])])

        with self.assertRaises(ExternalServiceError):
            self.client.embed(["a", "b"])

    def test_embed_retries_connection_errors(self):
        """Test transient network errors are retried."""
        self.sdk.models.embed_content.side_effect = [
            httpx.ConnectError("connection refused"),
            mock.Mock(embeddings=[mock.Mock(values=[1.0])]),
        ]

        self.assertEqual(self.client.embed(["a"]), [[1.0]])
        self.assertEqual(self.sdk.models.embed_content.call_count, 2)

    def test_exhausted_retries_surface_as_service_error(self):
        """Test the final failure is a plain ExternalServiceError."""
        self.sdk.models.generate_content.side_effect = httpx.ReadTimeout("slow")

        with self.assertRaises(ExternalServiceError) as context:
            self.client.complete("system", "prompt")
        self.assertNotIsInstance(context.exception, RetryableExternalServiceError)
        self.assertEqual(self.sdk.models.generate_content.call_count, 3)

    def test_server_error_is_retried(self):
        """Test SDK server errors are retried before succeeding."""
        self.sdk.models.generate_content.side_effect = [
            errors.ServerError(503, {"error": {"message": "unavailable"}}),
            mock.Mock(text="Recovered."),
        ]

        self.assertEqual(self.client.complete("system", "prompt"), "Recovered.")
        self.assertEqual(self.sdk.models.generate_content.call_count, 2)

    def test_complete(self):
        """Test completion settings are passed through."""
        self.sdk.models.generate_content.return_value = mock.Mock(text="The answer.")

        answer = self.client.complete("Answer from context", "QUESTION", temperature=0.0, max_tokens=500)

        self.assertEqual(answer, "The answer.")
        kwargs = self.sdk.models.generate_content.call_args.kwargs
        self.assertEqual(kwargs["model"], "gemini-2.5-flash-lite")
        self.assertEqual(kwargs["config"].temperature, 0.0)
        self.assertEqual(kwargs["config"].max_output_tokens, 500)
        self.assertEqual(kwargs["config"].system_instruction, "Answer from context")

    def test_wrap_status_codes(self):
        """Test rate limits and server errors are retryable."""
        self.assertIsInstance(GeminiClient._wrap(mock.Mock(code=429)), RetryableExternalServiceError)
        self.assertIsInstance(GeminiClient._wrap(mock.Mock(code=503)), RetryableExternalServiceError)
        wrapped = GeminiClient._wrap(mock.Mock(code=400))
        self.assertIsInstance(wrapped, ExternalServiceError)
        self.assertNotIsInstance(wrapped, RetryableExternalServiceError)


if __name__ == "__main__":
    unittest.main()
