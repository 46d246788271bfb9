# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Explainer OpenAI implementation."""

import logging
from urllib.parse import urlparse

from openai import OpenAI, OpenAIError

from dtcref.explainer import EXPLAIN_INSTRUCTIONS, ExplanationError, build_prompt
from dtcref.model import CodeRecord

logger = logging.getLogger(__name__)

OPENAI_DEFAULT_MODEL: str = "gpt-4.1-mini"
OPENAI_DEFAULT_BASE_URL: str = "https://api.openai.com/v1"

_OPENAI_HOSTS: frozenset[str] = frozenset(
    {"openai", "openai.com", "www.openai.com", "api.openai.com"}
)


class OpenAIExplainer:
    """Explain codes using OpenAI's Responses API."""

    def __init__(
        self,
        provider_url: str = OPENAI_DEFAULT_BASE_URL,
        model: str = OPENAI_DEFAULT_MODEL,
    ) -> None:
        """Initialize client configuration.

        The SDK client is created on first use so that a missing API key
        only fails the ``explain`` call.

        Args:
            provider_url: OpenAI-compatible endpoint base URL or alias.
            model: Model identifier used for generation.
        """
        self._provider_url = provider_url
        self._model = model
        self._client: OpenAI | None = None

    def explain(self, record: CodeRecord) -> str:
        """Generate an explanation with the OpenAI Responses API.

        Args:
            record: Record to explain.

        Returns:
            Explanation text.

        Raises:
            ExplanationError: If the request fails or response has no content.
        """
        client = self._get_client()
        try:
            response = client.responses.create(
                model=self._model,
                instructions=EXPLAIN_INSTRUCTIONS,
                input=build_prompt(record),
            )
        except (OpenAIError, AttributeError, OSError, ValueError) as exc:
            logger.warning(
                f"OpenAI request failed (provider_url={self._provider_url} "
                f"model={self._model} code={record.code} error={exc})"
            )
            raise ExplanationError(str(exc)) from exc

        output_text = getattr(response, "output_text", None)
        content = output_text.strip() if isinstance(output_text, str) else ""
        if not content:
            logger.warning(
                f"OpenAI response did not contain explanation content "
                f"(provider_url={self._provider_url} model={self._model} response={response!r})"
            )
            raise ExplanationError("OpenAI response does not contain generation content.")
        return content

    def _get_client(self) -> OpenAI:
        """Get or initialize the OpenAI SDK client.

        Raises:
            ExplanationError: If client initialization fails.
        """
        if self._client is not None:
            return self._client
        try:
            self._client = OpenAI(base_url=normalize_provider_url(self._provider_url))
        except (OpenAIError, OSError, ValueError) as exc:
            logger.warning(
                f"OpenAI client initialization failed (provider_url={self._provider_url} "
                f"error={exc})"
            )
            raise ExplanationError(str(exc)) from exc
        return self._client


def normalize_provider_url(provider_url: str) -> str:
    """Normalize an OpenAI provider URL or host alias to a base URL.

    Args:
        provider_url: User-provided URL, bare host, or ``openai`` alias.

    Returns:
        Base URL suitable for the OpenAI client.

    Raises:
        ValueError: If the value is empty or has no host.
    """
    raw = provider_url.strip()
    if not raw:
        raise ValueError("Invalid OpenAI provider URL: value is empty.")
    if raw.lower().rstrip("/") in _OPENAI_HOSTS:
        return OPENAI_DEFAULT_BASE_URL

    candidate = raw if "://" in raw else f"https://{raw}"
    parsed = urlparse(candidate)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(
            f"Invalid OpenAI provider URL: expected host URL, got '{provider_url}'."
        )
    if parsed.netloc.lower() in _OPENAI_HOSTS:
        return OPENAI_DEFAULT_BASE_URL
    return candidate.rstrip("/")
