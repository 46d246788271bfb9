# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Explainer backed by a local Ollama server."""

import logging
from collections.abc import Mapping

import ollama

from dtcref.explainer import EXPLAIN_INSTRUCTIONS, ExplanationError, build_prompt
from dtcref.model import CodeRecord

logger = logging.getLogger(__name__)

OLLAMA_DEFAULT_URL: str = "http://localhost:11434"
OLLAMA_DEFAULT_MODEL: str = "llama3.1:8b"


class OllamaExplainer:
    """Explain codes through the Ollama chat endpoint."""

    def __init__(
        self,
        provider_url: str = OLLAMA_DEFAULT_URL,
        model: str = OLLAMA_DEFAULT_MODEL,
    ) -> None:
        """Store connection settings; the client is created on first use.

        Args:
            provider_url: Ollama server base URL.
            model: Model tag to chat with.
        """
        self._provider_url = provider_url
        self._model = model
        self._client: ollama.Client | None = None

    def explain(self, record: CodeRecord) -> str:
        """Ask the model to explain ``record`` in plain language.

        Raises:
            ExplanationError: If the client cannot be created, the request
                fails, or the reply carries no message text.
        """
        client = self._get_client()
        messages = [
            {"role": "system", "content": EXPLAIN_INSTRUCTIONS},
            {"role": "user", "content": build_prompt(record)},
        ]
        try:
            response = client.chat(model=self._model, messages=messages)
        except (ollama.RequestError, ollama.ResponseError, OSError, ValueError) as exc:
            logger.warning(
                f"Ollama chat failed (provider_url={self._provider_url} "
                f"model={self._model} code={record.code} error={exc})"
            )
            raise ExplanationError(str(exc)) from exc

        message = _field(response, "message")
        content = _field(message, "content")
        text = content.strip() if isinstance(content, str) else ""
        if not text:
            logger.warning(
                f"Ollama reply had no message text "
                f"(model={self._model} code={record.code})"
            )
            raise ExplanationError(f"Ollama returned no explanation for {record.code}.")
        return text

    def _get_client(self) -> ollama.Client:
        if self._client is None:
            try:
                self._client = ollama.Client(host=self._provider_url)
            except (TypeError, ValueError, OSError) as exc:
                logger.warning(
                    f"Ollama client setup failed (provider_url={self._provider_url} "
                    f"error={exc})"
                )
                raise ExplanationError(str(exc)) from exc
        return self._client


def _field(value: object, name: str) -> object:
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)
