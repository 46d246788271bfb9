# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Explainer implementations for the code reference tool."""

from dtcref.explainers.ollama import (
    OLLAMA_DEFAULT_MODEL,
    OLLAMA_DEFAULT_URL,
    OllamaExplainer,
)
from dtcref.explainers.openai_client import (
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
    OpenAIExplainer,
)

__all__ = [
    "OLLAMA_DEFAULT_MODEL",
    "OLLAMA_DEFAULT_URL",
    "OPENAI_DEFAULT_BASE_URL",
    "OPENAI_DEFAULT_MODEL",
    "OllamaExplainer",
    "OpenAIExplainer",
]
