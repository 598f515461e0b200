# src/llm/models.py — v2
"""LLM-specific types: ImageInput, ProviderError."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProviderError(RuntimeError):
    """Provider returned an empty or malformed response."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ImageInput(BaseModel):
    """Image payload for vision-enabled completions."""

    data: bytes = Field(repr=False)
    media_type: str = "image/png"
    file_name: str = ""


def build_user_text(prompt_template: str, title: str) -> str:
    """Text part of the single user message sent with the page images."""
    return f"{prompt_template}\nTitle: {title}"
