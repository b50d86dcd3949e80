"""Text and vision generation provider port - OpenAI compatible API."""

from typing import Protocol

from doclib.application.dto.analysis_dto import ProviderSettings


class TextGenerator(Protocol):
    """Port for summaries and image descriptions. Raises DependencyUnavailable."""

    async def summarize(self, text: str, provider: ProviderSettings) -> str: ...

    async def describe_image(
        self,
        data: bytes,
        mime: str,
        provider: ProviderSettings,
        *,
        language: str,
        language_hint: str | None = None,
        strict: bool = False,
    ) -> str: ...
