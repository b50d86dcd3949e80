"""Analysis DTOs."""

from dataclasses import dataclass

from doclib.domain.entities import Analysis
from doclib.domain.value_objects import TouchedEvent


@dataclass
class ProviderSettings:
    """Credentials and model for one analysis request."""

    api_key: str
    base_url: str
    model: str
    vision_model: str | None = None

    @property
    def image_model(self) -> str:
        return self.vision_model or self.model


@dataclass
class AnalyzeInput:
    document_ids: list[str]
    provider: ProviderSettings | None = None
    language_hint: str | None = None
    summarize: bool | None = None  # None means use the configured flag


@dataclass
class AnalyzeItemResult:
    """Per-document outcome: ok, skipped (with reason) or error."""

    document_id: str
    status: str
    reason: str | None = None
    error: str | None = None
    kind: str | None = None
    analysis: Analysis | None = None


@dataclass
class AnalyzeOutput:
    items: list[AnalyzeItemResult]
    touched: list[TouchedEvent]
