"""Analysis API resource."""

import falcon.asgi

from doclib.application.dto.analysis_dto import AnalyzeInput, ProviderSettings
from doclib.application.use_cases.analysis.analyze_documents import AnalyzeDocumentsUseCase
from doclib.domain.exceptions import DocLibError, ValidationError
from doclib.interfaces.api.errors import as_bool, optional_str, read_json_body, set_error
from doclib.interfaces.api.serializers import analyze_item_to_dict, touched_to_list


def _provider_from_body(body: dict, default: ProviderSettings | None) -> ProviderSettings | None:
    """Per-request credentials override the configured provider field by field."""
    api_key = optional_str(body, "api_key")
    base_url = optional_str(body, "base_url")
    model = optional_str(body, "model")
    if api_key is None and base_url is None and model is None:
        return None
    return ProviderSettings(
        api_key=api_key or (default.api_key if default else ""),
        base_url=base_url or (default.base_url if default else ""),
        model=model or (default.model if default else ""),
        vision_model=None if model else (default.vision_model if default else None),
    )


class AnalyzeResource:
    """POST /v1/library/analyze - summaries for text, descriptions for images."""

    def __init__(
        self,
        analyze_documents: AnalyzeDocumentsUseCase,
        default_provider: ProviderSettings | None = None,
    ) -> None:
        self._analyze_documents = analyze_documents
        self._default_provider = default_provider

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await read_json_body(req)
            document_ids = body.get("document_ids")
            if not isinstance(document_ids, list) or not document_ids:
                raise ValidationError("document_ids must be a non-empty list")
            summarize = as_bool(body, "summarize") if "summarize" in body else None
            result = await self._analyze_documents.execute(
                AnalyzeInput(
                    document_ids=[str(i) for i in document_ids],
                    provider=_provider_from_body(body, self._default_provider),
                    language_hint=optional_str(body, "language_hint"),
                    summarize=summarize,
                )
            )
        except DocLibError as e:
            set_error(resp, e)
            return
        resp.media = {
            "items": [analyze_item_to_dict(i) for i in result.items],
            "touched": touched_to_list(result.touched),
        }
        resp.status = falcon.HTTP_200
