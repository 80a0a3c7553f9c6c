import base64
from collections.abc import Callable
from typing import Any

import httpx
import openai

from fitscore.analysis.client_base import BaseInferenceClient
from fitscore.analysis.exceptions import AnalysisError, AnalysisNetworkError

BlobReader = Callable[[str], bytes]


class OpenAIClientAdapter(BaseInferenceClient):
    """Inference client adapter built on the OpenAI-compatible chat API.

    The stored document travels as a multimodal content part: images as
    ``image_url`` parts, everything else (PDF reports) as ``file`` parts.
    Local references are inlined as base64 data URLs read through
    ``blob_reader``; remote http(s) image references are passed as-is.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: float,
        base_url: str | None = None,
        temperature: float = 0.0,
        blob_reader: BlobReader | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._blob_reader = blob_reader

    def infer(self, reference: str, mime_type: str, instruction: str) -> str:
        document_part = self._build_document_part(reference, mime_type)
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=self._temperature,
                response_format={"type": "json_object"},
                messages=[
                    {
                        "role": "user",
                        "content": [
                            document_part,
                            {"type": "text", "text": instruction},
                        ],
                    }
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise AnalysisNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise AnalysisNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise AnalysisError("AI returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise AnalysisError("AI returned empty response")
        return content

    def _build_document_part(self, reference: str, mime_type: str) -> dict[str, Any]:
        is_remote = reference.startswith(("http://", "https://"))
        if mime_type.startswith("image/"):
            url = reference if is_remote else self._data_url(reference, mime_type)
            return {"type": "image_url", "image_url": {"url": url}}
        return {
            "type": "file",
            "file": {
                "filename": reference.rsplit("/", 1)[-1],
                "file_data": self._data_url(reference, mime_type),
            },
        }

    def _data_url(self, reference: str, mime_type: str) -> str:
        if self._blob_reader is None:
            raise AnalysisError(f"No blob reader configured to resolve {reference}")
        try:
            data = self._blob_reader(reference)
        except OSError as exc:
            raise AnalysisError(f"Failed to read stored document {reference}: {exc}") from exc
        encoded = base64.b64encode(data).decode("ascii")
        return f"data:{mime_type};base64,{encoded}"
