from typing import ClassVar

from fitscore.analysis.client_base import BaseInferenceClient
from fitscore.analysis.example_client_adapter import ExampleClientAdapter
from fitscore.analysis.openai_client_adapter import BlobReader, OpenAIClientAdapter
from fitscore.config.settings import Settings


class InferenceClientFactory:
    """Creates the configured inference client adapter."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(
        cls,
        settings: Settings,
        blob_reader: BlobReader | None = None,
    ) -> BaseInferenceClient:
        """Create a configured inference client from application settings."""
        provider = settings.inference_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=settings.inference_api_key,
            model=settings.inference_model_name,
            timeout_seconds=settings.inference_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
            temperature=settings.inference_temperature,
            blob_reader=blob_reader,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        configured = settings.inference_base_url.strip()
        if provider == "openai":
            return configured or None
        if provider == "openai_compatible":
            if not configured:
                raise ValueError(
                    "inference_base_url is required for "
                    "inference_provider=openai_compatible"
                )
            return configured
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return configured or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown inference provider '{provider}'. Choose from: {supported}"
        )
