import os

from langchain_aws import ChatBedrock
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from gomjabbar.core.config import (
    AWS_REGION,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    GENERATION_TIMEOUT,
    VLLM_URL,
)
from gomjabbar.core.exceptions import ConfigurationError
from gomjabbar.eval.registry import ModelHandle
from .capability import ChatModelCapability

SUPPORTED_PROVIDERS = ("openai", "bedrock", "gemini", "local")


class LLMFactory:
    """
    Builds model handles for a single provider.

    Client-side retries are disabled: a failed generation is a result to
    record, not something to paper over.
    """

    def __init__(self, provider: str = "openai"):
        if provider not in SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"Unsupported provider: {provider}. Supported: {', '.join(SUPPORTED_PROVIDERS)}"
            )
        self._provider = provider

    @property
    def provider(self) -> str:
        return self._provider

    # Clients
    @staticmethod
    def _get_bedrock_client():
        import boto3
        from botocore.config import Config

        config = Config(
            read_timeout=GENERATION_TIMEOUT or 60,
            retries={"max_attempts": 1},
        )
        return boto3.client(
            "bedrock-runtime",
            region_name=AWS_REGION,
            config=config,
        )

    def _chat_model(self, model_id: str, temperature: float, max_tokens: int):
        if self._provider == "openai":
            return ChatOpenAI(
                model=model_id,
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=GENERATION_TIMEOUT,
                max_retries=0,
            )

        if self._provider == "local":
            return ChatOpenAI(
                model=model_id,
                base_url=VLLM_URL,
                api_key="not-needed",
                temperature=temperature,
                max_tokens=max_tokens,
                timeout=GENERATION_TIMEOUT,
                max_retries=0,
            )

        if self._provider == "bedrock":
            return ChatBedrock(
                model_id=model_id,
                region_name=AWS_REGION,
                client=self._get_bedrock_client(),
                model_kwargs={
                    "temperature": temperature,
                    "max_tokens": max_tokens,
                },
            )

        # gemini
        return ChatGoogleGenerativeAI(
            model=model_id,
            api_key=os.getenv("GEMINI_API_KEY"),
            temperature=temperature,
            max_output_tokens=max_tokens,
            timeout=GENERATION_TIMEOUT,
            max_retries=0,
        )

    # Public API
    def create(
        self,
        identifier: str,
        model_id: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> ModelHandle:
        """Create a handle named `identifier`; `model_id` defaults to the identifier."""
        chat_model = self._chat_model(model_id or identifier, temperature, max_tokens)
        return ModelHandle(
            identifier=identifier,
            provider=self._provider,
            capability=ChatModelCapability(chat_model),
        )
