"""
Azure OpenAI Client Manager.
Provides the async Azure OpenAI client used by the administrator assistant,
authenticated with DefaultAzureCredential for managed identity support.
"""

import logging
from typing import Optional
from openai import AsyncAzureOpenAI
from azure.identity.aio import DefaultAzureCredential, get_bearer_token_provider

from config import settings

logger = logging.getLogger(__name__)

COGNITIVE_SERVICES_SCOPE = "https://cognitiveservices.azure.com/.default"


def normalize_endpoint(endpoint: str) -> str:
    """Strip a trailing ``/openai/v1`` path and trailing slashes from an endpoint URL."""
    endpoint = endpoint.strip()
    for suffix in ("/openai/v1/", "/openai/v1"):
        if endpoint.endswith(suffix):
            endpoint = endpoint[: -len(suffix)]
    return endpoint.rstrip("/")


class AzureOpenAIClientManager:
    """
    Lazily creates one AsyncAzureOpenAI client per process.
    Uses Azure DefaultAzureCredential for secure authentication with:
    - Managed Identity (Azure-hosted environments)
    - Azure CLI credentials (local development)
    - Environment variables
    """

    def __init__(self, endpoint: Optional[str] = None, api_version: Optional[str] = None):
        self._endpoint = endpoint
        self._api_version = api_version
        self._client: Optional[AsyncAzureOpenAI] = None
        self._credential: Optional[DefaultAzureCredential] = None

    @property
    def endpoint(self) -> str:
        return normalize_endpoint(self._endpoint if self._endpoint is not None else settings.azure_openai_endpoint)

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint)

    async def get_client(self) -> AsyncAzureOpenAI:
        """Get or create the AsyncAzureOpenAI client."""
        if not self.is_configured:
            raise RuntimeError("AZURE_OPENAI_ENDPOINT is not configured")

        if self._client is None:
            logger.info("Initializing AsyncAzureOpenAI client with DefaultAzureCredential...")

            self._credential = DefaultAzureCredential()
            token_provider = get_bearer_token_provider(self._credential, COGNITIVE_SERVICES_SCOPE)

            self._client = AsyncAzureOpenAI(
                azure_endpoint=self.endpoint,
                azure_ad_token_provider=token_provider,
                api_version=self._api_version or settings.azure_openai_api_version,
            )

            logger.info(f"AsyncAzureOpenAI client initialized: {self.endpoint}")

        return self._client

    async def close(self):
        """Close the client and its credential."""
        if self._client:
            await self._client.close()
            self._client = None
        if self._credential:
            await self._credential.close()
            self._credential = None


# Global client manager instance
client_manager = AzureOpenAIClientManager()
