"""
Embedding Service

Turns query text into a vector with the OpenAI embeddings API.
The chunk embeddings in Supabase must come from the same model.
"""

import logging
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError

from .errors import EmbeddingError, UnconfiguredError

logger = logging.getLogger("scout.common.embedding_service")


class EmbeddingService:
    """
    Query embedding service.

    Built once at startup and shared by every search call. Without an
    API key the service is unavailable and search reports it as
    unconfigured.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "text-embedding-3-small",
        base_url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize embedding service.

        Args:
            api_key: OpenAI API key
            model: Embedding model name
            base_url: Optional OpenAI-compatible endpoint
            timeout: Request timeout in seconds
        """
        self._model = model
        self._client: Optional[AsyncOpenAI] = None

        if not api_key:
            logger.info("OpenAI API key not provided, embedding service unavailable")
            return

        # Retries are left to the caller
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url or None,
            timeout=timeout,
            max_retries=0,
        )
        logger.info("Embedding service initialized with model=%s", model)

    @property
    def is_available(self) -> bool:
        """Check if embedding service is available"""
        return self._client is not None

    @property
    def model(self) -> str:
        return self._model

    async def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of strings to embed

        Returns:
            One embedding vector per text, in input order

        Raises:
            UnconfiguredError: If no API key was configured
            EmbeddingError: If the provider call fails
        """
        if not self.is_available:
            raise UnconfiguredError(
                "OpenAI client not initialized. Please provide OPENAI_API_KEY in environment."
            )

        if not texts:
            return []

        try:
            response = await self._client.embeddings.create(model=self._model, input=texts)
        except OpenAIError as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        data = sorted(response.data, key=lambda d: d.index)
        return [list(d.embedding) for d in data]

    async def embed_single(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: String to embed

        Returns:
            Embedding vector
        """
        if not self.is_available:
            raise UnconfiguredError(
                "OpenAI client not initialized. Please provide OPENAI_API_KEY in environment."
            )
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")

        embeddings = await self.embed([text])
        if not embeddings:
            raise EmbeddingError("Embedding provider returned no vector")
        return embeddings[0]

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
