"""Tests for EmbeddingService."""

import logging
from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, Mock


class TestEmbeddingServiceInit:
    def test_missing_key_logs_info(self, caplog):
        from scout.common.embedding_service import EmbeddingService

        with caplog.at_level(logging.INFO, logger="scout.common.embedding_service"):
            service = EmbeddingService(api_key=None)

        assert not service.is_available
        assert "API key not provided" in caplog.text

    def test_with_key_is_available(self):
        from scout.common.embedding_service import EmbeddingService

        service = EmbeddingService(api_key="sk-test", model="text-embedding-3-large")

        assert service.is_available
        assert service.model == "text-embedding-3-large"


class TestEmbed:
    @pytest.fixture
    def service(self):
        from scout.common.embedding_service import EmbeddingService
        service = EmbeddingService(api_key="sk-test")
        client = Mock()
        client.embeddings.create = AsyncMock(return_value=SimpleNamespace(data=[
            SimpleNamespace(index=1, embedding=[0.4, 0.5]),
            SimpleNamespace(index=0, embedding=[0.1, 0.2]),
        ]))
        service._client = client
        return service

    @pytest.mark.asyncio
    async def test_embed_orders_by_index(self, service):
        vectors = await service.embed(["first", "second"])

        assert vectors == [[0.1, 0.2], [0.4, 0.5]]
        service._client.embeddings.create.assert_awaited_once_with(
            model="text-embedding-3-small", input=["first", "second"]
        )

    @pytest.mark.asyncio
    async def test_embed_single(self, service):
        assert await service.embed_single("fintech lending") == [0.1, 0.2]

    @pytest.mark.asyncio
    async def test_embed_empty_list(self, service):
        assert await service.embed([]) == []
        service._client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_single_rejects_blank(self, service):
        from scout.common.errors import EmbeddingError

        with pytest.raises(EmbeddingError, match="empty"):
            await service.embed_single("   ")

    @pytest.mark.asyncio
    async def test_provider_error_is_wrapped(self, service):
        from openai import OpenAIError
        from scout.common.errors import EmbeddingError

        service._client.embeddings.create.side_effect = OpenAIError("rate limit exceeded")

        with pytest.raises(EmbeddingError, match="rate limit exceeded"):
            await service.embed_single("q")

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        from scout.common.embedding_service import EmbeddingService
        from scout.common.errors import UnconfiguredError

        with pytest.raises(UnconfiguredError, match="OPENAI_API_KEY"):
            await EmbeddingService(api_key="").embed(["q"])

    @pytest.mark.asyncio
    async def test_unconfigured_wins_over_blank_text(self):
        from scout.common.embedding_service import EmbeddingService
        from scout.common.errors import UnconfiguredError

        with pytest.raises(UnconfiguredError):
            await EmbeddingService(api_key=None).embed_single("   ")
