"""Tests for config loading, env overrides and validation."""

import json
import os
import pytest
from unittest.mock import patch

_SCOUT_ENV = (
    "SUPABASE_URL", "SUPABASE_SERVICE_KEY", "SUPABASE_KEY", "SUPABASE_TIMEOUT",
    "OPENAI_API_KEY", "OPENAI_API_BASE", "EMBEDDING_MODEL",
    "SCOUT_MATCH_FUNCTION", "SCOUT_TOPK", "SCOUT_THRESHOLD", "SCOUT_DETAIL_TIMEOUT_MS",
    "SCOUT_QUERY_ROW_LIMIT", "SCOUT_CACHE_SESSIONS",
    "MCP_SERVER_NAME", "MCP_TRANSPORT", "PORT", "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env():
    """Run each test without the developer's own settings leaking in."""
    saved = {k: os.environ.pop(k) for k in _SCOUT_ENV if k in os.environ}
    yield
    for k in _SCOUT_ENV:
        os.environ.pop(k, None)
    os.environ.update(saved)


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path):
        from scout.common.config import load_config

        with patch("scout.common.config.CONFIG_PATH", tmp_path / "missing.json"):
            cfg = load_config()

        assert cfg.search.match_function == "match_company_chunks"
        assert cfg.search.topk == 10
        assert cfg.search.threshold == 0.3
        assert cfg.search.detail_timeout_ms == 5000
        assert cfg.search.query_row_limit == 50
        assert cfg.embedding.model == "text-embedding-3-small"
        assert cfg.server.transport == "stdio"
        assert cfg.supabase.url == ""

    def test_load_from_file(self, tmp_path):
        from scout.common.config import load_config
        config_data = {
            "supabase": {"url": "https://file.supabase.co", "key": "file-key"},
            "embedding": {"model": "text-embedding-3-large"},
            "search": {"topk": 20, "threshold": 0.5, "cache_sessions": 4},
            "server": {"transport": "sse", "port": 8080},
        }
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps(config_data))

        with patch("scout.common.config.CONFIG_PATH", config_file):
            cfg = load_config()

        assert cfg.supabase.url == "https://file.supabase.co"
        assert cfg.supabase.service_key == "file-key"
        assert cfg.embedding.model == "text-embedding-3-large"
        assert cfg.search.topk == 20
        assert cfg.search.threshold == 0.5
        assert cfg.search.cache_sessions == 4
        assert cfg.server.transport == "sse"
        assert cfg.server.port == 8080

    def test_env_overrides_file(self, tmp_path):
        from scout.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"supabase": {"url": "https://file.supabase.co"}, "search": {"topk": 20}}))

        env = {
            "SUPABASE_URL": "https://env.supabase.co",
            "SUPABASE_SERVICE_KEY": "env-key",
            "OPENAI_API_KEY": "sk-env",
            "SCOUT_TOPK": "3",
            "SCOUT_DETAIL_TIMEOUT_MS": "250",
            "MCP_TRANSPORT": "SSE",
        }
        with patch("scout.common.config.CONFIG_PATH", config_file), \
             patch.dict(os.environ, env, clear=False):
            cfg = load_config()

        assert cfg.supabase.url == "https://env.supabase.co"
        assert cfg.supabase.service_key == "env-key"
        assert cfg.embedding.openai_api_key == "sk-env"
        assert cfg.search.topk == 3
        assert cfg.search.detail_timeout_ms == 250
        assert cfg.server.transport == "sse"

    def test_supabase_key_fallback(self, tmp_path):
        from scout.common.config import load_config

        with patch("scout.common.config.CONFIG_PATH", tmp_path / "missing.json"), \
             patch.dict(os.environ, {"SUPABASE_KEY": "legacy-key"}, clear=False):
            cfg = load_config()

        assert cfg.supabase.service_key == "legacy-key"

    def test_malformed_file_falls_back_to_defaults(self, tmp_path, caplog):
        import logging
        from scout.common.config import load_config
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        with patch("scout.common.config.CONFIG_PATH", config_file), \
             caplog.at_level(logging.WARNING, logger="scout.common.config"):
            cfg = load_config()

        assert cfg.search.topk == 10
        assert "Failed to load config file" in caplog.text


class TestValidateConfig:
    def test_valid(self):
        from scout.common.config import ScoutConfig, validate_config
        cfg = ScoutConfig()
        cfg.supabase.url = "https://xyz.supabase.co"
        cfg.supabase.service_key = "key"

        assert validate_config(cfg) == []

    def test_missing_everything(self):
        from scout.common.config import ScoutConfig, validate_config

        problems = validate_config(ScoutConfig())

        assert any("SUPABASE_URL" in p for p in problems)
        assert any("SUPABASE_SERVICE_KEY" in p for p in problems)

    def test_invalid_url(self):
        from scout.common.config import ScoutConfig, validate_config
        cfg = ScoutConfig()
        cfg.supabase.url = "xyz.supabase.co"
        cfg.supabase.service_key = "key"

        problems = validate_config(cfg)

        assert len(problems) == 1
        assert "not a valid URL" in problems[0]

    def test_missing_openai_key_is_not_fatal(self):
        from scout.common.config import ScoutConfig, validate_config
        cfg = ScoutConfig()
        cfg.supabase.url = "http://localhost:54321"
        cfg.supabase.service_key = "key"

        assert validate_config(cfg) == []
