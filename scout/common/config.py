"""
Configuration Management for Company Scout

Loads configuration from ~/.scout/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from typing import List
from urllib.parse import urlparse
from dataclasses import dataclass, field

logger = logging.getLogger("scout.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".scout"
CONFIG_PATH = CONFIG_DIR / "config.json"


@dataclass
class SupabaseConfig:
    """Supabase (PostgREST) connection"""
    url: str = ""
    service_key: str = ""
    timeout: float = 30.0  # seconds, per HTTP request


@dataclass
class EmbeddingConfig:
    """Query embedding configuration"""
    model: str = "text-embedding-3-small"
    openai_api_key: str = ""
    base_url: str = ""  # empty = OpenAI default


@dataclass
class SearchConfig:
    """Search and detail-fetch defaults"""
    match_function: str = "match_company_chunks"
    topk: int = 10
    threshold: float = 0.3
    detail_timeout_ms: int = 5000
    query_row_limit: int = 50
    cache_sessions: int = 128


@dataclass
class ServerConfig:
    """MCP server configuration"""
    name: str = "supabase-mcp-server"
    transport: str = "stdio"  # "stdio" or "sse"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"


@dataclass
class ScoutConfig:
    """Main Company Scout configuration"""
    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def _parse_supabase_config(data: dict) -> SupabaseConfig:
    """Parse supabase section from config dict"""
    supabase_data = data.get("supabase", {})
    return SupabaseConfig(
        url=supabase_data.get("url", ""),
        service_key=supabase_data.get("service_key") or supabase_data.get("key", ""),
        timeout=float(supabase_data.get("timeout", 30.0)),
    )


def _parse_embedding_config(data: dict) -> EmbeddingConfig:
    """Parse embedding section from config dict"""
    embedding_data = data.get("embedding", {})
    return EmbeddingConfig(
        model=embedding_data.get("model", "text-embedding-3-small"),
        openai_api_key=embedding_data.get("openai_api_key", ""),
        base_url=embedding_data.get("base_url", ""),
    )


def _parse_search_config(data: dict) -> SearchConfig:
    """Parse search section from config dict"""
    search_data = data.get("search", {})
    return SearchConfig(
        match_function=search_data.get("match_function", "match_company_chunks"),
        topk=int(search_data.get("topk", 10)),
        threshold=float(search_data.get("threshold", 0.3)),
        detail_timeout_ms=int(search_data.get("detail_timeout_ms", 5000)),
        query_row_limit=int(search_data.get("query_row_limit", 50)),
        cache_sessions=int(search_data.get("cache_sessions", 128)),
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server section from config dict"""
    server_data = data.get("server", {})
    return ServerConfig(
        name=server_data.get("name", "supabase-mcp-server"),
        transport=server_data.get("transport", "stdio"),
        host=server_data.get("host", "0.0.0.0"),
        port=int(server_data.get("port", 3000)),
        log_level=server_data.get("log_level", "INFO"),
    )


def load_config() -> ScoutConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.scout/config.json)
    3. Default values
    """
    config = ScoutConfig()

    # Load from config file if exists
    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.supabase = _parse_supabase_config(data)
            config.embedding = _parse_embedding_config(data)
            config.search = _parse_search_config(data)
            config.server = _parse_server_config(data)
        except (json.JSONDecodeError, IOError, TypeError, ValueError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    # Environment variable overrides
    if os.getenv("SUPABASE_URL"):
        config.supabase.url = os.getenv("SUPABASE_URL")
    service_key = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY")
    if service_key:
        config.supabase.service_key = service_key
    if os.getenv("SUPABASE_TIMEOUT"):
        config.supabase.timeout = float(os.getenv("SUPABASE_TIMEOUT"))

    if os.getenv("OPENAI_API_KEY"):
        config.embedding.openai_api_key = os.getenv("OPENAI_API_KEY")
    if os.getenv("OPENAI_API_BASE"):
        config.embedding.base_url = os.getenv("OPENAI_API_BASE")
    if os.getenv("EMBEDDING_MODEL"):
        config.embedding.model = os.getenv("EMBEDDING_MODEL")

    if os.getenv("SCOUT_MATCH_FUNCTION"):
        config.search.match_function = os.getenv("SCOUT_MATCH_FUNCTION")
    if os.getenv("SCOUT_TOPK"):
        config.search.topk = int(os.getenv("SCOUT_TOPK"))
    if os.getenv("SCOUT_THRESHOLD"):
        config.search.threshold = float(os.getenv("SCOUT_THRESHOLD"))
    if os.getenv("SCOUT_DETAIL_TIMEOUT_MS"):
        config.search.detail_timeout_ms = int(os.getenv("SCOUT_DETAIL_TIMEOUT_MS"))
    if os.getenv("SCOUT_QUERY_ROW_LIMIT"):
        config.search.query_row_limit = int(os.getenv("SCOUT_QUERY_ROW_LIMIT"))
    if os.getenv("SCOUT_CACHE_SESSIONS"):
        config.search.cache_sessions = int(os.getenv("SCOUT_CACHE_SESSIONS"))

    if os.getenv("MCP_SERVER_NAME"):
        config.server.name = os.getenv("MCP_SERVER_NAME")
    if os.getenv("MCP_TRANSPORT"):
        config.server.transport = os.getenv("MCP_TRANSPORT").lower()
    if os.getenv("PORT"):
        config.server.port = int(os.getenv("PORT"))
    if os.getenv("LOG_LEVEL"):
        config.server.log_level = os.getenv("LOG_LEVEL").upper()

    return config


def validate_config(config: ScoutConfig) -> List[str]:
    """
    Check the settings the server cannot start without.

    Returns:
        List of problems; empty when the configuration is usable.
    """
    problems = []

    parsed = urlparse(config.supabase.url)
    if not config.supabase.url:
        problems.append("SUPABASE_URL is not set")
    elif parsed.scheme not in ("http", "https") or not parsed.netloc:
        problems.append(f"SUPABASE_URL is not a valid URL: {config.supabase.url}")

    if not config.supabase.service_key:
        problems.append("SUPABASE_SERVICE_KEY is not set")

    logger.info("SUPABASE_URL defined: %s", bool(config.supabase.url))
    logger.info("SUPABASE_SERVICE_KEY defined: %s", bool(config.supabase.service_key))
    logger.info("OPENAI_API_KEY defined: %s", bool(config.embedding.openai_api_key))

    return problems
