"""
Company Scout MCP Server

Exposes company search, company details, cached results and read-only
SQL as MCP tools, plus the database schema as MCP resources.
"""

from .server import MCPServerApp, build_app, main

__all__ = [
    "MCPServerApp",
    "build_app",
    "main",
]
