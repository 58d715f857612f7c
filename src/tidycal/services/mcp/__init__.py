"""MCP tool server for Tidy Calendar."""

from .server import run_mcp_server, server

__all__ = ["run_mcp_server", "server"]
