from __future__ import annotations

import logging
from typing import Optional

from fastmcp import FastMCP

from ...api import get_api_functions
from ...bootstrap import configure_logging
from ...config import get_settings

INSTRUCTIONS = (
    "Tidy Calendar MCP server exposes deterministic tools over a single iCalendar file. "
    "Use them to summarize, create, move, resize, delete, space out and rebalance events, "
    "or to apply a whole planner action list in one call."
)

configure_logging()
logger = logging.getLogger(__name__)

server = FastMCP(name="tidycal", instructions=INSTRUCTIONS)

# Dynamically register all API functions as MCP tools.
for api_function in get_api_functions():
    logger.debug("Registering MCP tool: %s", api_function.name)
    server.tool(
        api_function.func,
        name=api_function.name,
        description=api_function.description,
        tags=set(api_function.tags),
    )


def run_mcp_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    import asyncio

    settings = get_settings().server
    asyncio.run(server.run_streamable_http_async(host=host or settings.host, port=port or settings.mcp_port))
