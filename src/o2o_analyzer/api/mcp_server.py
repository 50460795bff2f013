"""MCP server exposing the tool catalog over stdio."""

from __future__ import annotations

import logging
from typing import Any

import anyio
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from o2o_analyzer.agent.dispatcher import Dispatcher, ToolResult
from o2o_analyzer.agent.registry import ToolDescriptor

logger = logging.getLogger(__name__)

SERVER_NAME = "o2o-laravel-analyzer"
SERVER_VERSION = "2.0.0"


def to_mcp_tool(descriptor: ToolDescriptor) -> types.Tool:
    return types.Tool(
        name=descriptor.name,
        description=descriptor.description,
        inputSchema=descriptor.input_schema,
    )


def to_call_tool_result(result: ToolResult) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=result.text)],
        isError=result.is_error,
    )


def build_server(dispatcher: Dispatcher) -> Server:
    server: Server = Server(SERVER_NAME, version=SERVER_VERSION)
    tools = [to_mcp_tool(descriptor) for descriptor in dispatcher.list_capabilities()]

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return tools

    # Argument validation belongs to the per-tool pydantic models.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        # Invocations are synchronous filesystem/process work.
        result = await anyio.to_thread.run_sync(dispatcher.invoke, name, arguments or {})
        return to_call_tool_result(result)

    return server


async def run_stdio(dispatcher: Dispatcher) -> None:
    server = build_server(dispatcher)
    logger.info("%s running on stdio", SERVER_NAME)
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )
