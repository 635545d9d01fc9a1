"""MCP server implementation."""
import asyncio
import json
from typing import Any, Dict, List

import mcp.types as types
from mcp.server import stdio
from mcp.server.lowlevel import Server
from mcp.server.models import InitializationOptions

from mcp_istio.binaries.resolver import get_executable, host_from_config
from mcp_istio.config import load_config
from mcp_istio.errors import IstioAdapterError, MeshConfigError
from mcp_istio.install import apply_sample_app, install_istio
from mcp_istio.logging import configure_logging, get_logger
from mcp_istio.types import OperationResult

logger = get_logger("server")

SERVER_NAME = "mcp-istio"
SERVER_VERSION = "0.1.0"

_VERSION_AND_NAMESPACE = {
    "type": "object",
    "properties": {
        "version": {"type": "string", "description": "Istio release, e.g. 1.18.0 or latest"},
        "namespace": {"type": "string", "description": "Requested namespace (istio always uses its default)"},
    },
    "required": ["version"],
}

tools = [
    types.Tool(
        name="istio_install",
        description="Install istio on the cluster using istioctl's demo profile",
        inputSchema=_VERSION_AND_NAMESPACE,
    ),
    types.Tool(
        name="istio_uninstall",
        description="Remove istio from the cluster",
        inputSchema=_VERSION_AND_NAMESPACE,
    ),
    types.Tool(
        name="istio_locate",
        description="Find, or download, the istioctl executable for a release",
        inputSchema={
            "type": "object",
            "properties": {
                "version": {"type": "string", "description": "Istio release"}
            },
            "required": ["version"],
        },
    ),
    types.Tool(
        name="istio_sample_app",
        description="Install or remove a bundled sample application",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Sample application name"},
                "delete": {"type": "boolean", "description": "Remove instead of install"},
                "namespace": {"type": "string", "description": "Target namespace"},
            },
            "required": ["name"],
        },
    ),
]


def _text(payload: Dict[str, Any]) -> List[types.TextContent]:
    return [types.TextContent(type="text", text=json.dumps(payload))]


def _operation_payload(result: OperationResult) -> Dict[str, Any]:
    if result.success:
        return {"success": True, "data": {"status": result.status.value}}
    return {
        "success": False,
        "error": str(result.error),
        "data": {"status": result.status.value},
    }


async def handle_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
    """Dispatch a tool call and render its result as JSON text."""
    logger.debug(f"Tool call received: {name} with arguments {arguments}")

    try:
        if name in ("istio_install", "istio_uninstall"):
            result = await install_istio(
                delete=name == "istio_uninstall",
                version=arguments["version"],
                namespace=arguments.get("namespace", ""),
            )
            return _text(_operation_payload(result))

        if name == "istio_locate":
            config = load_config()
            executable = await get_executable(
                arguments["version"],
                host_from_config(config),
                base_url=config.release_base_url,
            )
            return _text({"success": True, "data": {"path": str(executable)}})

        if name == "istio_sample_app":
            result = await apply_sample_app(
                arguments["name"],
                bool(arguments.get("delete", False)),
                arguments.get("namespace", "default"),
            )
            return _text(_operation_payload(result))

        return _text({"success": False, "error": f"Unknown tool: {name}"})

    except KeyError as e:
        return _text({"success": False, "error": f"Missing argument: {e.args[0]}"})
    except (IstioAdapterError, OSError) as e:
        return _text({"success": False, "error": str(e)})


async def init_server() -> Server:
    logger.info(f"Registered tools: {', '.join(t.name for t in tools)}")

    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        logger.debug("Tools requested")
        return tools

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        return await handle_tool(name, arguments or {})

    return server


async def serve() -> None:
    try:
        level = load_config().log_level
    except MeshConfigError:
        level = "INFO"
    configure_logging(level)

    logger.info("Starting MCP istio server")
    server = await init_server()
    async with stdio.stdio_server() as (read_stream, write_stream):
        init_options = InitializationOptions(
            server_name=SERVER_NAME,
            server_version=SERVER_VERSION,
            capabilities=types.ServerCapabilities(
                tools=types.ToolsCapability(listChanged=False),
                logging=types.LoggingCapability(),
            ),
        )
        await server.run(read_stream, write_stream, init_options)


def main() -> None:
    """Run the MCP server."""
    asyncio.run(serve())
