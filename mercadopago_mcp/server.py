"""
Mercado Pago MCP Server
=======================
Stdio transport bootstrap and the ``mercadopago-mcp`` entry point.

Environment:
    MERCADOPAGO_ACCESS_TOKEN   required API credential
    MERCADOPAGO_ENVIRONMENT    sandbox (default) or production
    MERCADOPAGO_TIMEOUT        HTTP timeout in seconds (default 5.0)
    LOG_LEVEL                  stdlib level name (default INFO)
    OTEL_ENABLED               export spans/metrics to stderr (default false)
"""

import asyncio
import signal
import sys

import structlog

# MCP imports
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from mercadopago_mcp import __version__
from mercadopago_mcp.config import ConfigError, ServerConfig, load_config
from mercadopago_mcp.dispatcher import ToolDispatcher
from mercadopago_mcp.gateway import MercadoPagoGateway
from mercadopago_mcp.handlers import PaymentTools
from mercadopago_mcp.telemetry import SERVICE_NAME, ToolTelemetry, configure_logging


logger = structlog.get_logger(__name__)


def create_server(dispatcher: ToolDispatcher) -> Server:
    """Wire list-tools and call-tool onto a low-level MCP server."""
    server = Server(SERVICE_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return dispatcher.list_tools()

    # raw handler: McpError surfaces as a JSON-RPC error, not an isError result
    async def call_tool(request: types.CallToolRequest) -> types.ServerResult:
        content = await dispatcher.call(request.params.name, request.params.arguments)
        return types.ServerResult(types.CallToolResult(content=content, isError=False))

    server.request_handlers[types.CallToolRequest] = call_tool
    return server


async def serve(config: ServerConfig) -> None:
    """Serve MCP over stdio until the client disconnects."""
    telemetry = ToolTelemetry(
        environment=config.environment.value,
        enable_otel=config.otel_enabled,
    )
    try:
        async with MercadoPagoGateway(config.access_token, timeout=config.timeout) as gateway:
            dispatcher = ToolDispatcher(PaymentTools(gateway), telemetry=telemetry)
            server = create_server(dispatcher)

            logger.info(
                "server_starting",
                environment=config.environment.value,
                tools=len(dispatcher.handlers),
                version=__version__,
            )
            async with stdio_server() as (read_stream, write_stream):
                await server.run(
                    read_stream,
                    write_stream,
                    server.create_initialization_options()
                )
    finally:
        telemetry.shutdown()
        logger.info("server_stopped")


async def _serve_until_terminated(config: ServerConfig) -> None:
    task = asyncio.current_task()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except NotImplementedError:
        # Windows event loops have no signal handler support
        logger.debug("sigterm_handler_unavailable")

    try:
        await serve(config)
    except asyncio.CancelledError:
        logger.info("server_terminated")


def main() -> None:
    """Run the MCP server."""
    try:
        config = load_config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.log_level)

    try:
        asyncio.run(_serve_until_terminated(config))
    except KeyboardInterrupt:
        logger.info("server_interrupted")


if __name__ == "__main__":
    main()
