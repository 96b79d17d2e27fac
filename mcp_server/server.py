"""MCP server implementation.

This module creates the low-level MCP server and registers its handlers.
The SDK owns JSON-RPC framing over stdio, the initialize handshake and
request/response id correlation; this module routes tool calls to the
image provider and owns the process lifecycle:

    UNINITIALIZED -> READY -> SHUTTING_DOWN -> TERMINATED

READY is entered when the client completes the handshake
(notifications/initialized). Closing stdin or SIGINT/SIGTERM moves to
SHUTTING_DOWN; TERMINATED follows once the provider has been closed.

Rules:
- Unknown tools and missing required arguments are JSON-RPC errors
- Generation failures are tool results with isError set, never
  transport errors
- One generation runs at a time; tools/list is always answered
"""

import logging
import signal
from collections.abc import Mapping
from typing import Any

import anyio
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from mcp_server.errors import (
    INTERNAL_ERROR,
    invalid_params,
    make_error,
    protocol_error,
    unknown_tool,
)
from mcp_server.schemas import GenerateImageResponse
from mcp_server.tools import GENERATE_IMAGE, list_tools
from mcp_server.transport import StdinLines
from openai_imagegen import __version__
from openai_imagegen.images.errors import ImageGenerationError
from openai_imagegen.images.service import OpenAIImageProvider
from openai_imagegen.options import ParameterError, build_options
from openai_imagegen.types import ServerState

logger = logging.getLogger(__name__)

SERVER_NAME = "openai-image-generation"

_STATE_ORDER = list(ServerState)


def error_result(code: str, message: str) -> types.CallToolResult:
    """Build a tool result reporting a failed generation."""
    return types.CallToolResult(
        content=[
            types.TextContent(
                type="text",
                text=f"Error generating image: {message or 'Unknown error'}",
            )
        ],
        isError=True,
        _meta={"error": make_error(code, message).to_dict()},
    )


def success_result(response: GenerateImageResponse) -> types.CallToolResult:
    """Build a tool result for a (possibly partial) successful generation."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=response.to_text())],
    )


def _required_text(arguments: Mapping[str, Any], name: str, message: str) -> str:
    value = arguments.get(name)
    if not isinstance(value, str) or not value.strip():
        raise protocol_error(invalid_params(message), types.INVALID_PARAMS)
    return value


class ImageGenerationServer:
    """MCP server exposing the generate_image tool.

    Attributes:
        server: Underlying MCP SDK server.
        provider: Image provider used for tool calls.
        state: Current lifecycle state.
    """

    def __init__(self, provider: OpenAIImageProvider) -> None:
        self.provider = provider
        self.state = ServerState.UNINITIALIZED
        self._generation_lock = anyio.Lock()

        self.server: Server = Server(SERVER_NAME, version=__version__)
        self.server.list_tools()(self._list_tools)
        # Registered directly so McpError reaches the client as a JSON-RPC
        # error instead of being folded into an isError result
        self.server.request_handlers[types.CallToolRequest] = self._handle_call_tool
        self.server.notification_handlers[types.InitializedNotification] = (
            self._handle_initialized
        )

    def transition(self, new_state: ServerState) -> None:
        """Move to a later lifecycle state.

        Repeating the current state is a no-op.

        Raises:
            RuntimeError: If new_state comes before the current state.
        """
        if new_state == self.state:
            return
        if _STATE_ORDER.index(new_state) < _STATE_ORDER.index(self.state):
            raise RuntimeError(
                f"Invalid server state transition: {self.state.value} -> {new_state.value}"
            )
        logger.debug("Server state: %s -> %s", self.state.value, new_state.value)
        self.state = new_state

    async def _handle_initialized(self, notification: types.InitializedNotification) -> None:
        if self.state == ServerState.UNINITIALIZED:
            self.transition(ServerState.READY)
            logger.info("Client initialized, server ready")

    async def _list_tools(self) -> list[types.Tool]:
        return list_tools()

    async def _handle_call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        result = await self.call_tool(req.params.name, req.params.arguments or {})
        return types.ServerResult(result)

    async def call_tool(
        self, name: str, arguments: Mapping[str, Any]
    ) -> types.CallToolResult:
        """Validate and run a tool call.

        Args:
            name: Tool name.
            arguments: Tool arguments.

        Returns:
            CallToolResult; generation failures have isError set.

        Raises:
            McpError: For unknown tools (method not found) and invalid
                arguments (invalid params).
        """
        if name != GENERATE_IMAGE:
            raise protocol_error(unknown_tool(name), types.METHOD_NOT_FOUND)

        prompt = _required_text(arguments, "prompt", "Prompt is required")
        output = _required_text(arguments, "output", "Output file path is required")

        try:
            options = build_options(arguments)
        except ParameterError as e:
            raise protocol_error(invalid_params(str(e)), types.INVALID_PARAMS) from e

        logger.info("Tool call %s: model=%s output=%s", name, options.model, output)
        logger.debug("Prompt: %s", prompt)

        async with self._generation_lock:
            try:
                result = await self.provider.generate_image(prompt, output, options)
            except ImageGenerationError as e:
                logger.error("Error generating image (%s): %s", e.code, e)
                return error_result(e.code, str(e))
            except Exception as e:
                logger.exception("Unexpected error generating image")
                return error_result(INTERNAL_ERROR, str(e))

        return success_result(GenerateImageResponse.from_result(result))

    async def run(self, stdin: Any = None) -> None:
        """Serve over stdio until the input closes or a signal arrives.

        A signal cancels in-flight requests; files already written stay on
        disk. Either way the provider is closed before returning.

        Args:
            stdin: Line source for incoming messages; defaults to the
                process's standard input.
        """
        if stdin is None:
            stdin = StdinLines()

        async with anyio.create_task_group() as tg:
            tg.start_soon(self._watch_signals, tg.cancel_scope)

            async with stdio_server(stdin=stdin) as (read_stream, write_stream):
                logger.info("Image Generation MCP server running on stdio")
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )

            logger.info("Input stream closed, shutting down")
            self.transition(ServerState.SHUTTING_DOWN)
            tg.cancel_scope.cancel()

        with anyio.CancelScope(shield=True):
            await self.provider.close()
        self.transition(ServerState.TERMINATED)
        logger.info("Server stopped")

    async def _watch_signals(self, scope: anyio.CancelScope) -> None:
        with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
            async for signum in signals:
                logger.info("Received %s, shutting down", signal.Signals(signum).name)
                self.transition(ServerState.SHUTTING_DOWN)
                scope.cancel()
                return


__all__ = [
    "SERVER_NAME",
    "ImageGenerationServer",
    "error_result",
    "success_result",
]
