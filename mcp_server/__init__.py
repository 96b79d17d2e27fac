"""MCP server exposing OpenAI image generation.

This package implements the Model Context Protocol (MCP) server that
exposes the generate_image tool to AI assistants and other MCP clients.

MCP tools:
- Accept a flat argument superset and ignore fields the model does not use
- Return structured errors with codes
- Map directly to the core image provider
"""

from mcp_server.server import ImageGenerationServer

__all__ = ["ImageGenerationServer"]
