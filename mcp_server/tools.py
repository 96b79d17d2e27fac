"""Tool registry for the MCP server.

The server exposes a single tool, generate_image. Its input schema is the
union of the fields accepted by every supported model; fields that do not
apply to the selected model are ignored rather than rejected.
"""

from typing import Any

from mcp import types

from openai_imagegen.types import DEFAULT_MODEL, ImageModel

GENERATE_IMAGE = "generate_image"

GENERATE_IMAGE_INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "prompt": {
            "type": "string",
            "description": (
                "A text description of the desired image. Max length: "
                "32000 chars (gpt-image-1), 4000 chars (dall-e-3), "
                "1000 chars (dall-e-2)"
            ),
        },
        "output": {
            "type": "string",
            "description": (
                "File path where the generated image should be saved "
                "(e.g., /path/to/image.png). When several images are "
                "generated, a number is added before the extension "
                "(image-1.png, image-2.png, ...). The directory must exist."
            ),
        },
        "model": {
            "type": "string",
            "description": "The model to use for image generation",
            "enum": [m.value for m in ImageModel],
            "default": DEFAULT_MODEL.value,
        },
        # Common parameters
        "n": {
            "type": "integer",
            "description": (
                "Number of images to generate (1-10 for dall-e-2/gpt-image-1, "
                "only 1 for dall-e-3)"
            ),
            "minimum": 1,
            "maximum": 10,
            "default": 1,
        },
        "size": {
            "type": "string",
            "description": (
                "Size: gpt-image-1(1024x1024,1536x1024,1024x1536,auto), "
                "dall-e-3(1024x1024,1792x1024,1024x1792), "
                "dall-e-2(256x256,512x512,1024x1024)"
            ),
        },
        "quality": {
            "type": "string",
            "description": (
                "Quality: gpt-image-1(low,medium,high,auto), dall-e-3(standard,hd)"
            ),
        },
        # dall-e-3 only
        "style": {
            "type": "string",
            "description": "Style for dall-e-3 only: vivid or natural",
            "enum": ["vivid", "natural"],
        },
        # dall-e-2 and dall-e-3
        "response_format": {
            "type": "string",
            "description": (
                "Response format for dall-e-2/dall-e-3 only "
                "(not supported by gpt-image-1)"
            ),
            "enum": ["url", "b64_json"],
        },
        # gpt-image-1 only
        "background": {
            "type": "string",
            "description": "Background transparency for gpt-image-1 only",
            "enum": ["transparent", "opaque", "auto"],
        },
        "moderation": {
            "type": "string",
            "description": "Content moderation level for gpt-image-1 only",
            "enum": ["low", "auto"],
        },
        "output_compression": {
            "type": "integer",
            "description": (
                "Compression level (0-100) for gpt-image-1 with webp/jpeg format"
            ),
            "minimum": 0,
            "maximum": 100,
        },
        "output_format": {
            "type": "string",
            "description": "Output format for gpt-image-1 only",
            "enum": ["png", "jpeg", "webp"],
        },
        "partial_images": {
            "type": "integer",
            "description": (
                "Number of partial images (0-3) for streaming with gpt-image-1. "
                "Partial images are saved as <name>-partial-<n>.<ext>, or "
                "<name>-<image>-partial-<n>.<ext> when several images are generated"
            ),
            "minimum": 0,
            "maximum": 3,
        },
        "stream": {
            "type": "boolean",
            "description": "Enable streaming mode for gpt-image-1 only",
        },
        "user": {
            "type": "string",
            "description": "Unique identifier for your end-user (optional)",
        },
    },
    "required": ["prompt", "output"],
}

GENERATE_IMAGE_TOOL = types.Tool(
    name=GENERATE_IMAGE,
    description=(
        "Generate an image using OpenAI's image generation models "
        "(DALL-E or GPT-Image) and save it to a file"
    ),
    inputSchema=GENERATE_IMAGE_INPUT_SCHEMA,
)


def list_tools() -> list[types.Tool]:
    """Return the descriptors of every tool the server exposes."""
    return [GENERATE_IMAGE_TOOL]


__all__ = [
    "GENERATE_IMAGE",
    "GENERATE_IMAGE_INPUT_SCHEMA",
    "GENERATE_IMAGE_TOOL",
    "list_tools",
]
