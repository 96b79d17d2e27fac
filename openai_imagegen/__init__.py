"""OpenAI Image Generation - MCP tooling for OpenAI's image models.

This package wraps the OpenAI Images API (gpt-image-1, dall-e-3, dall-e-2)
behind a single options model and writes generated images to local files.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
