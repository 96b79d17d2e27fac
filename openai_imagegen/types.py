"""Shared type definitions for openai_imagegen.

This module contains enums and dataclasses shared across subpackages
and the MCP server to avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ImageModel(str, Enum):
    """Supported OpenAI image generation models."""

    GPT_IMAGE_1 = "gpt-image-1"
    DALL_E_3 = "dall-e-3"
    DALL_E_2 = "dall-e-2"


# Used when the caller does not pick a model: the cheapest one
DEFAULT_MODEL = ImageModel.DALL_E_2


class ServerState(str, Enum):
    """Lifecycle state of the MCP server process."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


@dataclass
class ImagePayload:
    """One decoded image produced by an image source.

    Attributes:
        data: Raw image bytes.
        index: 1-based position of the image in its sequence.
        total: Number of final images expected in the sequence.
        partial: True for streamed preview images.
        image: For previews, the 1-based final image being streamed.
    """

    data: bytes
    index: int
    total: int = 1
    partial: bool = False
    image: int = 1


@dataclass
class SavedFile:
    """An image written to disk."""

    path: str
    index: int
    partial: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"path": self.path, "index": self.index}
        if self.partial:
            result["partial"] = True
        return result


@dataclass
class GenerationResult:
    """Result of an image generation request.

    Attributes:
        saved_files: Files written, in the order they were produced.
        response: Upstream response metadata, without inline image data.
        errors: Failures that happened after some files were already
            written (partial success). Empty on full success.
    """

    saved_files: list[SavedFile] = field(default_factory=list)
    response: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        """Whether the request stopped before producing every image."""
        return bool(self.errors)


__all__ = [
    "DEFAULT_MODEL",
    "GenerationResult",
    "ImageModel",
    "ImagePayload",
    "SavedFile",
    "ServerState",
]
