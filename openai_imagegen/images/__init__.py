"""Image provider package.

This package handles:
- Mapping generation options onto OpenAI Images API requests
- Consuming streamed and non-streamed responses as image sources
- Writing generated images to disk with collision-free names
- Classifying upstream failures into actionable errors
"""

from openai_imagegen.images.errors import (
    FilesystemError,
    ImageGenerationError,
    UpstreamError,
    classify_openai_error,
)
from openai_imagegen.images.service import OpenAIImageProvider
from openai_imagegen.images.sources import (
    ImageDownloader,
    ImageSource,
    ResponseImageSource,
    StreamingImageSource,
)
from openai_imagegen.images.storage import (
    output_path_for,
    partial_path_for,
    save_images,
)

__all__ = [
    "FilesystemError",
    "ImageDownloader",
    "ImageGenerationError",
    "ImageSource",
    "OpenAIImageProvider",
    "ResponseImageSource",
    "StreamingImageSource",
    "UpstreamError",
    "classify_openai_error",
    "output_path_for",
    "partial_path_for",
    "save_images",
]
