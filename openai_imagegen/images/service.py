"""Image provider service.

OpenAIImageProvider turns a prompt and model-specific options into image
files on disk. It is the only component talking to the OpenAI Images API.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
from openai import AsyncOpenAI

from openai_imagegen.images.sources import (
    DOWNLOAD_TIMEOUT,
    ImageDownloader,
    ImageSource,
    ResponseImageSource,
    StreamingImageSource,
)
from openai_imagegen.images.storage import check_output_path, save_images
from openai_imagegen.options import GenerationOptions
from openai_imagegen.types import GenerationResult

logger = logging.getLogger(__name__)

# Timeout for generation requests (seconds); high-quality images are slow
REQUEST_TIMEOUT = 120.0

# Retries performed by the OpenAI client on transient failures
MAX_RETRIES = 2


class OpenAIImageProvider:
    """Generates images with the OpenAI Images API and saves them locally.

    The API key is injected at construction so the provider can be built
    with fake credentials in tests. client and http_client allow passing
    preconfigured clients instead.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        download_timeout: float = DOWNLOAD_TIMEOUT,
        client: AsyncOpenAI | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )
        self._downloader = ImageDownloader(http_client, timeout=download_timeout)

    def open_source(self, prompt: str, options: GenerationOptions) -> ImageSource:
        """Create the image source matching the options' response shape."""
        params = options.to_request_params()
        if options.streaming:
            return StreamingImageSource(
                self._client,
                prompt,
                params,
                expected_images=options.image_count,
            )
        return ResponseImageSource(self._client, prompt, params, self._downloader)

    async def generate_image(
        self,
        prompt: str,
        output_path: str | Path,
        options: GenerationOptions,
    ) -> GenerationResult:
        """Generate images and write them next to output_path.

        Args:
            prompt: Text description of the desired image.
            output_path: Destination file; numbered siblings are used when
                several images are produced.
            options: Options for the selected model.

        Returns:
            GenerationResult with the written files and response metadata.

        Raises:
            UpstreamError: If the API call fails before any file is written.
            FilesystemError: If the output location cannot be written.
        """
        output = Path(output_path).expanduser()
        check_output_path(output)

        logger.info(
            "Generating image with %s (stream=%s) to %s",
            options.model,
            options.streaming,
            output,
        )
        logger.debug("Request parameters: %s", options.to_request_params())

        source = self.open_source(prompt, options)
        result = await save_images(source, output)

        logger.info(
            "Generation with %s finished: %d file(s) written%s",
            options.model,
            len(result.saved_files),
            " (partial)" if result.is_partial else "",
        )
        return result

    async def close(self) -> None:
        """Release the underlying HTTP connections."""
        await self._client.close()


__all__ = ["MAX_RETRIES", "REQUEST_TIMEOUT", "OpenAIImageProvider"]
