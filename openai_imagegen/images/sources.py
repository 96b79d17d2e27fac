"""Image sources.

An image source produces a finite sequence of decoded images for one
generation request and ends when the upstream response is exhausted.
Sources are single-use: iterating twice raises RuntimeError.

Two implementations exist:
- ResponseImageSource: one request, images returned as base64 or URLs
- StreamingImageSource: server-sent events carrying partial and final images

Persistence (naming, writing) lives in storage.py and only depends on
the ImageSource protocol.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING, Any, Protocol

import httpx
import openai

from openai_imagegen.images.errors import (
    CONNECTION_ERROR,
    TIMEOUT,
    UPSTREAM_ERROR,
    UpstreamError,
    classify_openai_error,
)
from openai_imagegen.types import ImagePayload

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

PARTIAL_IMAGE_EVENT = "image_generation.partial_image"
COMPLETED_EVENT = "image_generation.completed"

# Timeout for downloading images returned as URLs (seconds)
DOWNLOAD_TIMEOUT = 60.0


class ImageSource(Protocol):
    """A single-use async sequence of decoded images.

    metadata is filled in while the sequence is consumed and describes the
    upstream response (never the image data itself).
    """

    metadata: dict[str, Any]

    def __aiter__(self) -> AsyncGenerator[ImagePayload, None]: ...


def decode_image(b64_data: str) -> bytes:
    """Decode a base64 image payload.

    Raises:
        UpstreamError: If the payload is not valid base64.
    """
    try:
        return base64.b64decode(b64_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise UpstreamError(
            f"The OpenAI API returned an invalid base64 image payload: {e}"
        ) from e


class ImageDownloader:
    """Fetches images the API returned as URLs."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DOWNLOAD_TIMEOUT,
    ) -> None:
        self._client = client
        self._timeout = timeout

    async def fetch(self, url: str) -> bytes:
        """Download an image.

        Args:
            url: Image URL returned by the API.

        Returns:
            Image bytes.

        Raises:
            UpstreamError: If the download fails.
        """
        logger.debug("Downloading generated image from %s", url)
        try:
            if self._client is not None:
                response = await self._client.get(url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(
                    timeout=self._timeout, follow_redirects=True
                ) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"HTTP error downloading generated image from {url}: "
                f"{e.response.status_code} {e.response.reason_phrase}",
                code=UPSTREAM_ERROR,
                status_code=e.response.status_code,
            ) from e
        except httpx.TimeoutException as e:
            raise UpstreamError(
                f"Timeout downloading generated image from {url}",
                code=TIMEOUT,
            ) from e
        except httpx.RequestError as e:
            raise UpstreamError(
                f"Network error downloading generated image from {url}: {e}",
                code=CONNECTION_ERROR,
            ) from e

        return response.content


class _SingleUseSource:
    """Guards against iterating a source more than once."""

    def __init__(self) -> None:
        self.metadata: dict[str, Any] = {}
        self._consumed = False

    def _claim(self) -> None:
        if self._consumed:
            raise RuntimeError("Image sources can only be iterated once")
        self._consumed = True


class ResponseImageSource(_SingleUseSource):
    """Images from a single, non-streaming generation request."""

    def __init__(
        self,
        client: AsyncOpenAI,
        prompt: str,
        params: dict[str, Any],
        downloader: ImageDownloader,
    ) -> None:
        super().__init__()
        self._client = client
        self._prompt = prompt
        self._params = params
        self._downloader = downloader

    async def __aiter__(self) -> AsyncGenerator[ImagePayload, None]:
        self._claim()
        try:
            response = await self._client.images.generate(
                prompt=self._prompt, **self._params
            )
        except openai.OpenAIError as e:
            raise classify_openai_error(e) from e

        self.metadata = response_metadata(response)
        items = response.data or []
        if not items:
            raise UpstreamError("The OpenAI API returned no images")

        total = len(items)
        for index, item in enumerate(items, start=1):
            if item.b64_json:
                data = decode_image(item.b64_json)
            elif item.url:
                data = await self._downloader.fetch(item.url)
            else:
                raise UpstreamError(
                    f"Image {index} of {total} has neither inline data nor a URL"
                )
            yield ImagePayload(data=data, index=index, total=total)


class StreamingImageSource(_SingleUseSource):
    """Partial and final images from a streamed generation request.

    Events are yielded in arrival order. Partial images are numbered by
    their partial_image_index (1-based) and belong to the next image to
    complete; final images are numbered by completion order.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        prompt: str,
        params: dict[str, Any],
        expected_images: int = 1,
    ) -> None:
        super().__init__()
        self._client = client
        self._prompt = prompt
        self._params = params
        self._expected = expected_images

    async def __aiter__(self) -> AsyncGenerator[ImagePayload, None]:
        self._claim()
        self.metadata = {"stream": True, "partial_images": 0, "completed_images": 0}
        partials = 0
        completed = 0

        try:
            stream = await self._client.images.generate(
                prompt=self._prompt, stream=True, **self._params
            )
            async with stream:
                async for event in stream:
                    if event.type == PARTIAL_IMAGE_EVENT:
                        partials += 1
                        seq = event.partial_image_index
                        index = seq + 1 if seq is not None else partials
                        self.metadata["partial_images"] = partials
                        logger.debug("Received partial image %d", index)
                        yield ImagePayload(
                            data=decode_image(event.b64_json),
                            index=index,
                            total=self._expected,
                            partial=True,
                            image=completed + 1,
                        )
                    elif event.type == COMPLETED_EVENT:
                        completed += 1
                        self.metadata["completed_images"] = completed
                        self.metadata.update(event_metadata(event))
                        logger.debug("Received completed image %d", completed)
                        yield ImagePayload(
                            data=decode_image(event.b64_json),
                            index=completed,
                            total=self._expected,
                        )
                    else:
                        logger.debug("Ignoring stream event %s", event.type)
        except openai.OpenAIError as e:
            raise classify_openai_error(e) from e
        except httpx.HTTPError as e:
            # Transport errors raised while reading the event stream itself
            raise UpstreamError(
                f"The image stream from the OpenAI API was interrupted: {e}",
                code=CONNECTION_ERROR,
            ) from e

        if completed == 0:
            raise UpstreamError(
                "The image stream ended without a completed image "
                f"({partials} partial image(s) received)"
            )


def response_metadata(response: Any) -> dict[str, Any]:
    """Summarize an ImagesResponse without the inline image data."""
    metadata: dict[str, Any] = response.model_dump(mode="json", exclude_none=True)
    for item in metadata.get("data", []):
        item.pop("b64_json", None)
    return metadata


def event_metadata(event: Any) -> dict[str, Any]:
    """Summarize a completed stream event without the inline image data."""
    metadata: dict[str, Any] = event.model_dump(mode="json", exclude_none=True)
    metadata.pop("b64_json", None)
    metadata.pop("type", None)
    return metadata


__all__ = [
    "COMPLETED_EVENT",
    "PARTIAL_IMAGE_EVENT",
    "ImageDownloader",
    "ImageSource",
    "ResponseImageSource",
    "StreamingImageSource",
    "decode_image",
    "event_metadata",
    "response_metadata",
]
