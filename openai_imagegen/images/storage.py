"""Output naming and persistence for generated images.

A request for a single image is written to the output path as given.
When several images are produced, a 1-based number is inserted before the
extension (image.png -> image-1.png, image-2.png, ...). Streamed preview
images go to image-partial-1.png, image-partial-2.png, ... and the final
image still lands on the canonical path. When several images are streamed,
previews carry the number of their image too (image-2-partial-1.png).

Files are written as they arrive and are never rolled back: if generation
stops midway, whatever was written stays on disk.
"""

import logging
from contextlib import aclosing
from pathlib import Path

import aiofiles

from openai_imagegen.images.errors import FilesystemError, UpstreamError
from openai_imagegen.images.sources import ImageSource
from openai_imagegen.types import GenerationResult, SavedFile

logger = logging.getLogger(__name__)


def output_path_for(output: Path, index: int, total: int) -> Path:
    """Compute the destination of a final image.

    Args:
        output: Output path requested by the caller.
        index: 1-based image number.
        total: Number of final images in the request.

    Returns:
        output itself for single-image requests, otherwise a numbered sibling.
    """
    if total <= 1:
        return output
    return output.with_name(f"{output.stem}-{index}{output.suffix}")


def partial_path_for(output: Path, index: int, image: int = 1, total: int = 1) -> Path:
    """Compute the destination of a streamed preview image.

    Args:
        output: Output path requested by the caller.
        index: 1-based preview number.
        image: 1-based number of the final image the preview belongs to.
        total: Number of final images in the request.
    """
    if total <= 1:
        return output.with_name(f"{output.stem}-partial-{index}{output.suffix}")
    return output.with_name(
        f"{output.stem}-{image}-partial-{index}{output.suffix}"
    )


def check_output_path(output: Path) -> None:
    """Fail early when the output path cannot be written.

    Parent directories are not created automatically.

    Raises:
        FilesystemError: If the parent directory is missing or the path is a
            directory.
    """
    parent = output.parent
    if not parent.is_dir():
        raise FilesystemError(
            f"Output directory does not exist: {parent}",
            path=str(output),
        )
    if output.is_dir():
        raise FilesystemError(
            f"Output path is a directory: {output}",
            path=str(output),
        )


async def write_image(path: Path, data: bytes) -> None:
    """Write image bytes to path, replacing any existing file.

    Raises:
        FilesystemError: If the file cannot be written.
    """
    try:
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)
    except FileNotFoundError as e:
        raise FilesystemError(
            f"Cannot write image to {path}: directory does not exist",
            path=str(path),
        ) from e
    except PermissionError as e:
        raise FilesystemError(
            f"Cannot write image to {path}: permission denied",
            path=str(path),
        ) from e
    except OSError as e:
        raise FilesystemError(
            f"Cannot write image to {path}: {e.strerror or e}",
            path=str(path),
        ) from e


async def save_images(source: ImageSource, output: Path) -> GenerationResult:
    """Write every image produced by source.

    An upstream failure after at least one file was written is reported as
    a partial result; with nothing written the error propagates.

    Args:
        source: Image source for one request.
        output: Output path requested by the caller.

    Returns:
        GenerationResult listing the written files.

    Raises:
        UpstreamError: If generation failed before any file was written.
        FilesystemError: If a file cannot be written.
    """
    saved: list[SavedFile] = []
    errors: list[str] = []

    try:
        async with aclosing(aiter(source)) as images:
            async for payload in images:
                if payload.partial:
                    path = partial_path_for(
                        output, payload.index, payload.image, payload.total
                    )
                else:
                    path = output_path_for(output, payload.index, payload.total)

                await write_image(path, payload.data)
                saved.append(
                    SavedFile(path=str(path), index=payload.index, partial=payload.partial)
                )
                logger.info(
                    "Saved %simage %d (%d bytes) to %s",
                    "partial " if payload.partial else "",
                    payload.index,
                    len(payload.data),
                    path,
                )
    except UpstreamError as e:
        if not saved:
            raise
        logger.warning(
            "Generation stopped after %d file(s) were written: %s", len(saved), e
        )
        errors.append(str(e))

    return GenerationResult(saved_files=saved, response=source.metadata, errors=errors)


__all__ = [
    "check_output_path",
    "output_path_for",
    "partial_path_for",
    "save_images",
    "write_image",
]
