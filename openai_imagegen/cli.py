"""Thin CLI wrapper for openai_imagegen.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules and the MCP server.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import anyio
import typer
from rich.console import Console
from rich.logging import RichHandler

from openai_imagegen import __version__
from openai_imagegen.config import (
    FatalStartupError,
    Settings,
    get_settings,
    print_settings_json,
    validate_credentials,
)

if TYPE_CHECKING:
    from openai_imagegen.images.service import OpenAIImageProvider

app = typer.Typer(
    name="openai-imagegen",
    help="OpenAI Image Generation - MCP server and CLI for OpenAI image models",
    no_args_is_help=True,
)
console = Console()
# stdout carries JSON-RPC while serving; diagnostics go to stderr
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Send log records to stderr through Rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_api_key(settings: Settings) -> str:
    try:
        return validate_credentials(settings)
    except FatalStartupError as e:
        err_console.print(f"[red]ERROR: {e}[/red]")
        raise typer.Exit(code=1) from None


def _make_provider(settings: Settings, api_key: str) -> "OpenAIImageProvider":
    from openai_imagegen.images.service import OpenAIImageProvider

    return OpenAIImageProvider(
        api_key,
        base_url=settings.openai_base_url,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
        download_timeout=settings.download_timeout,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"openai-imagegen version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """OpenAI Image Generation - MCP server and CLI for OpenAI image models."""


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print_json(print_settings_json(settings))
        return

    api_key_display = "(set)" if settings.openai_api_key else "(not set)"
    base_url_display = settings.openai_base_url or "(OpenAI default)"
    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]OpenAI:[/bold]")
    console.print(f"  API key:             {api_key_display}")
    console.print(f"  Base URL:            {base_url_display}")
    console.print(f"  Max retries:         {settings.max_retries}")
    console.print()
    console.print("[bold]Timeouts (seconds):[/bold]")
    console.print(f"  Request timeout:     {settings.request_timeout}")
    console.print(f"  Download timeout:    {settings.download_timeout}")
    console.print()
    console.print("[bold]Operational:[/bold]")
    console.print(f"  Log level:           {settings.log_level}")


@app.command()
def serve() -> None:
    """Run the MCP server over stdio.

    Exits with code 1 before reading any request if no API key is
    configured, and with code 0 on SIGINT/SIGTERM or when stdin closes.
    """
    from mcp_server.server import ImageGenerationServer

    settings = get_settings()
    configure_logging(settings.log_level)
    api_key = _load_api_key(settings)

    server = ImageGenerationServer(_make_provider(settings, api_key))
    anyio.run(server.run)


@app.command()
def generate(
    prompt: Annotated[str, typer.Argument(help="Text description of the image")],
    output: Annotated[Path, typer.Argument(help="Where to save the image")],
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="gpt-image-1, dall-e-3 or dall-e-2"),
    ] = None,
    n: Annotated[
        int | None, typer.Option("--n", "-n", help="Number of images")
    ] = None,
    size: Annotated[str | None, typer.Option("--size", help="Image size")] = None,
    quality: Annotated[
        str | None, typer.Option("--quality", help="Image quality")
    ] = None,
    style: Annotated[
        str | None, typer.Option("--style", help="vivid or natural (dall-e-3)")
    ] = None,
    response_format: Annotated[
        str | None,
        typer.Option("--response-format", help="url or b64_json (dall-e-2/3)"),
    ] = None,
    background: Annotated[
        str | None,
        typer.Option("--background", help="transparent, opaque or auto (gpt-image-1)"),
    ] = None,
    moderation: Annotated[
        str | None, typer.Option("--moderation", help="low or auto (gpt-image-1)")
    ] = None,
    output_compression: Annotated[
        int | None,
        typer.Option("--output-compression", help="0-100 for jpeg/webp (gpt-image-1)"),
    ] = None,
    output_format: Annotated[
        str | None,
        typer.Option("--output-format", help="png, jpeg or webp (gpt-image-1)"),
    ] = None,
    partial_images: Annotated[
        int | None,
        typer.Option("--partial-images", help="0-3 streamed previews (gpt-image-1)"),
    ] = None,
    stream: Annotated[
        bool, typer.Option("--stream", help="Stream the response (gpt-image-1)")
    ] = False,
    user: Annotated[
        str | None, typer.Option("--user", help="End-user identifier")
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Generate an image once and save it, without running the server."""
    from openai_imagegen.images.errors import ImageGenerationError
    from openai_imagegen.options import ParameterError, build_options

    settings = get_settings()
    configure_logging(settings.log_level)
    api_key = _load_api_key(settings)

    arguments: dict[str, Any] = {
        "model": model,
        "n": n,
        "size": size,
        "quality": quality,
        "style": style,
        "response_format": response_format,
        "background": background,
        "moderation": moderation,
        "output_compression": output_compression,
        "output_format": output_format,
        "partial_images": partial_images,
        "stream": stream or None,
        "user": user,
    }
    try:
        options = build_options(arguments)
    except ParameterError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2) from None

    provider = _make_provider(settings, api_key)

    async def _run() -> Any:
        try:
            return await provider.generate_image(prompt, output, options)
        finally:
            await provider.close()

    try:
        result = anyio.run(_run)
    except ImageGenerationError as e:
        err_console.print(f"[red]Error generating image ({e.code}): {e}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        payload = {
            "success": True,
            "savedFiles": [saved.to_dict() for saved in result.saved_files],
            "response": result.response,
        }
        if result.errors:
            payload["errors"] = result.errors
        console.print_json(data=payload)
        return

    console.print(f"[bold]Saved {len(result.saved_files)} file(s):[/bold]")
    for saved in result.saved_files:
        label = " (partial)" if saved.partial else ""
        console.print(f"  [green]{saved.path}[/green]{label}")
    for error in result.errors:
        console.print(f"[yellow]Stopped early: {error}[/yellow]")


if __name__ == "__main__":
    app()
