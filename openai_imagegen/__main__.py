"""Allow running the CLI with python -m openai_imagegen."""

from openai_imagegen.cli import app

app(prog_name="openai-imagegen")
