"""Pydantic schemas for MCP tool responses.

These schemas define the JSON carried in the text content of
tool results, ensuring a consistent shape across success, partial
success and failure.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from openai_imagegen.types import GenerationResult


class SavedFileSummary(BaseModel):
    """An image file written by the tool."""

    model_config = ConfigDict(extra="forbid")

    path: str
    index: int
    partial: bool | None = None


class GenerateImageResponse(BaseModel):
    """Response for generate_image tool."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    success: bool
    saved_files: list[SavedFileSummary] = Field(
        default_factory=list, alias="savedFiles"
    )
    response: dict[str, Any] | None = None
    errors: list[str] | None = None

    @classmethod
    def from_result(cls, result: GenerationResult) -> "GenerateImageResponse":
        """Build the response payload from a provider result."""
        return cls(
            success=True,
            saved_files=[
                SavedFileSummary(**saved.to_dict()) for saved in result.saved_files
            ],
            response=result.response,
            errors=result.errors or None,
        )

    def to_text(self) -> str:
        """Render as the JSON text sent back to the client."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


__all__ = ["GenerateImageResponse", "SavedFileSummary"]
