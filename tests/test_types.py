"""Tests for shared types and response schemas."""

import json

from mcp_server.schemas import GenerateImageResponse
from openai_imagegen.types import (
    DEFAULT_MODEL,
    GenerationResult,
    ImageModel,
    SavedFile,
    ServerState,
)


class TestEnums:
    """Test enum definitions."""

    def test_image_model_values(self) -> None:
        """ImageModel should carry the API model names."""
        assert ImageModel.GPT_IMAGE_1.value == "gpt-image-1"
        assert ImageModel.DALL_E_3.value == "dall-e-3"
        assert ImageModel.DALL_E_2.value == "dall-e-2"

    def test_default_model(self) -> None:
        """dall-e-2 is used when no model is given."""
        assert DEFAULT_MODEL is ImageModel.DALL_E_2

    def test_server_state_order(self) -> None:
        """States are declared in lifecycle order."""
        assert list(ServerState) == [
            ServerState.UNINITIALIZED,
            ServerState.READY,
            ServerState.SHUTTING_DOWN,
            ServerState.TERMINATED,
        ]


class TestSavedFile:
    """Test SavedFile serialization."""

    def test_final_image(self) -> None:
        """Final images omit the partial flag."""
        assert SavedFile(path="/tmp/a.png", index=1).to_dict() == {
            "path": "/tmp/a.png",
            "index": 1,
        }

    def test_partial_image(self) -> None:
        """Preview images are flagged."""
        saved = SavedFile(path="/tmp/a-partial-2.png", index=2, partial=True)
        assert saved.to_dict()["partial"] is True


class TestGenerationResult:
    """Test GenerationResult."""

    def test_defaults(self) -> None:
        """An empty result is not partial."""
        result = GenerationResult()
        assert result.saved_files == []
        assert result.response == {}
        assert not result.is_partial

    def test_partial(self) -> None:
        """Errors mark a result as partial."""
        result = GenerationResult(
            saved_files=[SavedFile(path="/tmp/a-1.png", index=1)],
            errors=["connection lost"],
        )
        assert result.is_partial


class TestGenerateImageResponse:
    """Test the tool response payload."""

    def test_uses_camel_case_saved_files(self) -> None:
        """The payload exposes savedFiles and omits absent fields."""
        result = GenerationResult(
            saved_files=[SavedFile(path="/tmp/a.png", index=1)],
            response={"created": 1},
        )
        payload = json.loads(GenerateImageResponse.from_result(result).to_text())
        assert payload == {
            "success": True,
            "savedFiles": [{"path": "/tmp/a.png", "index": 1}],
            "response": {"created": 1},
        }

    def test_includes_errors_for_partial_results(self) -> None:
        """Partial results carry their errors."""
        result = GenerationResult(
            saved_files=[SavedFile(path="/tmp/a-partial-1.png", index=1, partial=True)],
            errors=["stream interrupted"],
        )
        payload = json.loads(GenerateImageResponse.from_result(result).to_text())
        assert payload["errors"] == ["stream interrupted"]
        assert payload["savedFiles"][0]["partial"] is True
