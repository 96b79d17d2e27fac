"""Model-specific generation options.

The three OpenAI image models accept different, partly incompatible
parameter sets. Each model gets its own options model carrying only the
fields it accepts; build_options() maps the flat tool arguments onto the
right one, so a field meant for one model can never reach another
model's request.

Values are not range-checked here (sizes, qualities,
compression levels...): the API is the authority on those and rejects
them itself. Only the JSON types are enforced.
"""

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from openai_imagegen.types import DEFAULT_MODEL, ImageModel


class ParameterError(Exception):
    """Raised when tool arguments cannot be turned into generation options."""

    def __init__(self, message: str, code: str = "invalid_params") -> None:
        """Initialize ParameterError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


class _ModelOptions(BaseModel):
    """Fields shared by every model."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    # Fields the caller cannot set for this model
    fixed_fields: ClassVar[frozenset[str]] = frozenset()

    user: str | None = None

    @classmethod
    def caller_fields(cls) -> list[str]:
        """Names of the tool arguments copied into this options model."""
        return [
            name
            for name in cls.model_fields
            if name != "model" and name not in cls.fixed_fields
        ]

    @property
    def streaming(self) -> bool:
        """Whether the response should be consumed as an event stream."""
        return False

    @property
    def image_count(self) -> int:
        """Number of final images requested."""
        n = getattr(self, "n", None)
        return n if n else 1

    def to_request_params(self) -> dict[str, Any]:
        """Keyword arguments for the Images API, without unset fields."""
        return self.model_dump(exclude_none=True)


class GptImageOptions(_ModelOptions):
    """Options accepted by gpt-image-1.

    gpt-image-1 always returns base64 data, so it has no response_format.
    """

    model: Literal["gpt-image-1"] = "gpt-image-1"
    n: int | None = None
    size: str | None = None
    quality: str | None = None
    background: str | None = None
    moderation: str | None = None
    output_compression: int | None = None
    output_format: str | None = None
    partial_images: int | None = None
    stream: bool | None = None

    @property
    def streaming(self) -> bool:
        """Whether the response should be consumed as an event stream."""
        return bool(self.stream)

    def to_request_params(self) -> dict[str, Any]:
        """Keyword arguments for the Images API.

        stream is passed explicitly by the caller, never through params.
        """
        params = super().to_request_params()
        params.pop("stream", None)
        return params


class Dalle3Options(_ModelOptions):
    """Options accepted by dall-e-3.

    dall-e-3 only generates one image per request, so n is pinned to 1
    whatever the caller asked for.
    """

    fixed_fields: ClassVar[frozenset[str]] = frozenset({"n"})

    model: Literal["dall-e-3"] = "dall-e-3"
    n: Literal[1] = 1
    size: str | None = None
    quality: str | None = None
    style: str | None = None
    response_format: str | None = None


class Dalle2Options(_ModelOptions):
    """Options accepted by dall-e-2."""

    model: Literal["dall-e-2"] = "dall-e-2"
    n: int | None = None
    size: str | None = None
    response_format: str | None = None


GenerationOptions = Annotated[
    Union[GptImageOptions, Dalle3Options, Dalle2Options],
    Field(discriminator="model"),
]

OPTIONS_BY_MODEL: dict[ImageModel, type[_ModelOptions]] = {
    ImageModel.GPT_IMAGE_1: GptImageOptions,
    ImageModel.DALL_E_3: Dalle3Options,
    ImageModel.DALL_E_2: Dalle2Options,
}


def resolve_model(value: Any) -> ImageModel:
    """Resolve the model argument, falling back to the default model.

    Args:
        value: Raw model argument (None or empty selects the default).

    Returns:
        The selected ImageModel.

    Raises:
        ParameterError: If the model is not supported.
    """
    if value is None or value == "":
        return DEFAULT_MODEL
    try:
        return ImageModel(value)
    except ValueError:
        supported = ", ".join(m.value for m in ImageModel)
        raise ParameterError(
            f"Unsupported model: {value}. Use one of: {supported}"
        ) from None


def build_options(arguments: Mapping[str, Any]) -> GenerationOptions:
    """Build the options model for the selected model from tool arguments.

    Only the fields the selected model accepts are copied; anything else
    in arguments (including prompt and output) is ignored.

    Args:
        arguments: Raw tool call arguments.

    Returns:
        Options instance for the selected model.

    Raises:
        ParameterError: If the model is unknown or a field has the wrong type.
    """
    image_model = resolve_model(arguments.get("model"))
    options_cls = OPTIONS_BY_MODEL[image_model]

    fields = {
        name: arguments[name]
        for name in options_cls.caller_fields()
        if arguments.get(name) is not None
    }

    try:
        return options_cls.model_validate(fields)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ParameterError(
            f"Invalid arguments for {image_model.value}: {problems}"
        ) from e


__all__ = [
    "OPTIONS_BY_MODEL",
    "Dalle2Options",
    "Dalle3Options",
    "GenerationOptions",
    "GptImageOptions",
    "ParameterError",
    "build_options",
    "resolve_model",
]
