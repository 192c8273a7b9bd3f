from pydantic import BaseModel, ConfigDict, Field, model_validator


class GeneratedImage(BaseModel):
    """Result of an image generation request.

    Carries raw bytes when the backend returned inline data, otherwise a
    URL the image can be fetched from.
    """

    model_config = ConfigDict(frozen=True)

    data: bytes | None = Field(default=None, description="Raw image bytes")
    url: str | None = Field(default=None, description="Fetchable image reference")
    revised_prompt: str | None = Field(
        default=None,
        description="Prompt as rewritten by the backend, if any"
    )

    @model_validator(mode="after")
    def _require_payload(self) -> "GeneratedImage":
        if self.data is None and not self.url:
            raise ValueError("GeneratedImage needs either data or url")
        return self
