from pydantic import BaseModel, Field

from imagestudio.schemas.generation import AspectRatio, GenerationSnapshot


class FormUpdate(BaseModel):
    """Partial update of the session's form fields."""
    prompt: str | None = Field(
        default=None,
        max_length=1000,
        description="Description of the image to generate"
    )
    aspect_ratio: AspectRatio | None = Field(
        default=None,
        description="Aspect ratio of the generated image"
    )


class GenerateImageRequest(FormUpdate):
    """Request to generate an image from the session's form."""
    wait: bool = Field(
        default=False,
        description="Wait for the image generation to finish before responding"
    )


class AspectRatioInfo(BaseModel):
    """One selectable aspect ratio and the display box it maps to."""
    value: AspectRatio
    box_class: str


class SessionStateResponse(BaseModel):
    """Current form fields and generation state of a session."""
    prompt: str
    aspect_ratio: AspectRatio
    status: str
    is_loading: bool
    error: str | None = None
    result_image: str | None = None
    version: int

    @classmethod
    def from_snapshot(cls, snapshot: GenerationSnapshot) -> "SessionStateResponse":
        state = snapshot.state
        return cls(
            prompt=snapshot.prompt,
            aspect_ratio=snapshot.aspect_ratio,
            status=state.status,
            is_loading=state.is_loading,
            error=state.error,
            result_image=state.result_image,
            version=snapshot.version,
        )
