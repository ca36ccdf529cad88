from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field
from enum import Enum


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    PORTRAIT_3_4 = "3:4"
    LANDSCAPE_4_3 = "4:3"
    PORTRAIT_9_16 = "9:16"
    LANDSCAPE_16_9 = "16:9"


class GenerationRequest(BaseModel):
    """A prompt and aspect ratio captured from the form when it was submitted."""
    prompt: str = Field(..., min_length=1)
    aspect_ratio: AspectRatio
    sequence: int = Field(..., ge=1, description="Issue order within the session")

    class Config:
        frozen = True


class _StateBase(BaseModel):
    """
    Common flat view over every state variant.

    Exactly one of ``is_loading``, ``error`` and ``result_image`` is set,
    or none of them for the empty variant.
    """

    class Config:
        frozen = True

    @property
    def is_loading(self) -> bool:
        return False

    @property
    def error(self) -> str | None:
        return None

    @property
    def result_image(self) -> str | None:
        return None


class Idle(_StateBase):
    status: Literal["empty"] = "empty"


class Loading(_StateBase):
    status: Literal["loading"] = "loading"

    @property
    def is_loading(self) -> bool:
        return True


class Failed(_StateBase):
    status: Literal["error"] = "error"
    message: str

    @property
    def error(self) -> str | None:
        return self.message


class Succeeded(_StateBase):
    status: Literal["success"] = "success"
    image_url: str = Field(..., description="Data URI or URL usable directly as an image source")

    @property
    def result_image(self) -> str | None:
        return self.image_url


GenerationState = Annotated[
    Union[Idle, Loading, Failed, Succeeded],
    Field(discriminator="status"),
]


class GenerationSnapshot(BaseModel):
    """Point-in-time copy of a session's form fields and generation state."""
    prompt: str
    aspect_ratio: AspectRatio
    state: GenerationState
    version: int

    class Config:
        frozen = True
