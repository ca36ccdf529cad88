from imagestudio.schemas.generation import (
    AspectRatio,
    GenerationRequest,
    GenerationSnapshot,
    GenerationState,
    Idle,
    Loading,
    Failed,
    Succeeded,
)
from imagestudio.schemas.session import (
    FormUpdate,
    GenerateImageRequest,
    AspectRatioInfo,
    SessionStateResponse,
)

__all__ = [
    "AspectRatio",
    "GenerationRequest",
    "GenerationSnapshot",
    "GenerationState",
    "Idle",
    "Loading",
    "Failed",
    "Succeeded",
    "FormUpdate",
    "GenerateImageRequest",
    "AspectRatioInfo",
    "SessionStateResponse",
]
