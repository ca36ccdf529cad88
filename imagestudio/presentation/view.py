"""View model for the generator page.

Everything here is derived from a ``GenerationSnapshot``; nothing holds
state of its own.
"""

from dataclasses import dataclass
from typing import ClassVar

from imagestudio.schemas.generation import (
    AspectRatio,
    GenerationSnapshot,
    Idle,
    Loading,
    Failed,
    Succeeded,
)

DEFAULT_BOX_CLASS = "aspect-square"

ASPECT_BOX_CLASSES = {
    AspectRatio.SQUARE: "aspect-square",
    AspectRatio.PORTRAIT_3_4: "aspect-3-4",
    AspectRatio.LANDSCAPE_4_3: "aspect-4-3",
    AspectRatio.PORTRAIT_9_16: "aspect-9-16",
    AspectRatio.LANDSCAPE_16_9: "aspect-video",
}

SUBMIT_LABEL = "Generate Image"
SUBMIT_LABEL_LOADING = "Generating..."
LOADING_MESSAGE = "Creating your image..."
EMPTY_MESSAGE = "Your generated image will appear here."


def aspect_box_class(aspect_ratio: AspectRatio | str | None) -> str:
    """Shape of the output box for an aspect ratio, square for anything unrecognized."""
    try:
        return ASPECT_BOX_CLASSES[AspectRatio(aspect_ratio)]
    except ValueError:
        return DEFAULT_BOX_CLASS


@dataclass(frozen=True)
class AspectRatioOption:
    value: str
    selected: bool


@dataclass(frozen=True)
class FormView:
    prompt: str
    options: tuple[AspectRatioOption, ...]
    disabled: bool
    submit_label: str
    show_spinner: bool


@dataclass(frozen=True)
class LoadingPanel:
    kind: ClassVar[str] = "loading"
    message: str = LOADING_MESSAGE


@dataclass(frozen=True)
class ErrorPanel:
    kind: ClassVar[str] = "error"
    message: str


@dataclass(frozen=True)
class ImagePanel:
    kind: ClassVar[str] = "image"
    src: str
    alt: str = "Generated"


@dataclass(frozen=True)
class EmptyPanel:
    kind: ClassVar[str] = "empty"
    message: str = EMPTY_MESSAGE


OutputPanel = LoadingPanel | ErrorPanel | ImagePanel | EmptyPanel


@dataclass(frozen=True)
class PageView:
    form: FormView
    panel: OutputPanel
    box_class: str
    refresh_seconds: int | None = None


def build_panel(snapshot: GenerationSnapshot) -> OutputPanel:
    match snapshot.state:
        case Loading():
            return LoadingPanel()
        case Failed(message=message):
            return ErrorPanel(message=message)
        case Succeeded(image_url=image_url):
            return ImagePanel(src=image_url)
        case Idle():
            return EmptyPanel()
    raise TypeError(f"Unknown generation state: {snapshot.state!r}")


def build_view(snapshot: GenerationSnapshot, refresh_seconds: int = 2) -> PageView:
    """Derive the whole page from a session snapshot."""
    loading = snapshot.state.is_loading
    form = FormView(
        prompt=snapshot.prompt,
        options=tuple(
            AspectRatioOption(value=ratio.value, selected=ratio == snapshot.aspect_ratio)
            for ratio in AspectRatio
        ),
        disabled=loading,
        submit_label=SUBMIT_LABEL_LOADING if loading else SUBMIT_LABEL,
        show_spinner=loading,
    )
    return PageView(
        form=form,
        panel=build_panel(snapshot),
        box_class=aspect_box_class(snapshot.aspect_ratio),
        refresh_seconds=refresh_seconds if loading else None,
    )
