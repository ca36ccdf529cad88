from fastapi import APIRouter, Depends, Query, Response, status

from imagestudio.dependencies import Session, get_session, remember_session
from imagestudio.presentation.view import aspect_box_class
from imagestudio.schemas import (
    AspectRatio,
    AspectRatioInfo,
    FormUpdate,
    GenerateImageRequest,
    SessionStateResponse,
)

router = APIRouter(tags=["generation"])


def _apply_form(session: Session, update: FormUpdate) -> None:
    orchestrator = session.orchestrator
    if update.prompt is not None:
        orchestrator.set_prompt(update.prompt)
    if update.aspect_ratio is not None:
        orchestrator.select_aspect_ratio(update.aspect_ratio)


@router.get("/aspect-ratios", response_model=list[AspectRatioInfo])
async def list_aspect_ratios():
    """List the selectable aspect ratios in display order."""
    return [
        AspectRatioInfo(value=ratio, box_class=aspect_box_class(ratio))
        for ratio in AspectRatio
    ]


@router.get("/session", response_model=SessionStateResponse)
async def get_session_state(
    response: Response,
    after_version: int | None = Query(
        default=None,
        ge=0,
        description="Wait until the state version is greater than this value"
    ),
    timeout: float = Query(
        default=25.0,
        gt=0,
        le=60,
        description="Maximum seconds to wait when after_version is given"
    ),
    session: Session = Depends(get_session),
):
    """
    Get the current form fields and generation state.

    With ``after_version`` this becomes a long poll: the response is held
    until the state changes or the timeout expires.
    """
    remember_session(response, session)
    if after_version is None:
        snapshot = session.orchestrator.snapshot()
    else:
        snapshot = await session.orchestrator.wait_for_change(after_version, timeout)
    return SessionStateResponse.from_snapshot(snapshot)


@router.patch("/session/form", response_model=SessionStateResponse)
async def update_form(
    update: FormUpdate,
    response: Response,
    session: Session = Depends(get_session),
):
    """Update the prompt and/or the selected aspect ratio."""
    remember_session(response, session)
    _apply_form(session, update)
    return SessionStateResponse.from_snapshot(session.orchestrator.snapshot())


@router.post(
    "/session/generate",
    response_model=SessionStateResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def generate_image(
    response: Response,
    request: GenerateImageRequest | None = None,
    session: Session = Depends(get_session),
):
    """
    Generate an image from the session's form.

    Any prompt or aspect ratio in the body is applied to the form first.
    The generation runs in the background unless ``wait`` is set, in which
    case the response carries the final state. A blank prompt fails
    immediately with the validation message in the state.
    """
    remember_session(response, session)
    request = request or GenerateImageRequest()
    _apply_form(session, request)
    orchestrator = session.orchestrator

    if request.wait:
        snapshot = await orchestrator.submit()
        response.status_code = status.HTTP_200_OK
        return SessionStateResponse.from_snapshot(snapshot)

    if orchestrator.submit_in_background() is None:
        response.status_code = status.HTTP_200_OK
    return SessionStateResponse.from_snapshot(orchestrator.snapshot())
