from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from imagestudio.config import get_settings
from imagestudio.dependencies import Session, get_session, remember_session
from imagestudio.presentation.html import PAGE_TEMPLATE, page_context, templates
from imagestudio.presentation.view import build_view
from imagestudio.schemas import AspectRatio

settings = get_settings()
router = APIRouter(tags=["pages"])


def _back_to_page(session: Session) -> RedirectResponse:
    response = RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
    remember_session(response, session)
    return response


@router.get("/", response_class=HTMLResponse)
async def generator_page(request: Request, session: Session = Depends(get_session)):
    """Render the generator page for the caller's session."""
    view = build_view(
        session.orchestrator.snapshot(),
        refresh_seconds=settings.loading_refresh_seconds,
    )
    response = templates.TemplateResponse(
        request, PAGE_TEMPLATE, page_context(view, title=settings.app_name)
    )
    remember_session(response, session)
    return response


@router.post("/aspect-ratio", response_class=RedirectResponse)
async def select_aspect_ratio(
    select_ratio: str = Form(..., description="Aspect ratio to select"),
    prompt: str = Form(default="", max_length=1000),
    session: Session = Depends(get_session),
):
    """Select an aspect ratio, keeping whatever was typed in the prompt."""
    try:
        ratio = AspectRatio(select_ratio)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported aspect ratio: {select_ratio}"
        )

    session.orchestrator.set_prompt(prompt)
    session.orchestrator.select_aspect_ratio(ratio)
    return _back_to_page(session)


@router.post("/generate", response_class=RedirectResponse)
async def generate(
    prompt: str = Form(default="", max_length=1000),
    session: Session = Depends(get_session),
):
    """Store the prompt and start generating in the background."""
    session.orchestrator.set_prompt(prompt)
    session.orchestrator.submit_in_background()
    return _back_to_page(session)
