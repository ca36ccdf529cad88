from dataclasses import dataclass

from fastapi import Depends, Request, Response

from imagestudio.config import get_settings
from imagestudio.services.orchestrator import GenerationOrchestrator
from imagestudio.services.sessions import SessionRegistry

settings = get_settings()


@dataclass
class Session:
    id: str
    orchestrator: GenerationOrchestrator
    is_new: bool = False


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_session(
    request: Request,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Session:
    """Resolve the caller's session from its cookie, starting one if needed."""
    cookie = request.cookies.get(settings.session_cookie_name)
    session_id, orchestrator = registry.get_or_create(cookie)
    return Session(id=session_id, orchestrator=orchestrator, is_new=session_id != cookie)


def remember_session(response: Response, session: Session) -> None:
    """Set the session cookie on a response if the session was just started."""
    if session.is_new:
        response.set_cookie(
            settings.session_cookie_name,
            session.id,
            httponly=True,
            samesite="lax",
        )
