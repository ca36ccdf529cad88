import logging
from collections import OrderedDict

from uuid_extensions import uuid7

from imagestudio.schemas.generation import AspectRatio
from imagestudio.services.orchestrator import GenerationOrchestrator, ImageGenerator

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    In-memory map of session IDs to their orchestrators.

    Holds at most ``max_sessions`` entries. When full, the least recently
    used session with no generation in flight is dropped.
    """

    def __init__(
        self,
        generate: ImageGenerator,
        default_prompt: str = "",
        default_aspect_ratio: AspectRatio = AspectRatio.SQUARE,
        max_sessions: int = 1000,
    ):
        self._generate = generate
        self.default_prompt = default_prompt
        self.default_aspect_ratio = default_aspect_ratio
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, GenerationOrchestrator] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get_or_create(self, session_id: str | None) -> tuple[str, GenerationOrchestrator]:
        """Return the orchestrator for a session, starting a new session if it is unknown."""
        if session_id and session_id in self._sessions:
            self._sessions.move_to_end(session_id)
            return session_id, self._sessions[session_id]

        self._evict()
        session_id = str(uuid7())
        orchestrator = GenerationOrchestrator(
            self._generate,
            prompt=self.default_prompt,
            aspect_ratio=self.default_aspect_ratio,
        )
        self._sessions[session_id] = orchestrator
        logger.debug("Started session %s", session_id)
        return session_id, orchestrator

    def _evict(self) -> None:
        while len(self._sessions) >= self.max_sessions:
            idle_id = next(
                (sid for sid, orch in self._sessions.items() if not orch.has_pending),
                None,
            )
            if idle_id is None:
                # Every session is busy; allow the registry to grow past the limit
                return
            del self._sessions[idle_id]
            logger.debug("Evicted session %s", idle_id)

    async def aclose(self) -> None:
        """Cancel in-flight generations of every session."""
        for orchestrator in self._sessions.values():
            await orchestrator.aclose()
        self._sessions.clear()
