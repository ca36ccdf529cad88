import asyncio
import logging
from typing import Awaitable, Callable

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

logger = logging.getLogger(__name__)

EMPTY_PROMPT_MESSAGE = "Please enter a prompt."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."
CANCELLED_MESSAGE = "Image generation was cancelled."

ImageGenerator = Callable[[str, AspectRatio], Awaitable[str]]
Listener = Callable[[GenerationSnapshot], None]


def describe_failure(exc: BaseException) -> str:
    """Turn a failed generation into a message fit for display."""
    message = str(exc).strip()
    return message or UNKNOWN_ERROR_MESSAGE


class GenerationOrchestrator:
    """
    Owns the form fields and generation state of one session.

    Every submission is tagged with a sequence number. When a call settles,
    its outcome is applied only if no newer submission was made in the
    meantime, so the visible result always belongs to the latest request.
    """

    def __init__(
        self,
        generate: ImageGenerator,
        prompt: str = "",
        aspect_ratio: AspectRatio = AspectRatio.SQUARE,
    ):
        self._generate = generate
        self._prompt = prompt
        self._aspect_ratio = AspectRatio(aspect_ratio)
        self._state: GenerationState = Idle()
        self._version = 0
        self._sequence = 0
        self._listeners: list[Listener] = []
        self._tasks: set[asyncio.Task] = set()
        self._changed = asyncio.Event()

    @property
    def prompt(self) -> str:
        return self._prompt

    @property
    def aspect_ratio(self) -> AspectRatio:
        return self._aspect_ratio

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def has_pending(self) -> bool:
        """Whether a generation task is still running."""
        return bool(self._tasks)

    def snapshot(self) -> GenerationSnapshot:
        return GenerationSnapshot(
            prompt=self._prompt,
            aspect_ratio=self._aspect_ratio,
            state=self._state,
            version=self._version,
        )

    # Form fields

    def set_prompt(self, prompt: str) -> None:
        if prompt != self._prompt:
            self._prompt = prompt
            self._publish()

    def select_aspect_ratio(self, aspect_ratio: AspectRatio | str) -> None:
        """Select an aspect ratio. Raises ValueError for values outside the enum."""
        aspect_ratio = AspectRatio(aspect_ratio)
        if aspect_ratio != self._aspect_ratio:
            self._aspect_ratio = aspect_ratio
            self._publish()

    # Request lifecycle

    def issue(self) -> GenerationRequest | None:
        """
        Validate the form and enter the loading state.

        Returns the request to send, or None when the prompt is blank, in
        which case the state already holds the validation error. Either way
        any request still in flight is superseded.
        """
        self._sequence += 1

        if not self._prompt.strip():
            self._set_state(Failed(message=EMPTY_PROMPT_MESSAGE))
            return None

        request = GenerationRequest(
            prompt=self._prompt,
            aspect_ratio=self._aspect_ratio,
            sequence=self._sequence,
        )
        logger.info(
            "Issuing generation request #%d (aspect ratio %s)",
            request.sequence, request.aspect_ratio.value,
        )
        self._set_state(Loading())
        return request

    async def settle(self, request: GenerationRequest) -> None:
        """Run the remote call for an issued request and reconcile its outcome."""
        try:
            image_url = await self._generate(request.prompt, request.aspect_ratio)
            outcome = Succeeded(image_url=image_url)
        except asyncio.CancelledError:
            self._apply(request, Failed(message=CANCELLED_MESSAGE))
            raise
        except Exception as e:
            logger.info("Generation request #%d failed: %r", request.sequence, e)
            outcome = Failed(message=describe_failure(e))

        self._apply(request, outcome)

    async def submit(self) -> GenerationSnapshot:
        """
        Validate, call the image generator and wait for the outcome.

        The call runs as a tracked task, so the session counts as busy and
        aclose() can cancel it.
        """
        task = self.submit_in_background()
        if task is not None:
            await task
        return self.snapshot()

    def submit_in_background(self) -> asyncio.Task | None:
        """
        Validate and enter the loading state now, and run the remote call as
        a task on the running loop. Returns None if validation failed.
        """
        request = self.issue()
        if request is None:
            return None

        task = asyncio.create_task(self.settle(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def aclose(self) -> None:
        """Cancel any generation still running."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        # A task cancelled before it started never reaches settle()
        if self._state.is_loading:
            self._set_state(Failed(message=CANCELLED_MESSAGE))

    # Observation

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with every new snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def wait_for_change(self, after_version: int, timeout: float) -> GenerationSnapshot:
        """
        Wait until the version moves past ``after_version``.

        Returns the current snapshot once it does, or when the timeout expires.
        """
        if self._version <= after_version:
            changed = self._changed
            try:
                await asyncio.wait_for(changed.wait(), timeout)
            except asyncio.TimeoutError:
                pass
        return self.snapshot()

    def _apply(self, request: GenerationRequest, outcome: GenerationState) -> None:
        if request.sequence != self._sequence:
            logger.debug(
                "Discarding outcome of superseded request #%d (latest is #%d)",
                request.sequence, self._sequence,
            )
            return
        self._set_state(outcome)

    def _set_state(self, state: GenerationState) -> None:
        self._state = state
        self._publish()

    def _publish(self) -> None:
        self._version += 1
        changed, self._changed = self._changed, asyncio.Event()
        changed.set()

        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Generation state listener failed")
