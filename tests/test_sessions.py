import asyncio

import pytest

from imagestudio.schemas import AspectRatio, Failed
from imagestudio.services.orchestrator import CANCELLED_MESSAGE
from imagestudio.services.sessions import SessionRegistry
from tests.fakes import FakeImageGenerator, GatedImageGenerator


def test_unknown_session_gets_fresh_orchestrator():
    registry = SessionRegistry(
        FakeImageGenerator(),
        default_prompt="a cat",
        default_aspect_ratio=AspectRatio.LANDSCAPE_16_9,
    )

    session_id, orchestrator = registry.get_or_create("not-a-session")

    assert session_id != "not-a-session"
    assert session_id in registry
    assert orchestrator.prompt == "a cat"
    assert orchestrator.aspect_ratio == AspectRatio.LANDSCAPE_16_9


def test_known_session_is_reused():
    registry = SessionRegistry(FakeImageGenerator())
    session_id, orchestrator = registry.get_or_create(None)

    same_id, same = registry.get_or_create(session_id)

    assert same_id == session_id
    assert same is orchestrator
    assert len(registry) == 1


def test_least_recently_used_session_is_evicted():
    registry = SessionRegistry(FakeImageGenerator(), max_sessions=2)
    first_id, _ = registry.get_or_create(None)
    second_id, _ = registry.get_or_create(None)
    registry.get_or_create(first_id)

    third_id, _ = registry.get_or_create(None)

    assert len(registry) == 2
    assert second_id not in registry
    assert first_id in registry
    assert third_id in registry


@pytest.mark.asyncio
async def test_busy_session_is_not_evicted():
    registry = SessionRegistry(GatedImageGenerator(), default_prompt="a cat", max_sessions=1)
    busy_id, busy = registry.get_or_create(None)
    busy.submit_in_background()
    await asyncio.sleep(0)

    other_id, _ = registry.get_or_create(None)

    assert busy_id in registry
    assert other_id in registry
    await registry.aclose()


@pytest.mark.asyncio
async def test_aclose_cancels_pending_generations():
    registry = SessionRegistry(GatedImageGenerator(), default_prompt="a cat")
    _, orchestrator = registry.get_or_create(None)
    orchestrator.submit_in_background()

    await registry.aclose()

    assert orchestrator.state == Failed(message=CANCELLED_MESSAGE)
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_session_waiting_on_submit_is_not_evicted():
    generator = GatedImageGenerator()
    registry = SessionRegistry(generator, default_prompt="a cat", max_sessions=1)
    busy_id, busy = registry.get_or_create(None)
    waiting = asyncio.create_task(busy.submit())
    await asyncio.sleep(0)

    assert busy.state.is_loading
    assert busy.has_pending
    other_id, _ = registry.get_or_create(None)

    assert busy_id in registry
    assert other_id in registry

    await asyncio.sleep(0)
    generator.succeed(0, "data:image/png;base64,AA==")
    snapshot = await waiting
    assert snapshot.state.result_image == "data:image/png;base64,AA=="
    assert not busy.has_pending
