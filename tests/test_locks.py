import asyncio

import pytest

from conversational_assistant.pipeline.locks import ConversationLocks


@pytest.mark.asyncio
async def test_same_conversation_runs_in_arrival_order():
    locks = ConversationLocks()
    order: list[str] = []

    async def run(name: str) -> None:
        async with locks.hold("c1"):
            order.append(f"{name} start")
            await asyncio.sleep(0.01)
            order.append(f"{name} end")

    await asyncio.gather(run("a"), run("b"), run("c"))

    assert order == ["a start", "a end", "b start", "b end", "c start", "c end"]


@pytest.mark.asyncio
async def test_lock_is_released_and_forgotten_after_errors():
    locks = ConversationLocks()

    with pytest.raises(RuntimeError):
        async with locks.hold("c1"):
            assert locks.is_busy("c1")
            raise RuntimeError("boom")

    assert not locks.is_busy("c1")
    assert len(locks) == 0
    async with locks.hold("c1"):
        pass
