"""Tests for the per-conversation lock registry."""

import asyncio

import pytest

from services.locks import ConversationLocks


async def test_entry_lives_while_held_or_awaited() -> None:
    locks = ConversationLocks()
    order = []

    async def worker(name: str) -> None:
        async with locks.hold("c1"):
            order.append(f"{name} in")
            await asyncio.sleep(0)
            order.append(f"{name} out")

    first = asyncio.create_task(worker("a"))
    second = asyncio.create_task(worker("b"))
    await asyncio.sleep(0)
    assert len(locks) == 1

    await asyncio.gather(first, second)

    assert order == ["a in", "a out", "b in", "b out"]
    assert len(locks) == 0


async def test_entry_is_removed_when_the_body_raises() -> None:
    locks = ConversationLocks()

    with pytest.raises(RuntimeError):
        async with locks.hold("c1"):
            raise RuntimeError("boom")

    assert len(locks) == 0


async def test_different_conversations_do_not_wait_on_each_other() -> None:
    locks = ConversationLocks()

    async with locks.hold("c1"):
        async with locks.hold("c2"):
            assert len(locks) == 2

    assert len(locks) == 0
