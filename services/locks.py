# services/locks.py
# Per-conversation asyncio locks so two advances on the same conversation
# inside one process run one after the other. An entry lives only while
# some coroutine holds or waits for it.
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List


class ConversationLocks:
    def __init__(self):
        # conversation id -> [lock, number of holders + waiters]
        self._locks: Dict[str, List] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, conversation_id: str) -> AsyncIterator[None]:
        entry = self._locks.get(conversation_id)
        if entry is None:
            entry = self._locks[conversation_id] = [asyncio.Lock(), 0]
        entry[1] += 1
        try:
            async with entry[0]:
                yield
        finally:
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[conversation_id]


conversation_locks = ConversationLocks()
