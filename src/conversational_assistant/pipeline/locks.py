import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ConversationLocks:
    """
    Per-conversation serialization slots.

    Each conversation id maps to an 'asyncio.Lock', created on first use and
    discarded once nobody holds or waits for it. 'asyncio.Lock' hands the lock
    to waiters in the order they started waiting, so runs for one conversation
    proceed in arrival order while different conversations never contend.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, conversation_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(conversation_id, asyncio.Lock())
        self._users[conversation_id] = self._users.get(conversation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[conversation_id] -= 1
            if self._users[conversation_id] == 0:
                del self._users[conversation_id]
                del self._locks[conversation_id]

    def is_busy(self, conversation_id: str) -> bool:
        return conversation_id in self._users

    def __len__(self) -> int:
        return len(self._locks)
