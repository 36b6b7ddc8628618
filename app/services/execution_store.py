# app/services/execution_store.py
"""
Where live workout executions are kept between requests.

The execution state is ephemeral: it only matters while the user is working
out, and it is flushed to the database through the completion/termination
hand-off. Two backends are provided, an in-process dict for a single worker
(and tests) and Redis for anything that runs more than one worker.

Every read-modify-write of a session's state must happen inside
``store.lock(session_id)`` so a trigger is never applied to a stale copy.
"""
import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from redis.exceptions import LockError

from app.core.exceptions import ExecutionBusyError, ExecutionNotFoundError
from app.services.workout_execution import ExecutionState

logger = logging.getLogger(__name__)


def execution_key(session_id: str) -> str:
    return f"workout_execution:{session_id}"


def lock_key(session_id: str) -> str:
    return f"{execution_key(session_id)}:lock"


class MemoryExecutionStore:
    def __init__(self):
        self._states: Dict[str, str] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @asynccontextmanager
    async def lock(self, session_id: str):
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        async with lock:
            yield

    async def get(self, session_id: str) -> Optional[ExecutionState]:
        raw = self._states.get(execution_key(session_id))
        if raw is None:
            return None
        return ExecutionState.from_dict(json.loads(raw))

    async def save(self, state: ExecutionState) -> None:
        # Stored serialised so callers never share a mutable state object
        self._states[execution_key(state.session_id)] = json.dumps(state.to_dict())

    async def delete(self, session_id: str) -> bool:
        return self._states.pop(execution_key(session_id), None) is not None

    def clear(self) -> None:
        self._states.clear()
        self._locks.clear()


class RedisExecutionStore:
    def __init__(self, client, ttl_seconds: int, lock_timeout: int = 30, lock_wait: int = 10):
        self.client = client
        self.ttl_seconds = ttl_seconds
        # lock_timeout bounds how long a crashed worker can hold the lock
        self.lock_timeout = lock_timeout
        self.lock_wait = lock_wait

    @asynccontextmanager
    async def lock(self, session_id: str):
        lock = self.client.lock(
            lock_key(session_id),
            timeout=self.lock_timeout,
            blocking_timeout=self.lock_wait,
        )
        if not await lock.acquire():
            logger.warning(f"Timed out waiting for execution lock of session {session_id}")
            raise ExecutionBusyError(session_id)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError as e:
                logger.warning(f"Execution lock for session {session_id} expired before release: {e}")

    async def get(self, session_id: str) -> Optional[ExecutionState]:
        raw = await self.client.get(execution_key(session_id))
        if raw is None:
            return None
        try:
            return ExecutionState.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Corrupt execution state for session {session_id}: {e}")
            await self.client.delete(execution_key(session_id))
            return None

    async def save(self, state: ExecutionState) -> None:
        await self.client.set(
            execution_key(state.session_id),
            json.dumps(state.to_dict()),
            ex=self.ttl_seconds,
        )

    async def delete(self, session_id: str) -> bool:
        removed = await self.client.delete(execution_key(session_id))
        return bool(removed)


async def load_execution(store, session_id: str) -> ExecutionState:
    state = await store.get(session_id)
    if state is None:
        raise ExecutionNotFoundError(session_id)
    return state
