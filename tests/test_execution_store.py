import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import LockNotOwnedError

from app.core.exceptions import ExecutionBusyError, ExecutionNotFoundError
from app.services.execution_store import (
    MemoryExecutionStore,
    RedisExecutionStore,
    execution_key,
    load_execution,
    lock_key,
)
from app.services.workout_analysis import PlannedExercise
from app.services.workout_execution import Phase, WorkoutExecution


@pytest.fixture
def state(clock):
    planned = [PlannedExercise(exercise_id=1, order=1, sets=2, reps=10, rest_between_sets=60)]
    execution = WorkoutExecution.begin("session-42", planned, clock=clock)
    execution.record_set(10, 12.5)
    return execution.state


def test_memory_store_round_trip(state):
    store = MemoryExecutionStore()

    asyncio.run(store.save(state))
    loaded = asyncio.run(store.get("session-42"))

    assert loaded is not state
    assert loaded.phase == Phase.RESTING
    assert loaded.completed_sets == [[10, 0]]
    assert loaded.weights == [[12.5, 0]]


def test_memory_store_delete(state):
    store = MemoryExecutionStore()
    asyncio.run(store.save(state))

    assert asyncio.run(store.delete("session-42")) is True
    assert asyncio.run(store.delete("session-42")) is False
    assert asyncio.run(store.get("session-42")) is None


def test_load_execution_raises_when_missing():
    with pytest.raises(ExecutionNotFoundError):
        asyncio.run(load_execution(MemoryExecutionStore(), "nope"))


def test_redis_store_saves_with_ttl(state):
    client = AsyncMock()
    store = RedisExecutionStore(client, ttl_seconds=3600)

    asyncio.run(store.save(state))

    client.set.assert_awaited_once()
    args, kwargs = client.set.call_args
    assert args[0] == "workout_execution:session-42"
    assert json.loads(args[1])["phase"] == "resting"
    assert kwargs == {"ex": 3600}


def test_redis_store_get(state):
    client = AsyncMock()
    client.get.return_value = json.dumps(state.to_dict())
    store = RedisExecutionStore(client, ttl_seconds=3600)

    loaded = asyncio.run(store.get("session-42"))

    client.get.assert_awaited_once_with(execution_key("session-42"))
    assert loaded.session_id == "session-42"
    assert loaded.countdown.remaining_seconds == 60


def test_redis_store_drops_corrupt_state():
    client = AsyncMock()
    client.get.return_value = "{not json"
    store = RedisExecutionStore(client, ttl_seconds=3600)

    assert asyncio.run(store.get("session-42")) is None
    client.delete.assert_awaited_once_with("workout_execution:session-42")


def test_redis_store_delete_reports_removal():
    client = AsyncMock()
    client.delete.return_value = 0
    store = RedisExecutionStore(client, ttl_seconds=3600)

    assert asyncio.run(store.delete("session-42")) is False


# ---- locking ----

def test_memory_lock_serialises_callers():
    store = MemoryExecutionStore()
    events = []

    async def worker(name):
        async with store.lock("session-42"):
            events.append(f"{name} in")
            await asyncio.sleep(0)
            events.append(f"{name} out")

    async def other_session():
        async with store.lock("other"):
            events.append("other")

    async def both():
        await asyncio.gather(worker("a"), worker("b"), other_session())

    asyncio.run(both())

    session_events = [e for e in events if e != "other"]
    assert session_events == ["a in", "a out", "b in", "b out"]
    assert events.index("other") < events.index("a out")


def _redis_lock(acquired=True):
    lock = MagicMock()
    lock.acquire = AsyncMock(return_value=acquired)
    lock.release = AsyncMock()
    client = AsyncMock()
    client.lock = MagicMock(return_value=lock)
    return client, lock


def test_redis_lock_acquires_and_releases():
    client, lock = _redis_lock()
    store = RedisExecutionStore(client, ttl_seconds=3600, lock_timeout=20, lock_wait=5)

    async def run():
        async with store.lock("session-42"):
            lock.release.assert_not_awaited()

    asyncio.run(run())

    client.lock.assert_called_once_with(lock_key("session-42"), timeout=20, blocking_timeout=5)
    lock.acquire.assert_awaited_once()
    lock.release.assert_awaited_once()


def test_redis_lock_busy():
    client, lock = _redis_lock(acquired=False)
    store = RedisExecutionStore(client, ttl_seconds=3600)

    async def run():
        async with store.lock("session-42"):
            pass

    with pytest.raises(ExecutionBusyError):
        asyncio.run(run())
    lock.release.assert_not_awaited()


def test_redis_lock_expired_before_release():
    client, lock = _redis_lock()
    lock.release.side_effect = LockNotOwnedError("expired")
    store = RedisExecutionStore(client, ttl_seconds=3600)

    async def run():
        async with store.lock("session-42"):
            return "done"

    assert asyncio.run(run()) == "done"
