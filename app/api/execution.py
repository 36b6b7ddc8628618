# app/api/execution.py
"""
Guided workout execution.

The phase state machine lives in ``app.services.workout_execution``; these
routes load the live state from the execution store, fire one trigger and
save it back, holding the store lock for the session throughout. Countdowns
only move when something posts to ``/tick``. Triggers run in a worker thread,
where completion, termination and retry write to the database.
"""
import asyncio
import logging

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_execution_store
from app.core.exceptions import (
    EmptySessionError,
    ExecutionBusyError,
    ExecutionNotFoundError,
    InvalidTransitionError,
)
from app.db.db_access import DBSessionRecorder, load_session, planned_sequence
from app.models.common import BaseResponse, DataResponse
from app.models.execution import (
    Countdown,
    ExecutionSnapshot,
    Handoff,
    PlannedExercise,
    RecordSetRequest,
    TickRequest,
    WorkoutStats,
)
from app.services.execution_store import load_execution
from app.services.workout_analysis import format_duration, termination_summary
from app.services.workout_execution import (
    TERMINAL_PHASES,
    HandoffStatus,
    WorkoutExecution,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions/{session_id}/execution", tags=["Workout Execution"])


# --------------------------- helpers ---------------------------------------

def _snapshot(execution: WorkoutExecution) -> ExecutionSnapshot:
    state = execution.state
    stats = execution.stats()
    current = execution.current_exercise
    handoff = state.handoff

    return ExecutionSnapshot(
        session_id=state.session_id,
        phase=state.phase.value,
        warmup_seconds=state.warmup_seconds,
        current_exercise_index=state.current_exercise_index,
        current_set_number=state.current_set_number,
        current_exercise=PlannedExercise(**current.to_dict()) if current else None,
        planned=[PlannedExercise(**p.to_dict()) for p in state.planned],
        countdown=Countdown(
            remaining_seconds=state.countdown.remaining_seconds,
            active=state.countdown.active,
        ),
        completed_sets=state.completed_sets,
        weights=state.weights,
        overall_progress=execution.overall_progress(),
        elapsed_seconds=stats.actual_duration,
        elapsed_display=format_duration(stats.actual_duration),
        session_start_time=state.session_start_time,
        ended_at=state.ended_at,
        stats=WorkoutStats.model_validate(stats),
        summary=termination_summary(stats),
        handoff=Handoff(
            kind=handoff.kind,
            status=handoff.status.value,
            message=handoff.message,
            attempts=handoff.attempts,
            duration=handoff.duration,
        ) if handoff else None,
    )


async def _load(store, session_id: str) -> WorkoutExecution:
    try:
        state = await load_execution(store, session_id)
    except ExecutionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return WorkoutExecution(state, recorder=DBSessionRecorder())


async def _fire(store, session_id: str, trigger: str, *args) -> DataResponse[ExecutionSnapshot]:
    """Run one trigger against the stored execution and persist the new state."""
    try:
        async with store.lock(session_id):
            execution = await _load(store, session_id)
            try:
                # The trigger may hand the workout over to the database
                await asyncio.to_thread(getattr(execution, trigger), *args)
            except InvalidTransitionError as e:
                raise HTTPException(status_code=409, detail=str(e))
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

            await store.save(execution.state)
    except ExecutionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return DataResponse(success=True, message=f"Phase: {execution.phase.value}", data=_snapshot(execution))


# --------------------------- routes ----------------------------------------

@router.post("", response_model=DataResponse[ExecutionSnapshot], status_code=201)
async def start_execution(
    session_id: str,
    db: Session = Depends(get_db),
    store=Depends(get_execution_store),
):
    """Load the session's planned exercises and start executing it."""
    session = await asyncio.to_thread(load_session, db, session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    if session.is_template:
        raise HTTPException(status_code=409, detail="Templates must be instantiated before they are executed")
    if session.completed:
        raise HTTPException(status_code=409, detail="Session is already completed")

    try:
        execution = WorkoutExecution.begin(
            session_id,
            planned_sequence(session),
            warmup_seconds=session.warmup_seconds or 0,
            recorder=DBSessionRecorder(),
        )
    except EmptySessionError as e:
        logger.warning(str(e))
        raise HTTPException(status_code=422, detail=str(e))

    try:
        async with store.lock(session_id):
            existing = await store.get(session_id)
            if existing is not None:
                if existing.phase not in TERMINAL_PHASES:
                    raise HTTPException(status_code=409, detail="A workout is already in progress for this session")
                if existing.handoff and existing.handoff.status in (HandoffStatus.FAILED, HandoffStatus.PENDING):
                    raise HTTPException(
                        status_code=409,
                        detail="The previous run of this session was not saved; retry or discard it first",
                    )
            await store.save(execution.state)
    except ExecutionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return DataResponse(success=True, message="Workout started", data=_snapshot(execution))


@router.get("", response_model=DataResponse[ExecutionSnapshot])
async def get_execution(session_id: str, store=Depends(get_execution_store)):
    execution = await _load(store, session_id)
    return DataResponse(success=True, message=f"Phase: {execution.phase.value}", data=_snapshot(execution))


@router.post("/tick", response_model=DataResponse[ExecutionSnapshot])
async def tick(session_id: str, payload: TickRequest, store=Depends(get_execution_store)):
    """Advance the active countdown; no-op when nothing is counting down."""
    return await _fire(store, session_id, "tick", payload.seconds)


@router.post("/warmup/start", response_model=DataResponse[ExecutionSnapshot])
async def start_warmup(session_id: str, store=Depends(get_execution_store)):
    return await _fire(store, session_id, "start_warmup")


@router.post("/warmup/complete", response_model=DataResponse[ExecutionSnapshot])
async def complete_warmup(session_id: str, store=Depends(get_execution_store)):
    return await _fire(store, session_id, "complete_warmup")


@router.post("/warmup/skip", response_model=DataResponse[ExecutionSnapshot])
async def skip_warmup(session_id: str, store=Depends(get_execution_store)):
    return await _fire(store, session_id, "skip_warmup")


@router.post("/sets", response_model=DataResponse[ExecutionSnapshot])
async def record_set(session_id: str, payload: RecordSetRequest, store=Depends(get_execution_store)):
    """Record reps (or seconds held) and weight for the current set."""
    return await _fire(store, session_id, "record_set", payload.value, payload.weight)


@router.post("/rest/skip", response_model=DataResponse[ExecutionSnapshot])
async def skip_rest(session_id: str, store=Depends(get_execution_store)):
    return await _fire(store, session_id, "skip_rest")


@router.post("/terminate", response_model=DataResponse[ExecutionSnapshot])
async def terminate(session_id: str, store=Depends(get_execution_store)):
    """End the workout early, saving completed and partial exercises."""
    return await _fire(store, session_id, "terminate")


@router.post("/handoff/retry", response_model=DataResponse[ExecutionSnapshot])
async def retry_handoff(session_id: str, store=Depends(get_execution_store)):
    return await _fire(store, session_id, "retry_handoff")


@router.delete("", response_model=BaseResponse)
async def discard_execution(session_id: str, store=Depends(get_execution_store)):
    """Drop the live execution without saving anything."""
    try:
        async with store.lock(session_id):
            removed = await store.delete(session_id)
    except ExecutionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not removed:
        raise HTTPException(status_code=404, detail=str(ExecutionNotFoundError(session_id)))
    logger.info(f"Discarded execution for session {session_id}")
    return BaseResponse(success=True, message="Workout discarded")
