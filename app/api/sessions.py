# app/api/sessions.py

import logging
from datetime import datetime, timezone
from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import get_db
from app.db import db_access
from app.db.models import (
    Exercise as DBExercise,
    SessionExercise as DBSessionExercise,
    WorkoutSession as DBWorkoutSession,
)
from app.models.common import BaseResponse, DataResponse
from app.models.session import (
    CompleteSessionRequest,
    InstantiateTemplateRequest,
    Session as SessionSchema,
    SessionCreate,
    SessionExerciseCreate,
    SessionExerciseResultUpdate,
    SessionRename,
    SessionUpdate,
    TerminateSessionRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["Sessions"])

SessionFilter = Literal["all", "completed", "templates"]


# --------------------------- helpers ---------------------------------------

def _session_query(db: Session):
    return db.query(DBWorkoutSession).options(
        selectinload(DBWorkoutSession.session_exercises).selectinload(DBSessionExercise.exercise)
    )


def _get_session_or_404(db: Session, session_id: str) -> DBWorkoutSession:
    session = _session_query(db).filter(DBWorkoutSession.id == session_id).first()
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _check_exercises_exist(db: Session, planned: List[SessionExerciseCreate]) -> None:
    wanted = {p.exercise_id for p in planned}
    if not wanted:
        return
    found = {row.id for row in db.query(DBExercise.id).filter(DBExercise.id.in_(wanted)).all()}
    missing = sorted(wanted - found)
    if missing:
        raise HTTPException(status_code=400, detail=f"Unknown exercise id(s): {missing}")


def _create_session(db: Session, payload: SessionCreate, is_template: bool) -> DBWorkoutSession:
    _check_exercises_exist(db, payload.exercises)

    session = DBWorkoutSession(
        title=payload.title,
        date=payload.date or datetime.now(timezone.utc),
        warmup_seconds=payload.warmup_seconds,
        is_template=is_template,
    )
    for planned in payload.exercises:
        session.session_exercises.append(DBSessionExercise(**planned.model_dump()))

    db.add(session)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating session '{payload.title}': {e}")
        raise HTTPException(status_code=500, detail="Failed to create session")

    logger.info(
        f"Created {'template' if is_template else 'session'} {session.id} "
        f"with {len(payload.exercises)} exercises"
    )
    return _get_session_or_404(db, session.id)


def _reject_template(session: DBWorkoutSession) -> None:
    if session.is_template:
        raise HTTPException(status_code=400, detail="Templates cannot be completed; instantiate them first")


def _ensure_results_match(session: DBWorkoutSession, results) -> None:
    taken: List[str] = []
    for result in results:
        se = db_access.find_session_exercise(
            session, result.exercise_id, result.session_exercise_id, taken=taken
        )
        if se is None:
            raise HTTPException(
                status_code=400,
                detail=f"Exercise {result.exercise_id} is not part of session {session.id}",
            )
        taken.append(se.id)


def _result_dicts(results) -> List[dict]:
    return [r.model_dump() for r in results]


# --------------------------- templates -------------------------------------
# Declared before "/{session_id}" so "templates" is not captured as an id.

@router.get("/templates", response_model=DataResponse[List[SessionSchema]])
def list_templates(db: Session = Depends(get_db)):
    templates = (
        _session_query(db)
        .filter(DBWorkoutSession.is_template.is_(True))
        .order_by(DBWorkoutSession.title.asc())
        .all()
    )
    return DataResponse(
        success=True,
        message=f"{len(templates)} templates",
        data=[SessionSchema.model_validate(t) for t in templates],
    )


@router.post("/templates", response_model=DataResponse[SessionSchema], status_code=201)
def create_template(payload: SessionCreate, db: Session = Depends(get_db)):
    template = _create_session(db, payload, is_template=True)
    return DataResponse(success=True, message="Template created", data=SessionSchema.model_validate(template))


@router.post("/templates/{template_id}/instantiate", response_model=DataResponse[SessionSchema], status_code=201)
def instantiate_template(
    template_id: str,
    payload: Optional[InstantiateTemplateRequest] = None,
    db: Session = Depends(get_db),
):
    """Copy a template's planned exercises into a new, dated session."""
    template = _get_session_or_404(db, template_id)
    if not template.is_template:
        raise HTTPException(status_code=400, detail="Session is not a template")

    payload = payload or InstantiateTemplateRequest()
    title = (payload.title or "").strip() or template.title
    session = DBWorkoutSession(
        title=title,
        date=payload.date or datetime.now(timezone.utc),
        warmup_seconds=template.warmup_seconds,
        is_template=False,
    )
    for se in template.session_exercises:
        session.session_exercises.append(
            DBSessionExercise(
                exercise_id=se.exercise_id,
                order=se.order,
                sets=se.sets,
                reps=se.reps,
                duration_seconds=se.duration_seconds,
                rest_between_sets=se.rest_between_sets,
                rest_after=se.rest_after,
            )
        )

    db.add(session)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error instantiating template {template_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create session from template")

    logger.info(f"Instantiated template {template_id} as session {session.id}")
    created = _get_session_or_404(db, session.id)
    return DataResponse(success=True, message="Session created from template", data=SessionSchema.model_validate(created))


# --------------------------- sessions --------------------------------------

@router.get("", response_model=DataResponse[List[SessionSchema]])
def list_sessions(
    filter_: SessionFilter = Query("all", alias="filter"),
    search: str = Query(""),
    db: Session = Depends(get_db),
):
    """List sessions, newest first. ``all`` and ``completed`` exclude templates."""
    query = _session_query(db)
    if filter_ == "templates":
        query = query.filter(DBWorkoutSession.is_template.is_(True))
    else:
        query = query.filter(DBWorkoutSession.is_template.is_(False))
        if filter_ == "completed":
            query = query.filter(DBWorkoutSession.completed.is_(True))

    search = search.strip()
    if search:
        query = query.filter(DBWorkoutSession.title.ilike(f"%{search}%"))

    sessions = query.order_by(DBWorkoutSession.date.desc()).all()
    return DataResponse(
        success=True,
        message=f"{len(sessions)} sessions",
        data=[SessionSchema.model_validate(s) for s in sessions],
    )


@router.post("", response_model=DataResponse[SessionSchema], status_code=201)
def create_session(payload: SessionCreate, db: Session = Depends(get_db)):
    session = _create_session(db, payload, is_template=payload.is_template)
    return DataResponse(success=True, message="Session created", data=SessionSchema.model_validate(session))


@router.get("/{session_id}", response_model=DataResponse[SessionSchema])
def get_session(session_id: str, db: Session = Depends(get_db)):
    """A session with its ordered planned exercises and warm-up."""
    session = _get_session_or_404(db, session_id)
    return DataResponse(success=True, message="Session found", data=SessionSchema.model_validate(session))


@router.put("/{session_id}", response_model=DataResponse[SessionSchema])
def update_session(session_id: str, payload: SessionUpdate, db: Session = Depends(get_db)):
    session = _get_session_or_404(db, session_id)

    changes = payload.model_dump(exclude_unset=True)
    if "title" in changes:
        title = (changes["title"] or "").strip()
        if not title:
            raise HTTPException(status_code=400, detail="Title cannot be empty")
        changes["title"] = title
    for field, value in changes.items():
        if value is None and field in ("date", "warmup_seconds", "is_template", "completed"):
            continue
        setattr(session, field, value)

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating session {session_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update session")

    db.expire_all()
    session = _get_session_or_404(db, session_id)
    return DataResponse(success=True, message="Session updated", data=SessionSchema.model_validate(session))


@router.put("/{session_id}/rename", response_model=DataResponse[SessionSchema])
def rename_session(session_id: str, payload: SessionRename, db: Session = Depends(get_db)):
    title = (payload.title or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail="Title is required")

    session = _get_session_or_404(db, session_id)
    session.title = title
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error renaming session {session_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to rename session")

    db.refresh(session)
    return DataResponse(success=True, message="Session renamed", data=SessionSchema.model_validate(session))


@router.delete("/{session_id}", response_model=BaseResponse)
def delete_session(session_id: str, db: Session = Depends(get_db)):
    session = _get_session_or_404(db, session_id)
    try:
        db.delete(session)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting session {session_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete session")
    return BaseResponse(success=True, message="Session deleted")


# --------------------------- results ---------------------------------------

@router.put("/{session_id}/exercises", response_model=DataResponse[SessionSchema])
def update_exercise_results(
    session_id: str,
    payload: SessionExerciseResultUpdate,
    db: Session = Depends(get_db),
):
    """Record actual sets, reps (or seconds) and weights for one planned exercise."""
    session = _get_session_or_404(db, session_id)
    _ensure_results_match(session, [payload])

    result = db_access.update_session_exercise_results(session_id, payload.model_dump())
    if not result:
        raise HTTPException(status_code=500, detail=result.message)

    db.expire_all()
    session = _get_session_or_404(db, session_id)
    return DataResponse(success=True, message=result.message, data=SessionSchema.model_validate(session))


@router.put("/{session_id}/complete", response_model=DataResponse[SessionSchema])
def complete_session(session_id: str, payload: CompleteSessionRequest, db: Session = Depends(get_db)):
    """Persist a finished workout: duration plus results for its exercises."""
    session = _get_session_or_404(db, session_id)
    _reject_template(session)
    _ensure_results_match(session, payload.exercises)

    result = db_access.complete_session(session_id, payload.duration, _result_dicts(payload.exercises))
    if not result:
        raise HTTPException(status_code=500, detail=result.message)

    db.expire_all()
    session = _get_session_or_404(db, session_id)
    return DataResponse(success=True, message=result.message, data=SessionSchema.model_validate(session))


@router.put("/{session_id}/terminate", response_model=DataResponse[SessionSchema])
def terminate_session(session_id: str, payload: TerminateSessionRequest, db: Session = Depends(get_db)):
    """Persist a workout that was ended early."""
    session = _get_session_or_404(db, session_id)
    _reject_template(session)
    _ensure_results_match(session, payload.completed_exercises)

    result = db_access.terminate_session(
        session_id, payload.actual_duration, _result_dicts(payload.completed_exercises)
    )
    if not result:
        raise HTTPException(status_code=500, detail=result.message)

    db.expire_all()
    session = _get_session_or_404(db, session_id)
    return DataResponse(success=True, message=result.message, data=SessionSchema.model_validate(session))
