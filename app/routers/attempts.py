"""Attempts router: opening learner sessions against ingested courses."""
from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.config import get_session
from app.models.api import AttemptOut, CreateAttemptRequest
from app.repositories.attempt_repo import AttemptNotFoundError, AttemptRepository
from app.repositories.course_repo import (
    CourseNotFoundError,
    CourseRepository,
    ScoNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attempts", tags=["Attempts"])


async def _get_attempts(
    session: AsyncSession = Depends(get_session),
) -> AttemptRepository:
    return AttemptRepository(session)


async def _get_courses(
    session: AsyncSession = Depends(get_session),
) -> CourseRepository:
    return CourseRepository(session)


@router.post(
    "",
    response_model=AttemptOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_attempt(
    payload: CreateAttemptRequest,
    attempts: AttemptRepository = Depends(_get_attempts),
    courses: CourseRepository = Depends(_get_courses),
):
    """Start an in-progress attempt for a learner."""
    try:
        await courses.get(payload.course_id)
        if payload.sco_id:
            await courses.get_sco(payload.course_id, payload.sco_id)
    except CourseNotFoundError:
        raise HTTPException(status_code=400, detail="course not found")
    except ScoNotFoundError:
        raise HTTPException(
            status_code=400, detail="sco not found for this course"
        )

    record = await attempts.create(
        course_id=payload.course_id,
        learner_id=payload.learner_id,
        sco_id=payload.sco_id,
    )
    logger.info(
        f"Attempt {record.id} started for learner {payload.learner_id} "
        f"on course {payload.course_id}"
    )
    return record.to_dict()


@router.get("/{attempt_id}", response_model=AttemptOut)
async def get_attempt(
    attempt_id: str, attempts: AttemptRepository = Depends(_get_attempts)
):
    try:
        record = await attempts.get(attempt_id)
    except AttemptNotFoundError:
        raise HTTPException(status_code=404, detail="Attempt not found")
    return record.to_dict()
