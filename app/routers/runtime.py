"""SCORM 1.2 runtime router.

Endpoints the player shell calls while a SCO is running. Submitted tracking
values pass through the CMI element validator; rejected pairs are dropped
without failing the request so a noncompliant player cannot break the
learner's session.
"""
from __future__ import annotations
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.config import get_session
from app.models.api import (
    CommitResponse,
    RuntimeGetRequest,
    RuntimeSetRequest,
    RuntimeValuesResponse,
)
from app.repositories.attempt_repo import AttemptNotFoundError, AttemptRepository
from app.scorm.cmi import (
    LESSON_STATUS,
    filter_values,
    is_completion_status,
    stringify,
    validate_element,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/runtime/{attempt_id}", tags=["Runtime"])


async def _get_attempts(
    attempt_id: str,
    session: AsyncSession = Depends(get_session),
) -> AttemptRepository:
    """Repository scoped to an existing attempt; 404 otherwise."""
    repo = AttemptRepository(session)
    try:
        await repo.get(attempt_id)
    except AttemptNotFoundError:
        raise HTTPException(status_code=404, detail="Attempt not found")
    return repo


@router.post("/initialize", response_model=RuntimeValuesResponse)
async def rt_initialize(
    attempt_id: str, repo: AttemptRepository = Depends(_get_attempts)
):
    return {"values": await repo.values(attempt_id)}


@router.post("/set")
async def rt_set(
    attempt_id: str,
    payload: RuntimeSetRequest,
    repo: AttemptRepository = Depends(_get_attempts),
) -> Dict[str, Any]:
    check = validate_element(payload.element, stringify(payload.value))
    if not check.accepted:
        logger.debug(f"Rejected {payload.element} for {attempt_id}: {check.reason}")
        return {"ok": False, "reason": check.reason}
    await repo.upsert_values(attempt_id, {check.element: check.value})
    if check.element == LESSON_STATUS and is_completion_status(check.value):
        await repo.mark_completed(attempt_id)
    return {"ok": True}


@router.post("/get")
async def rt_get(
    attempt_id: str,
    payload: RuntimeGetRequest,
    repo: AttemptRepository = Depends(_get_attempts),
) -> Dict[str, str]:
    value = await repo.get_value(attempt_id, payload.element)
    return {"value": value or ""}


@router.post("/commit", response_model=CommitResponse)
async def rt_commit(
    attempt_id: str,
    values: Dict[str, Any] = Body(...),
    repo: AttemptRepository = Depends(_get_attempts),
):
    """Persist every accepted element of the player's cache."""
    result = filter_values(values)
    if result.accepted:
        await repo.upsert_values(attempt_id, result.accepted)
    # a commit without a status still completes once the stored one is final
    completed = result.completes_attempt or is_completion_status(
        await repo.get_value(attempt_id, LESSON_STATUS)
    )
    if completed:
        await repo.mark_completed(attempt_id)
    if result.rejected:
        logger.info(
            f"Commit for {attempt_id}: {len(result.accepted)} accepted, "
            f"{len(result.rejected)} rejected"
        )
    return {
        "ok": True,
        "accepted": list(result.accepted),
        "rejected": [r.to_dict() for r in result.rejected],
        "attemptCompleted": completed,
    }


@router.post("/finish")
async def rt_finish(
    attempt_id: str, repo: AttemptRepository = Depends(_get_attempts)
) -> Dict[str, bool]:
    await repo.mark_completed(attempt_id)
    return {"ok": True}
