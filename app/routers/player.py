"""Player router: serves the HTML shell hosting a SCO for an attempt."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.config import get_session
from app.repositories.attempt_repo import AttemptNotFoundError, AttemptRepository
from app.repositories.course_repo import (
    CourseNotFoundError,
    CourseRepository,
    ScoNotFoundError,
)
from app.services.player_shell import build_launch_url, render_player_shell

router = APIRouter(tags=["Player"])


@router.get(
    "/player/{attempt_id}",
    response_class=HTMLResponse,
    summary="SCORM Player Shell",
)
async def player_shell(
    attempt_id: str, session: AsyncSession = Depends(get_session)
) -> HTMLResponse:
    """Launch the attempt's SCO, or the course default when none was chosen."""
    attempts = AttemptRepository(session)
    courses = CourseRepository(session)
    try:
        attempt = await attempts.get(attempt_id)
        course = await courses.get(attempt.course_id)
        if attempt.sco_id:
            sco = await courses.get_sco(course.id, attempt.sco_id)
            launch_url = build_launch_url(
                course.base_path, sco.launch_href, sco.parameters
            )
        else:
            launch_url = build_launch_url(course.base_path, course.launch_href)
    except (AttemptNotFoundError, CourseNotFoundError, ScoNotFoundError):
        raise HTTPException(status_code=404, detail="Attempt not found")

    return HTMLResponse(render_player_shell(attempt.id, launch_url))
