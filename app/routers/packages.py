"""Courses router: package upload and ingested course management.

Uploading a package extracts it under DATA_DIR, resolves its launch paths
and persists the course with its SCOs. A package that fails ingestion is
removed from disk and nothing is persisted.
"""
from __future__ import annotations
import logging
import uuid
from typing import List, Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    UploadFile,
    status,
)
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.settings import Settings, get_settings
from app.db.config import get_session
from app.models.api import CourseOut
from app.repositories.course_repo import CourseNotFoundError, CourseRepository
from app.scorm.errors import ScormPackageError
from app.services.package_ingest import PackageIngestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["Courses"])

DEFAULT_TITLE = "Untitled Course"

# Helpers ------------------------------------------------------------------


async def _get_repo(
    session: AsyncSession = Depends(get_session),
) -> CourseRepository:
    return CourseRepository(session)


def _get_ingest_service(
    settings: Settings = Depends(get_settings),
) -> PackageIngestService:
    return PackageIngestService(settings.data_dir)


async def _course_out(repo: CourseRepository, course) -> dict:
    scos = await repo.list_scos(course.id)
    return {**course.to_dict(), "scos": [s.to_dict() for s in scos]}


def _too_large(size: int, settings: Settings) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail=(
            f"File size ({size} bytes) exceeds maximum "
            f"allowed size ({settings.max_upload_size} bytes)"
        ),
    )


# Routes -------------------------------------------------------------------


@router.post(
    "/upload",
    response_model=CourseOut,
    status_code=status.HTTP_201_CREATED,
    summary="Upload SCORM Package",
)
async def upload_course(
    file: Optional[UploadFile] = File(None, description="SCORM zip package"),
    title: Optional[str] = Form(None, max_length=200),
    repo: CourseRepository = Depends(_get_repo),
    service: PackageIngestService = Depends(_get_ingest_service),
    settings: Settings = Depends(get_settings),
):
    """Ingest a SCORM 1.2 zip package.

    The manifest decides the default launch file and the SCO list. Returns
    400 when the archive is corrupt, has no ``imsmanifest.xml``, the manifest
    is malformed, or no launch path can be resolved.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="file is required")

    # Reject on the size the multipart parser recorded before loading anything
    if file.size is not None and file.size > settings.max_upload_size:
        raise _too_large(file.size, settings)

    data = await file.read(settings.max_upload_size + 1)
    if not data:
        raise HTTPException(status_code=400, detail="Empty files are not allowed")
    if len(data) > settings.max_upload_size:
        raise _too_large(file.size or len(data), settings)

    course_id = str(uuid.uuid4())
    logger.info(
        f"Starting package upload: {file.filename} ({len(data)} bytes) "
        f"as course {course_id}"
    )
    try:
        result = await run_in_threadpool(service.ingest, data, course_id)
    except ScormPackageError as e:
        logger.warning(f"Package {file.filename} rejected: {e.message}")
        await run_in_threadpool(service.discard, course_id)
        raise HTTPException(status_code=400, detail=e.message)

    try:
        course = await repo.create(
            course_id=result.course_id,
            title=(title or "").strip() or DEFAULT_TITLE,
            launch_href=result.manifest.default_launch,
            base_path=result.base_path,
            scos=result.manifest.scos,
            org_identifier=result.manifest.default_organization,
        )
    except Exception:
        await run_in_threadpool(service.discard, course_id)
        raise

    logger.info(f"Course {course.id} created with {len(result.manifest.scos)} SCOs")
    return await _course_out(repo, course)


@router.get("", response_model=List[CourseOut])
async def list_courses(repo: CourseRepository = Depends(_get_repo)):
    courses = await repo.list()
    return [await _course_out(repo, c) for c in courses]


@router.get("/{course_id}", response_model=CourseOut)
async def get_course(
    course_id: str, repo: CourseRepository = Depends(_get_repo)
):
    try:
        course = await repo.get(course_id)
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="Course not found")
    return await _course_out(repo, course)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: str,
    repo: CourseRepository = Depends(_get_repo),
    service: PackageIngestService = Depends(_get_ingest_service),
):
    try:
        await repo.delete_record(course_id)
    except CourseNotFoundError:
        raise HTTPException(status_code=404, detail="Course not found")
    await run_in_threadpool(service.discard, course_id)
    return None
