"""Repository layer for ingested course persistence.

Provides an abstraction over direct SQLAlchemy session usage so that routers
and services remain thin and testable.
"""
from __future__ import annotations
from typing import Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select

from app.models.persisted import (
    AttemptRecord,
    CmiValueRecord,
    CourseRecord,
    ScoRecord,
)
from app.scorm.models import ScoEntry


class CourseNotFoundError(Exception):
    """Raised when a course record could not be located."""


class ScoNotFoundError(Exception):
    """Raised when a SCO does not exist or belongs to another course."""


class CourseRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # CREATE -----------------------------------------------------------------
    async def create(
        self,
        course_id: str,
        title: str,
        launch_href: str,
        base_path: str,
        scos: Sequence[ScoEntry] = (),
        org_identifier: Optional[str] = None,
    ) -> CourseRecord:
        """Insert a course and its SCOs in one transaction."""
        record = CourseRecord(
            id=course_id,
            title=title,
            org_identifier=org_identifier,
            launch_href=launch_href,
            base_path=base_path,
        )
        self.session.add(record)
        for position, sco in enumerate(scos):
            self.session.add(
                ScoRecord(
                    course_id=course_id,
                    identifier=sco.identifier,
                    position=position,
                    launch_href=sco.href,
                    parameters=sco.parameters,
                )
            )
        await self.session.commit()
        await self.session.refresh(record)
        return record

    # READ -------------------------------------------------------------------
    async def list(self) -> Sequence[CourseRecord]:
        result = await self.session.execute(
            select(CourseRecord).order_by(CourseRecord.created_at)
        )
        return result.scalars().all()

    async def get(self, pk: str) -> CourseRecord:
        record = await self.session.get(CourseRecord, pk)
        if not record:
            raise CourseNotFoundError
        return record

    async def list_scos(self, course_id: str) -> Sequence[ScoRecord]:
        result = await self.session.execute(
            select(ScoRecord)
            .where(ScoRecord.course_id == course_id)
            .order_by(ScoRecord.position)
        )
        return result.scalars().all()

    async def get_sco(self, course_id: str, sco_id: str) -> ScoRecord:
        record = await self.session.get(ScoRecord, sco_id)
        if not record or record.course_id != course_id:
            raise ScoNotFoundError
        return record

    # DELETE -----------------------------------------------------------------
    async def delete_record(self, pk: str) -> None:
        """Delete a course with its SCOs, attempts and tracking values.

        Dependent rows are removed explicitly since SQLite does not enforce
        ON DELETE CASCADE unless foreign keys are switched on.
        """
        record = await self.get(pk)
        attempt_ids = select(AttemptRecord.id).where(AttemptRecord.course_id == pk)
        await self.session.execute(
            delete(CmiValueRecord).where(CmiValueRecord.attempt_id.in_(attempt_ids))
        )
        await self.session.execute(
            delete(AttemptRecord).where(AttemptRecord.course_id == pk)
        )
        await self.session.execute(delete(ScoRecord).where(ScoRecord.course_id == pk))
        await self.session.delete(record)
        await self.session.commit()
