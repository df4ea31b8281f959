"""Repository layer for learner attempts and their CMI tracking values."""
from __future__ import annotations
from datetime import datetime
from typing import Dict, Mapping, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models.persisted import (
    ATTEMPT_COMPLETED,
    ATTEMPT_IN_PROGRESS,
    AttemptRecord,
    CmiValueRecord,
)


class AttemptNotFoundError(Exception):
    """Raised when an attempt record could not be located."""


class AttemptRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ATTEMPTS ---------------------------------------------------------------
    async def create(
        self,
        course_id: str,
        learner_id: str,
        sco_id: Optional[str] = None,
    ) -> AttemptRecord:
        record = AttemptRecord(
            course_id=course_id,
            learner_id=learner_id,
            sco_id=sco_id,
            status=ATTEMPT_IN_PROGRESS,
            started_at=datetime.utcnow(),
        )
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def get(self, pk: str) -> AttemptRecord:
        record = await self.session.get(AttemptRecord, pk)
        if not record:
            raise AttemptNotFoundError
        return record

    async def mark_completed(self, pk: str) -> AttemptRecord:
        record = await self.get(pk)
        record.status = ATTEMPT_COMPLETED
        record.finished_at = datetime.utcnow()
        await self.session.commit()
        await self.session.refresh(record)
        return record

    # CMI VALUES -------------------------------------------------------------
    async def values(self, attempt_id: str) -> Dict[str, str]:
        result = await self.session.execute(
            select(CmiValueRecord).where(CmiValueRecord.attempt_id == attempt_id)
        )
        return {row.element: row.value or "" for row in result.scalars().all()}

    async def get_value(self, attempt_id: str, element: str) -> Optional[str]:
        record = await self.session.get(CmiValueRecord, (attempt_id, element))
        return record.value if record else None

    async def upsert_values(
        self, attempt_id: str, values: Mapping[str, str]
    ) -> None:
        """Store already-validated values, replacing earlier ones."""
        for element, value in values.items():
            record = await self.session.get(
                CmiValueRecord, (attempt_id, element)
            )
            if record is None:
                self.session.add(
                    CmiValueRecord(
                        attempt_id=attempt_id, element=element, value=value
                    )
                )
            else:
                record.value = value
                record.updated_at = datetime.utcnow()
        await self.session.commit()
