"""SQLAlchemy ORM models for ingested courses and learner tracking.

Separate from the API models in api.py which describe request/response
payloads. This layer manages persistence concerns only.
"""
from __future__ import annotations
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, declarative_base
from sqlalchemy import String, DateTime, Text, ForeignKey

Base = declarative_base()

ATTEMPT_NOT_STARTED = "not_started"
ATTEMPT_IN_PROGRESS = "in_progress"
ATTEMPT_COMPLETED = "completed"


def _new_id() -> str:
    return str(uuid.uuid4())


class CourseRecord(Base):
    """An ingested package; ``base_path`` is relative to DATA_DIR."""

    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(200))
    org_identifier: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    launch_href: Mapped[str] = mapped_column(Text)
    base_path: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "orgIdentifier": self.org_identifier,
            "launchHref": self.launch_href,
            "basePath": self.base_path,
            "createdAt": self.created_at.isoformat(),
        }


class ScoRecord(Base):
    __tablename__ = "scos"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    course_id: Mapped[str] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    identifier: Mapped[str] = mapped_column(String(255))
    position: Mapped[int] = mapped_column(default=0)
    launch_href: Mapped[str] = mapped_column(Text)
    parameters: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "courseId": self.course_id,
            "identifier": self.identifier,
            "position": self.position,
            "launchHref": self.launch_href,
            "parameters": self.parameters,
            "createdAt": self.created_at.isoformat(),
        }


class AttemptRecord(Base):
    """One learner session against a course (optionally a single SCO)."""

    __tablename__ = "attempts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    course_id: Mapped[str] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    learner_id: Mapped[str] = mapped_column(String(255))
    sco_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("scos.id"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(32), default=ATTEMPT_NOT_STARTED)
    started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    finished_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "courseId": self.course_id,
            "learnerId": self.learner_id,
            "scoId": self.sco_id,
            "status": self.status,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "finishedAt": (
                self.finished_at.isoformat() if self.finished_at else None
            ),
            "createdAt": self.created_at.isoformat(),
        }


class CmiValueRecord(Base):
    """Latest value of one CMI element within an attempt."""

    __tablename__ = "cmi_values"

    attempt_id: Mapped[str] = mapped_column(
        ForeignKey("attempts.id", ondelete="CASCADE"), primary_key=True
    )
    element: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
