"""
Pydantic models for the HTTP API

Request and response payloads for course upload, attempts and the SCORM
runtime endpoints.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ScoOut(BaseModel):
    """A launchable SCO of an ingested course"""
    id: str
    courseId: str
    identifier: str
    position: int
    launchHref: str
    parameters: Optional[str] = None
    createdAt: str


class CourseOut(BaseModel):
    """Ingested course with its SCOs"""
    id: str
    title: str
    orgIdentifier: Optional[str] = None
    launchHref: str
    basePath: str
    createdAt: str
    scos: List[ScoOut] = Field(default_factory=list)


class CreateAttemptRequest(BaseModel):
    course_id: str = Field(..., min_length=1, description="Course to launch")
    learner_id: str = Field(..., min_length=1, max_length=255)
    sco_id: Optional[str] = Field(
        None, description="SCO to launch instead of the course default"
    )


class AttemptOut(BaseModel):
    id: str
    courseId: str
    learnerId: str
    scoId: Optional[str] = None
    status: str
    startedAt: Optional[str] = None
    finishedAt: Optional[str] = None
    createdAt: str


class RuntimeSetRequest(BaseModel):
    element: str
    value: Any = ""


class RuntimeGetRequest(BaseModel):
    element: str


class RejectedElement(BaseModel):
    element: str
    reason: Optional[str] = None


class RuntimeValuesResponse(BaseModel):
    values: Dict[str, str]


class CommitResponse(BaseModel):
    ok: bool = True
    accepted: List[str] = Field(default_factory=list)
    rejected: List[RejectedElement] = Field(default_factory=list)
    attemptCompleted: bool = False


class HealthCheckResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Runtime environment")
    timestamp: datetime = Field(..., description="Response timestamp")
    uptime: float = Field(..., description="Service uptime in seconds")
