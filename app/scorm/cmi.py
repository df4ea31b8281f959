"""
SCORM 1.2 runtime element validation

Filters the tracking values a player submits before they are persisted.
Only a small allow-list of CMI 1.2 elements is accepted; values over the
per-element length limit, and lesson statuses outside the CMI vocabulary,
are rejected. Rejections are never errors: the offending pair is dropped and
every other pair in the commit is still persisted.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

LESSON_STATUS = "cmi.core.lesson_status"
LESSON_LOCATION = "cmi.core.lesson_location"
SCORE_RAW = "cmi.core.score.raw"
SUSPEND_DATA = "cmi.suspend_data"
SESSION_TIME = "cmi.core.session_time"
EXIT = "cmi.core.exit"

ALLOWED_ELEMENTS = frozenset(
    {LESSON_STATUS, LESSON_LOCATION, SCORE_RAW, SUSPEND_DATA, SESSION_TIME, EXIT}
)

DEFAULT_MAX_LENGTH = 255
MAX_LENGTHS = {SUSPEND_DATA: 4096}

LESSON_STATUSES = frozenset(
    {"passed", "failed", "completed", "incomplete", "browsed", "not attempted"}
)

# Statuses after which the attempt is considered finished
COMPLETION_STATUSES = frozenset({"completed", "passed", "failed"})


def max_length(element: str) -> int:
    return MAX_LENGTHS.get(element, DEFAULT_MAX_LENGTH)


def is_completion_status(value: Optional[str]) -> bool:
    return value in COMPLETION_STATUSES


@dataclass(frozen=True)
class ElementCheck:
    """Outcome of validating one (element, value) pair."""

    element: str
    accepted: bool
    value: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"element": self.element, "reason": self.reason}


def validate_element(element: str, value: str) -> ElementCheck:
    """
    Check a single CMI element/value pair.

    Args:
        element: CMI element name, e.g. ``cmi.core.lesson_status``
        value: Value submitted by the player

    Returns:
        ElementCheck; when accepted, ``value`` holds the value to persist
    """
    if element not in ALLOWED_ELEMENTS:
        return ElementCheck(element, False, reason="element not supported")

    limit = max_length(element)
    if len(value) > limit:
        return ElementCheck(
            element, False, reason=f"value exceeds {limit} characters"
        )

    if element == LESSON_STATUS and value not in LESSON_STATUSES:
        return ElementCheck(
            element, False, reason=f"unknown lesson status '{value}'"
        )

    return ElementCheck(element, True, value=value)


def stringify(value: Any) -> str:
    """Players may post numbers or booleans; persist their JSON text."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


@dataclass
class CommitFilterResult:
    accepted: Dict[str, str] = field(default_factory=dict)
    rejected: List[ElementCheck] = field(default_factory=list)

    @property
    def completes_attempt(self) -> bool:
        return is_completion_status(self.accepted.get(LESSON_STATUS))


def filter_values(values: Mapping[str, Any]) -> CommitFilterResult:
    """Validate every pair of a commit, keeping only the accepted ones."""
    result = CommitFilterResult()
    for element, raw in values.items():
        check = validate_element(element, stringify(raw))
        if check.accepted:
            result.accepted[element] = check.value
        else:
            logger.debug("Rejected CMI element %s: %s", element, check.reason)
            result.rejected.append(check)
    return result
