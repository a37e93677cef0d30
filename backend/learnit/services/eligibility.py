"""
Per user/machine access rules.

This is the single place the gating decision is made. Screens that used to
re-derive "locked unless certified" now read the result from
GET /machines/eligibility.

Rules, first match wins:
  1. administrators are certified for everything
  2. no safety certification, not a safety machine -> locked
     (independent of the machine's requires_certification flag and of
     any certification already held for it)
  3. holding the machine's certification      -> certified
  4. machine does not require certification    -> certified
  5. linked course not completed               -> course_required
  6. otherwise                                 -> quiz_required

Errors are not handled here: callers that cannot load certifications fail
the request, which leaves everything locked for the client.
"""

import enum
from typing import AbstractSet, Optional

from learnit.core.config import get_settings
from learnit.models.machine import MachineType

_SAFETY_TYPES = frozenset({MachineType.SAFETY_CABINET.value, MachineType.SAFETY_COURSE.value})


class Eligibility(str, enum.Enum):
    LOCKED = "locked"
    COURSE_REQUIRED = "course_required"
    QUIZ_REQUIRED = "quiz_required"
    CERTIFIED = "certified"


def is_safety_machine(machine, safety_ids: Optional[AbstractSet[str]] = None) -> bool:
    if safety_ids is None:
        safety_ids = frozenset(get_settings().SAFETY_MACHINE_IDS)
    return machine.id in safety_ids or machine.type in _SAFETY_TYPES


def compute_eligibility(
    user,
    machine,
    *,
    certifications: AbstractSet[str],
    completed_courses: AbstractSet[str] = frozenset(),
    safety_certification_id: Optional[str] = None,
    safety_ids: Optional[AbstractSet[str]] = None,
) -> Eligibility:
    if safety_certification_id is None:
        safety_certification_id = get_settings().SAFETY_CERTIFICATION_ID

    if user.is_admin:
        return Eligibility.CERTIFIED

    if (
        safety_certification_id not in certifications
        and not is_safety_machine(machine, safety_ids)
    ):
        return Eligibility.LOCKED

    if machine.id in certifications:
        return Eligibility.CERTIFIED

    if not machine.requires_certification:
        return Eligibility.CERTIFIED

    if machine.linked_course_id and machine.linked_course_id not in completed_courses:
        return Eligibility.COURSE_REQUIRED

    return Eligibility.QUIZ_REQUIRED


def is_bookable(eligibility: Eligibility) -> bool:
    return eligibility is Eligibility.CERTIFIED
