"""
Machine CRUD, the admin status override and per-user eligibility.
"""

from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from learnit.models.booking import Booking
from learnit.models.certification import Certification
from learnit.models.machine import Machine, MachineStatus
from learnit.models.user import User
from learnit.schemas.machine import MachineCreate, MachineUpdate, MachineStatusUpdate
from learnit.services.certification_service import get_certification_ids
from learnit.services.course_service import get_completed_course_ids
from learnit.services.eligibility import Eligibility, compute_eligibility
from learnit.services.identifiers import next_numeric_id
from learnit.core.logging import get_logger

logger = get_logger(__name__)


async def list_machines(db: AsyncSession, machine_type: Optional[str] = None) -> list[Machine]:
    query = select(Machine)
    if machine_type:
        query = query.where(Machine.type == machine_type)
    result = await db.execute(query.order_by(Machine.id))
    machines = list(result.scalars().all())
    # Numeric ids sort as numbers ("10" after "9")
    machines.sort(key=lambda m: (not m.id.isdigit(), int(m.id) if m.id.isdigit() else 0, m.id))
    return machines


async def get_machine(db: AsyncSession, machine_id: str) -> Machine:
    machine = await db.get(Machine, machine_id)
    if machine is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Machine not found",
        )
    return machine


async def create_machine(db: AsyncSession, data: MachineCreate) -> Machine:
    machine_id = await next_numeric_id(db, Machine)
    machine = Machine(
        id=machine_id,
        name=data.name,
        type=data.type.value,
        description=data.description,
        status=MachineStatus.AVAILABLE.value,
        requires_certification=data.requires_certification,
        linked_course_id=data.linked_course_id,
        linked_quiz_id=data.linked_quiz_id,
        difficulty=data.difficulty,
        image_url=data.image_url,
    )
    db.add(machine)
    await db.flush()
    await db.refresh(machine)

    logger.info("machine_created", machine_id=machine.id, name=machine.name)
    return machine


async def update_machine(db: AsyncSession, machine_id: str, data: MachineUpdate) -> Machine:
    machine = await get_machine(db, machine_id)

    for field, value in data.model_dump(exclude_unset=True, mode="json").items():
        setattr(machine, field, value)

    await db.flush()
    await db.refresh(machine)
    logger.info("machine_updated", machine_id=machine.id)
    return machine


async def update_machine_status(
    db: AsyncSession,
    machine_id: str,
    data: MachineStatusUpdate,
) -> Machine:
    """Admin override. Last writer wins."""
    machine = await get_machine(db, machine_id)
    previous = machine.status

    machine.status = data.status.value
    if data.maintenance_note is not None:
        machine.maintenance_note = data.maintenance_note
    elif data.status is not MachineStatus.MAINTENANCE:
        machine.maintenance_note = None

    await db.flush()
    await db.refresh(machine)

    logger.info(
        "machine_status_changed",
        machine_id=machine.id,
        previous=previous,
        status=machine.status,
    )
    return machine


async def delete_machine(db: AsyncSession, machine_id: str) -> None:
    """
    Delete a machine with its certifications and bookings in one
    transaction, so no user is left holding a certification for a
    machine that no longer exists.
    """
    machine = await get_machine(db, machine_id)

    certs = await db.execute(delete(Certification).where(Certification.machine_id == machine_id))
    bookings = await db.execute(delete(Booking).where(Booking.machine_id == machine_id))
    await db.delete(machine)
    await db.flush()

    logger.info(
        "machine_deleted",
        machine_id=machine_id,
        certifications_removed=certs.rowcount,
        bookings_removed=bookings.rowcount,
    )


async def get_eligibility_map(
    db: AsyncSession,
    user: User,
    machines: list[Machine],
) -> dict[str, Eligibility]:
    """Eligibility for each machine, loading the user's state once."""
    certifications = frozenset(await get_certification_ids(db, user.id))
    completed = frozenset(await get_completed_course_ids(db, user.id))
    return {
        machine.id: compute_eligibility(
            user,
            machine,
            certifications=certifications,
            completed_courses=completed,
        )
        for machine in machines
    }


async def get_machine_eligibility(db: AsyncSession, user: User, machine: Machine) -> Eligibility:
    return (await get_eligibility_map(db, user, [machine]))[machine.id]
