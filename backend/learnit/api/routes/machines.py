"""
Machine endpoints: catalogue (cached), eligibility, availability, the
admin status override and the status change feed.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnit.core.config import get_settings
from learnit.core.security import get_current_user, require_admin
from learnit.db.session import get_db
from learnit.models.machine import MachineType
from learnit.models.user import User
from learnit.schemas.machine import (
    AvailabilityResponse,
    EligibilityResponse,
    MachineCreate,
    MachineListResponse,
    MachineResponse,
    MachineStatusResponse,
    MachineStatusUpdate,
    MachineUpdate,
    StatusChange,
    StatusChangesResponse,
)
from learnit.schemas.user import MessageResponse
from learnit.services import machine_service
from learnit.services.booking_service import get_availability
from learnit.services.cache_service import (
    get_cached_machines,
    invalidate_machine_cache,
    set_cached_machines,
)
from learnit.services.eligibility import is_bookable
from learnit.services.status_feed import get_status_feed
from learnit.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/machines", tags=["Machines"])


@router.get("", response_model=MachineListResponse)
async def list_machines(
    machine_type: Optional[MachineType] = Query(None, alias="type", description="Filter by machine type"),
    db: AsyncSession = Depends(get_db),
):
    """
    List machines. Served from Redis when warm; any machine write
    invalidates the cached lists.
    """
    type_filter = machine_type.value if machine_type else None

    cached = await get_cached_machines(type_filter)
    if cached:
        cached["cached"] = True
        return MachineListResponse(**cached)

    machines = await machine_service.list_machines(db, type_filter)
    response = MachineListResponse(
        machines=[MachineResponse.model_validate(m) for m in machines],
        total=len(machines),
        cached=False,
    )
    await set_cached_machines(type_filter, response.model_dump(mode="json"))
    return response


@router.get("/eligibility", response_model=list[EligibilityResponse])
async def list_eligibility(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Eligibility of the current user for every machine."""
    machines = await machine_service.list_machines(db)
    decisions = await machine_service.get_eligibility_map(db, user, machines)
    return [
        EligibilityResponse(
            machine_id=m.id,
            machine_name=m.name,
            eligibility=decisions[m.id],
            bookable=is_bookable(decisions[m.id]),
        )
        for m in machines
    ]


@router.get("/status/changes", response_model=StatusChangesResponse)
async def status_changes(
    since: int = Query(0, ge=0, description="Last version the client has seen"),
    wait: float = Query(0, ge=0, description="Seconds to long-poll when nothing is newer"),
):
    """
    Status changes newer than `since`. With `wait` > 0 the request blocks
    until a change arrives or the wait (capped server-side) runs out.
    """
    feed = get_status_feed()
    timeout = min(wait, get_settings().STATUS_FEED_MAX_WAIT)
    events = await feed.wait_for_changes(since, timeout)
    return StatusChangesResponse(
        version=feed.version,
        changes=[
            StatusChange(
                version=e.version,
                machine_id=e.machine_id,
                status=e.status,
                maintenance_note=e.maintenance_note,
                changed_at=e.changed_at,
            )
            for e in events
        ],
    )


@router.get("/{machine_id}", response_model=MachineResponse)
async def get_machine(machine_id: str, db: AsyncSession = Depends(get_db)):
    return await machine_service.get_machine(db, machine_id)


@router.get("/{machine_id}/status", response_model=MachineStatusResponse)
async def get_machine_status(machine_id: str, db: AsyncSession = Depends(get_db)):
    machine = await machine_service.get_machine(db, machine_id)
    return MachineStatusResponse(
        machine_id=machine.id,
        status=machine.status,
        maintenance_note=machine.maintenance_note,
    )


@router.get("/{machine_id}/eligibility", response_model=EligibilityResponse)
async def get_machine_eligibility(
    machine_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    machine = await machine_service.get_machine(db, machine_id)
    eligibility = await machine_service.get_machine_eligibility(db, user, machine)
    return EligibilityResponse(
        machine_id=machine.id,
        machine_name=machine.name,
        eligibility=eligibility,
        bookable=is_bookable(eligibility),
    )


@router.get("/{machine_id}/availability", response_model=AvailabilityResponse)
async def get_machine_availability(
    machine_id: str,
    day: date = Query(..., alias="date", description="Day to check, YYYY-MM-DD"),
    db: AsyncSession = Depends(get_db),
):
    """The eight daily slots minus those held by Pending/Approved bookings."""
    available, booked = await get_availability(db, machine_id, day)
    return AvailabilityResponse(
        machine_id=machine_id,
        date=day,
        available_slots=available,
        booked_slots=booked,
    )


@router.post("", response_model=MachineResponse, status_code=status.HTTP_201_CREATED)
async def create_machine(
    data: MachineCreate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    machine = await machine_service.create_machine(db, data)
    await db.commit()
    await invalidate_machine_cache()
    return machine


@router.put("/{machine_id}", response_model=MachineResponse)
async def update_machine(
    machine_id: str,
    data: MachineUpdate,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    machine = await machine_service.update_machine(db, machine_id, data)
    await db.commit()
    await invalidate_machine_cache()
    return machine


@router.put("/{machine_id}/status", response_model=MachineResponse)
async def update_machine_status(
    machine_id: str,
    data: MachineStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Admin status override (Available / Maintenance / In Use). Last writer
    wins; the change is committed before it is published so pollers never
    see a status the database does not hold.
    """
    machine = await machine_service.update_machine_status(db, machine_id, data)
    await db.commit()

    await invalidate_machine_cache()
    await get_status_feed().publish(machine.id, machine.status, machine.maintenance_note)
    logger.info("status_override", machine_id=machine.id, status=machine.status, admin_id=admin.id)
    return machine


@router.delete("/{machine_id}", response_model=MessageResponse)
async def delete_machine(
    machine_id: str,
    _: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await machine_service.delete_machine(db, machine_id)
    await db.commit()

    await invalidate_machine_cache()
    await get_status_feed().forget(machine_id)
    return MessageResponse(message="Machine deleted successfully")
