"""
Optimistic admission - no pre-check.
Relies entirely on the bookings partial unique index.
"""

from learnit.services.interfaces.admission import AdmissionStrategy


class OptimisticAdmission(AdmissionStrategy):
    """
    Always admit. A losing concurrent insert surfaces as IntegrityError
    and is reported as a 409.
    """

    async def admit(self, key: str) -> bool:
        return True

    async def release(self, key: str) -> None:
        return None
