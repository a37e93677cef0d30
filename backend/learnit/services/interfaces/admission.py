"""
Slot admission strategy interface.
Allows swapping the pre-insert gate without touching booking logic.
"""

from abc import ABC, abstractmethod


class AdmissionStrategy(ABC):
    """
    Gate in front of the booking insert.

    The database's partial unique index is the real guarantee; a strategy
    can only reject early. Implementations:
    - OptimisticAdmission: no gate, the insert decides
    - RedisAdmission: short-lived SET NX hold per slot key
    """

    @abstractmethod
    async def admit(self, key: str) -> bool:
        """
        Try to take the slot key.

        Returns:
            True if the request may proceed to the insert
            False if another request is already holding the slot
        """

    @abstractmethod
    async def release(self, key: str) -> None:
        """Drop a hold after the insert committed or failed."""
