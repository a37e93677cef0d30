"""
Picks the booking admission gate from ADMISSION_STRATEGY.
"""

from typing import Optional

from learnit.core.config import get_settings
from learnit.core.logging import get_logger
from learnit.services.admission_service import RedisAdmission
from learnit.services.interfaces import AdmissionStrategy, OptimisticAdmission

logger = get_logger(__name__)

STRATEGIES = {
    "optimistic": OptimisticAdmission,
    "redis": RedisAdmission,
}

_strategy: Optional[AdmissionStrategy] = None


def get_admission_strategy(name: Optional[str] = None) -> AdmissionStrategy:
    name = (name or get_settings().ADMISSION_STRATEGY).lower()
    if name not in STRATEGIES:
        logger.warning("unknown_admission_strategy", strategy=name, fallback="optimistic")
        name = "optimistic"
    return STRATEGIES[name]()


def get_admission() -> AdmissionStrategy:
    global _strategy
    if _strategy is None:
        _strategy = get_admission_strategy()
        logger.info("admission_strategy_selected", strategy=type(_strategy).__name__)
    return _strategy
