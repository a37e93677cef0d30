"""
Booking admission gates. The booking service only sees AdmissionStrategy.
"""

from .admission import AdmissionStrategy
from .optimistic_admission import OptimisticAdmission

__all__ = ['AdmissionStrategy', 'OptimisticAdmission']
