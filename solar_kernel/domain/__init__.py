"""
Pure domain layer.

Helpers with NO dependencies on the ORM, the database or I/O: the
injectable clock, address heuristics and acceptance checks.
"""

from solar_kernel.domain.acceptance import (
    validate_customer_email,
    validate_customer_name,
    validate_signature_image,
)
from solar_kernel.domain.address import extract_state_code
from solar_kernel.domain.clock import Clock, DeterministicClock, SystemClock

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "extract_state_code",
    "validate_customer_email",
    "validate_customer_name",
    "validate_signature_image",
]
