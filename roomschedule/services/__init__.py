"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .schedule_service import (
    AppointmentStoreProtocol,
    ScheduleService,
    build_schedule,
    store_for_path,
)

__all__ = ["AppointmentStoreProtocol", "ScheduleService", "build_schedule", "store_for_path"]
