"""Lease rent schedule engine."""

from engine.errors import ScheduleConfigurationError
from engine.schedule import compute_lease_rent_schedule

__all__ = ["ScheduleConfigurationError", "compute_lease_rent_schedule"]
