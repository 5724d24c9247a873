from __future__ import annotations


class ScheduleConfigurationError(ValueError):
    """Schedule input is inconsistent (e.g. end before start); reported, never corrected."""
