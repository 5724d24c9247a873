from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List

from models import KnownIndexPoint

from engine.errors import ScheduleConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexReading:
    value: float
    factor: float


class IndexResolver:
    """
    Index value applicable at any date of the lease.

    The base value holds from the lease start until the first known point;
    each point holds until the next one, the last one indefinitely.
    """

    def __init__(
        self,
        base_index_value: float,
        start_date: date,
        points: Iterable[KnownIndexPoint] = (),
    ) -> None:
        if base_index_value <= 0:
            raise ScheduleConfigurationError("base_index_value must be greater than zero.")
        self.base_index_value = float(base_index_value)
        self.start_date = start_date

        # Later entries overwrite earlier ones for the same effective date.
        by_date: dict[date, float] = {}
        for point in points:
            if point.index_value <= 0:
                raise ScheduleConfigurationError(
                    f"index value for {point.effective_date.isoformat()} must be greater than zero."
                )
            if point.effective_date < start_date:
                logger.debug(
                    "ignoring index point before lease start effective_date=%s start_date=%s",
                    point.effective_date,
                    start_date,
                )
                continue
            by_date[point.effective_date] = float(point.index_value)

        self._dates: List[date] = sorted(by_date)
        self._values: List[float] = [by_date[d] for d in self._dates]

    @property
    def revision_dates(self) -> List[date]:
        return list(self._dates)

    def value_at(self, d: date) -> float:
        pos = bisect_right(self._dates, d)
        if pos == 0:
            return self.base_index_value
        return self._values[pos - 1]

    def factor_at(self, d: date) -> float:
        return self.value_at(d) / self.base_index_value

    def resolve(self, d: date) -> IndexReading:
        value = self.value_at(d)
        return IndexReading(value=value, factor=value / self.base_index_value)

    def revision_dates_within(self, start: date, end: date) -> List[date]:
        """Effective dates t with start < t <= end."""
        lo = bisect_right(self._dates, start)
        hi = bisect_right(self._dates, end)
        return self._dates[lo:hi]
