from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ScheduledShift


class ShiftRepository(Protocol):
    """Read port on the shift scheduling store."""

    def get_by_id(self, shift_id: int) -> Optional[ScheduledShift]:
        raise NotImplementedError

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[ScheduledShift]:
        raise NotImplementedError

    def list_for_employee(self, *, employee_id: int, start: date, end: date) -> Sequence[ScheduledShift]:
        """Shifts with ``start <= work_date <= end``."""

        raise NotImplementedError

    def list_for_merchant(self, *, merchant_id: int, work_date: date) -> Sequence[ScheduledShift]:
        raise NotImplementedError
