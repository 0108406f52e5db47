from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional


@dataclass(frozen=True)
class ScheduledShift:
    """Entità di dominio: turno pianificato di un dipendente in una data.

    Creato dalla pianificazione (store esterno); qui è sola lettura.
    """

    shift_id: int
    merchant_id: int
    employee_id: int
    work_date: date
    planned_start: Optional[time]
    planned_end: Optional[time]
    planned_break_minutes: int = 0

    @property
    def planned_start_at(self) -> Optional[datetime]:
        if self.planned_start is None:
            return None
        return datetime.combine(self.work_date, self.planned_start)

    @property
    def planned_end_at(self) -> Optional[datetime]:
        if self.planned_end is None:
            return None
        end = datetime.combine(self.work_date, self.planned_end)
        # Overnight shift: end on the next day.
        if self.planned_start is not None and self.planned_end <= self.planned_start:
            end += timedelta(days=1)
        return end

    @property
    def planned_span_minutes(self) -> int:
        start, end = self.planned_start_at, self.planned_end_at
        if start is None or end is None:
            return 0
        return int((end - start).total_seconds() // 60)

    @property
    def planned_work_minutes(self) -> int:
        """Planned duration net of the planned break."""
        return max(self.planned_span_minutes - int(self.planned_break_minutes or 0), 0)
