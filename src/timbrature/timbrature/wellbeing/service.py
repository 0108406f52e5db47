from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..attendance import messages
from ..common.datetime_utils import hours, month_start, now_local, week_start
from ..core.settings import TimbratureSettings
from ..employees.repository import DirectoryRepository
from ..hours.service import HoursService

logger = logging.getLogger(__name__)


class WellbeingService:
    """Read-only advisory over worked hours; never blocks a check-in."""

    def __init__(
        self,
        hours_service: HoursService,
        directory: DirectoryRepository,
        *,
        settings: TimbratureSettings | None = None,
    ):
        self._hours = hours_service
        self._directory = directory
        self._settings = settings or TimbratureSettings()

    def get_wellbeing(self, employee_id: int, *, now: datetime | None = None) -> dict[str, Any]:
        now = now or now_local()
        today = now.date()

        week_worked, week_overtime = self._hours.totals(
            employee_id=employee_id, start=week_start(today), end=today, now=now
        )
        month_worked, month_overtime = self._hours.totals(
            employee_id=employee_id, start=month_start(today), end=today, now=now
        )

        max_hours = self._settings.max_hours_per_week
        overtime_alert_hours = self._settings.wellbeing_overtime_alert_hours
        limit = self._directory.get_active_limit(employee_id=int(employee_id), on=today)
        if limit:
            max_hours = limit.max_hours_per_week or max_hours
            overtime_alert_hours = limit.max_overtime_hours_per_week or overtime_alert_hours

        hours_this_week = hours(week_worked)
        overtime_this_week = hours(week_overtime)
        has_alert = (
            hours_this_week > self._settings.wellbeing_warning_fraction * max_hours
            or overtime_this_week > overtime_alert_hours
        )
        if has_alert:
            logger.info(
                "Wellbeing alert for employee %s: %sh this week (max %s), overtime %sh",
                employee_id,
                hours_this_week,
                max_hours,
                overtime_this_week,
            )

        return {
            "hasWellbeingAlert": has_alert,
            "wellbeingMessage": messages.WELLBEING_ALERT if has_alert else None,
            "hoursThisWeek": hours_this_week,
            "overtimeThisWeek": overtime_this_week,
            "hoursThisMonth": hours(month_worked),
            "overtimeThisMonth": hours(month_overtime),
            "maxHoursPerWeek": max_hours,
        }
