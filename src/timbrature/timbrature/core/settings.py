from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from . import constants
from .exceptions import ValidationError


@dataclass(frozen=True)
class TimbratureSettings:
    """Named thresholds of the validation engine (product configuration)."""

    tolerance_minutes: int = constants.DEFAULT_TOLERANCE_MINUTES
    auto_approve_tolerance_minutes: int = constants.DEFAULT_AUTO_APPROVE_TOLERANCE_MINUTES
    overtime_threshold_minutes: int = constants.DEFAULT_OVERTIME_THRESHOLD_MINUTES
    self_resolution_hours: int = constants.DEFAULT_SELF_RESOLUTION_HOURS
    review_after_hours: int = constants.DEFAULT_REVIEW_AFTER_HOURS
    geofence_radius_meters: float = constants.DEFAULT_GEOFENCE_RADIUS_METERS
    max_hours_per_week: float = constants.DEFAULT_MAX_HOURS_PER_WEEK
    wellbeing_warning_fraction: float = constants.DEFAULT_WELLBEING_WARNING_FRACTION
    wellbeing_overtime_alert_hours: float = constants.DEFAULT_WELLBEING_OVERTIME_ALERT_HOURS
    late_severity_minutes: int = constants.DEFAULT_LATE_SEVERITY_MINUTES

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "TimbratureSettings":
        """Build settings from a config dict with UPPER_CASE keys.

        Missing keys fall back to the defaults in ``core.constants``.
        """

        values = dict(values or {})

        def _int(key: str, default: int) -> int:
            number = _number(key, default)
            if not number.is_integer():
                raise ValidationError(f"Configurazione {key} deve essere un numero intero: {values.get(key)!r}")
            return int(number)

        def _number(key: str, default: float) -> float:
            raw = values.get(key, default)
            try:
                number = float(raw)
            except (TypeError, ValueError):
                raise ValidationError(f"Configurazione {key} non valida: {raw!r}")
            if number < 0:
                raise ValidationError(f"Configurazione {key} non può essere negativa")
            return number

        fraction = _number("WELLBEING_WARNING_FRACTION", constants.DEFAULT_WELLBEING_WARNING_FRACTION)
        if fraction > 1:
            raise ValidationError("Configurazione WELLBEING_WARNING_FRACTION deve essere tra 0 e 1")

        return cls(
            tolerance_minutes=_int("TOLERANCE_MINUTES", constants.DEFAULT_TOLERANCE_MINUTES),
            auto_approve_tolerance_minutes=_int(
                "AUTO_APPROVE_TOLERANCE_MINUTES", constants.DEFAULT_AUTO_APPROVE_TOLERANCE_MINUTES
            ),
            overtime_threshold_minutes=_int("OVERTIME_THRESHOLD_MINUTES", constants.DEFAULT_OVERTIME_THRESHOLD_MINUTES),
            self_resolution_hours=_int("SELF_RESOLUTION_HOURS", constants.DEFAULT_SELF_RESOLUTION_HOURS),
            review_after_hours=_int("REVIEW_AFTER_HOURS", constants.DEFAULT_REVIEW_AFTER_HOURS),
            geofence_radius_meters=_number("GEOFENCE_RADIUS_METERS", constants.DEFAULT_GEOFENCE_RADIUS_METERS),
            max_hours_per_week=_number("MAX_HOURS_PER_WEEK", constants.DEFAULT_MAX_HOURS_PER_WEEK),
            wellbeing_warning_fraction=fraction,
            wellbeing_overtime_alert_hours=_number(
                "WELLBEING_OVERTIME_ALERT_HOURS", constants.DEFAULT_WELLBEING_OVERTIME_ALERT_HOURS
            ),
            late_severity_minutes=_int("LATE_SEVERITY_MINUTES", constants.DEFAULT_LATE_SEVERITY_MINUTES),
        )
