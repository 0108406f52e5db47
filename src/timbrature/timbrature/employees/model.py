from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..common.geo import GeoPoint


@dataclass(frozen=True)
class Employee:
    employee_id: int
    merchant_id: int
    full_name: str
    is_active: bool = True


@dataclass(frozen=True)
class Merchant:
    """Sede del merchant: la posizione registrata serve al geofencing."""

    merchant_id: int
    business_name: str
    location: Optional[GeoPoint] = None
    geofence_radius_meters: Optional[float] = None


@dataclass(frozen=True)
class WorkingHoursLimit:
    """Limite orario attivo di un dipendente (sovrascrive il default settimanale)."""

    employee_id: int
    max_hours_per_week: Optional[float] = None
    max_overtime_hours_per_week: Optional[float] = None
