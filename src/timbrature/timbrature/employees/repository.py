from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from .model import Employee, Merchant, WorkingHoursLimit


class DirectoryRepository(Protocol):
    """Read port on the employee/merchant directory."""

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_merchant(self, merchant_id: int) -> Optional[Merchant]:
        raise NotImplementedError

    def get_active_limit(self, *, employee_id: int, on: date) -> Optional[WorkingHoursLimit]:
        raise NotImplementedError
