from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError


@dataclass(frozen=True)
class Actor:
    """Who is calling: an employee, a merchant or an admin.

    Identity is established by the auth layer; services only check ownership.
    """

    role: Role
    employee_id: Optional[int] = None
    merchant_id: Optional[int] = None

    @classmethod
    def employee(cls, employee_id: int, merchant_id: Optional[int] = None) -> "Actor":
        return cls(role=Role.EMPLOYEE, employee_id=int(employee_id), merchant_id=merchant_id)

    @classmethod
    def merchant(cls, merchant_id: int) -> "Actor":
        return cls(role=Role.MERCHANT, merchant_id=int(merchant_id))

    @classmethod
    def admin(cls) -> "Actor":
        return cls(role=Role.ADMIN)

    @property
    def is_employee(self) -> bool:
        return self.role == Role.EMPLOYEE

    @property
    def is_manager(self) -> bool:
        return self.role in {Role.MERCHANT, Role.ADMIN}

    def can_manage(self, merchant_id: int) -> bool:
        if self.role == Role.ADMIN:
            return True
        return self.role == Role.MERCHANT and self.merchant_id == int(merchant_id)

    def require_employee(self) -> int:
        if not self.is_employee or not self.employee_id:
            raise AuthorizationError("Operazione riservata ai dipendenti")
        return int(self.employee_id)

    def require_manager(self) -> None:
        if not self.is_manager:
            raise AuthorizationError("Operazione riservata al merchant")

    @property
    def label(self) -> str:
        if self.role == Role.EMPLOYEE:
            return f"Employee-{self.employee_id}"
        if self.role == Role.MERCHANT:
            return f"Merchant-{self.merchant_id}"
        return "Admin"


SYSTEM_ACTOR_LABEL = "System"
