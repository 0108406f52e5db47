from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Ruolo dell'attore che invoca un'operazione."""

    ADMIN = "admin"
    MERCHANT = "merchant"
    EMPLOYEE = "employee"


class ClockEventKind(str, Enum):
    CHECK_IN = "CheckIn"
    CHECK_OUT = "CheckOut"


class AttendanceStatus(str, Enum):
    """Esito di una singola timbratura rispetto al turno pianificato."""

    ON_TIME = "ON_TIME"
    LATE = "LATE"
    EARLY = "EARLY"


class AnomalyType(str, Enum):
    LATE_CHECK_IN = "LateCheckIn"
    EARLY_CHECK_IN = "EarlyCheckIn"
    LATE_CHECK_OUT = "LateCheckOut"
    EARLY_CHECK_OUT = "EarlyCheckOut"
    MISSING_CHECK_IN = "MissingCheckIn"
    MISSING_CHECK_OUT = "MissingCheckOut"
    EXTENDED_BREAK = "ExtendedBreak"
    UNUSUAL_PATTERN = "UnusualPattern"
    LOCATION_MISMATCH = "LocationMismatch"


class AnomalyReason(str, Enum):
    """Motivo (empatico) con cui un'anomalia viene giustificata."""

    TRAFFIC = "Traffic"
    AUTHORIZED_LEAVE = "AuthorizedLeave"
    TIME_RECOVERY = "TimeRecovery"
    PERSONAL_EMERGENCY = "PersonalEmergency"
    FORGOTTEN = "Forgotten"
    TECHNICAL_ISSUE = "TechnicalIssue"
    SMART_WORKING = "SmartWorking"
    OTHER = "Other"
    NOT_SPECIFIED = "NotSpecified"


class ValidationStatus(str, Enum):
    PENDING = "Pending"
    AUTO_APPROVED = "AutoApproved"
    MANUALLY_APPROVED = "ManuallyApproved"
    REQUIRES_REVIEW = "RequiresReview"
    REJECTED = "Rejected"
    SELF_CORRECTED = "SelfCorrected"

    @property
    def is_terminal(self) -> bool:
        return self not in {ValidationStatus.PENDING, ValidationStatus.REQUIRES_REVIEW}


class OvertimeType(str, Enum):
    PAID = "Paid"
    BANKED_HOURS = "BankedHours"
    TIME_RECOVERY = "TimeRecovery"
    VOLUNTARY = "Voluntary"
    PENDING = "Pending"


class CorrectionStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
