from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional

from ..attendance import messages
from ..attendance.repository import ClockEventRepository
from ..common.actor import SYSTEM_ACTOR_LABEL, Actor
from ..common.datetime_utils import hours, minutes_between, now_local
from ..common.validators import optional_text, require_id
from ..core.enums import AnomalyReason, AnomalyType, ClockEventKind, ValidationStatus
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from ..core.settings import TimbratureSettings
from ..employees.repository import DirectoryRepository
from ..hours.service import HoursService
from ..shifts.model import ScheduledShift
from ..shifts.repository import ShiftRepository
from .model import Anomaly
from .repository import AnomalyRepository

logger = logging.getLogger(__name__)

OPEN_STATUSES = (ValidationStatus.PENDING, ValidationStatus.REQUIRES_REVIEW)

# Most urgent first: the shift shows the status of its most urgent anomaly.
SHIFT_STATUS_PRIORITY = (
    ValidationStatus.REQUIRES_REVIEW,
    ValidationStatus.PENDING,
    ValidationStatus.REJECTED,
    ValidationStatus.MANUALLY_APPROVED,
    ValidationStatus.SELF_CORRECTED,
    ValidationStatus.AUTO_APPROVED,
)

_TIMED_EVENT = {
    AnomalyType.LATE_CHECK_IN: ClockEventKind.CHECK_IN,
    AnomalyType.EARLY_CHECK_IN: ClockEventKind.CHECK_IN,
    AnomalyType.LATE_CHECK_OUT: ClockEventKind.CHECK_OUT,
    AnomalyType.EARLY_CHECK_OUT: ClockEventKind.CHECK_OUT,
}


@dataclass(frozen=True)
class SweepResult:
    approved: int
    escalated: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": f"{self.approved} anomalie approvate automaticamente",
            "countApproved": self.approved,
            "countEscalated": self.escalated,
        }


def anomaly_payload(a: Anomaly) -> dict[str, Any]:
    return {
        "id": a.anomaly_id,
        "shiftId": a.shift_id,
        "type": a.anomaly_type.value,
        "status": a.status.value,
        "severity": a.severity,
        "deviationMinutes": a.deviation_minutes,
        "empatheticMessage": a.empathetic_message,
        "requiresMerchantReview": a.requires_merchant_review,
        "resolutionReason": a.resolution_reason.value if a.resolution_reason else None,
        "quickResolutionOptions": messages.quick_options(a.anomaly_type),
        "createdAt": a.created_at.isoformat(),
    }


def derive_shift_status(anomalies: Iterable[Anomaly], *, checked_out: bool) -> ValidationStatus:
    present = {a.status for a in anomalies}
    for status in SHIFT_STATUS_PRIORITY:
        if status in present:
            return status
    return ValidationStatus.AUTO_APPROVED if checked_out else ValidationStatus.PENDING


class AnomalyService:
    def __init__(
        self,
        shifts: ShiftRepository,
        directory: DirectoryRepository,
        clock_events: ClockEventRepository,
        anomalies: AnomalyRepository,
        hours_service: HoursService,
        *,
        settings: TimbratureSettings | None = None,
    ):
        self._shifts = shifts
        self._directory = directory
        self._events = clock_events
        self._anomalies = anomalies
        self._hours = hours_service
        self._settings = settings or TimbratureSettings()

    def _managed_merchant(self, actor: Actor, merchant_id: int) -> int:
        actor.require_manager()
        merchant_id = require_id(merchant_id, "Merchant")
        if not actor.can_manage(merchant_id):
            raise AuthorizationError("Non puoi gestire i turni di un altro merchant")
        return merchant_id

    def get(self, anomaly_id: int) -> Anomaly:
        anomaly = self._anomalies.get_by_id(int(anomaly_id))
        if not anomaly:
            raise NotFoundError("Anomalia non trovata")
        return anomaly

    def resolve(
        self,
        anomaly_id: int,
        reason: Any = None,
        *,
        actor: Actor,
        approve: bool | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> Anomaly:
        """Employee self-resolution or merchant approve/reject of one anomaly."""

        now = now or now_local()
        anomaly = self.get(anomaly_id)
        if anomaly.status.is_terminal:
            raise InvalidStateError("Anomalia già risolta")

        shift = self._shifts.get_by_id(anomaly.shift_id)
        if not shift:
            raise NotFoundError("Turno non trovato")

        if actor.is_employee:
            if shift.employee_id != actor.employee_id:
                raise AuthorizationError("Non puoi risolvere l'anomalia di un altro dipendente")
            if anomaly.status == ValidationStatus.REQUIRES_REVIEW:
                raise AuthorizationError("L'anomalia è in revisione: se ne occupa il tuo responsabile")
            window = timedelta(hours=self._settings.self_resolution_hours)
            if now - anomaly.created_at > window:
                raise AuthorizationError(
                    f"Sono passate più di {self._settings.self_resolution_hours} ore: chiedi al tuo responsabile"
                )
            if reason in (None, ""):
                raise ValidationError("Motivo mancante")
            chosen: Optional[AnomalyReason] = messages.reason_from_input(reason)
            target = ValidationStatus.SELF_CORRECTED
        elif actor.is_manager:
            if not actor.can_manage(shift.merchant_id):
                raise AuthorizationError("Non puoi gestire i turni di un altro merchant")
            if approve is None:
                raise ValidationError("Indica se approvare o rifiutare l'anomalia")
            if reason not in (None, ""):
                chosen = messages.reason_from_input(reason)
            else:
                chosen = AnomalyReason.NOT_SPECIFIED if anomaly.resolution_reason is None else None
            target = ValidationStatus.MANUALLY_APPROVED if approve else ValidationStatus.REJECTED
        else:
            raise AuthorizationError("Operazione non consentita")

        ok = self._anomalies.transition(
            anomaly_id=anomaly.anomaly_id,
            from_statuses=OPEN_STATUSES,
            to_status=target,
            reason=chosen,
            resolved_by=actor.label,
            resolved_at=now,
            notes=optional_text(notes),
        )
        if not ok:
            logger.warning("Anomaly %s changed concurrently; %s not applied", anomaly.anomaly_id, target.value)
            raise InvalidStateError("Anomalia già risolta")

        logger.info("Anomaly %s -> %s by %s", anomaly.anomaly_id, target.value, actor.label)
        return self.get(anomaly.anomaly_id)

    def _current_deviation(self, anomaly: Anomaly, shift: ScheduledShift) -> Optional[int]:
        """Deviation re-measured against the effective (corrected) event time."""

        kind = _TIMED_EVENT.get(anomaly.anomaly_type)
        if kind is None:
            return None
        event = self._events.get_for_shift(shift.shift_id, kind)
        if not event:
            return None
        planned = shift.planned_start_at if kind == ClockEventKind.CHECK_IN else shift.planned_end_at
        if planned is None:
            return None
        return minutes_between(planned, self._hours.effective_time(event))

    def auto_validate_sweep(
        self,
        merchant_id: int,
        *,
        as_of: datetime | None = None,
        work_date: date | None = None,
        actor: Actor | None = None,
    ) -> SweepResult:
        """Batch entry point (cron or merchant button).

        Pending anomalies back inside the auto-approve band become AutoApproved;
        the others escalate to RequiresReview once older than the review window.
        With ``work_date`` only anomalies of shifts planned on that day are swept.
        """

        as_of = as_of or now_local()
        if actor is not None:
            merchant_id = self._managed_merchant(actor, merchant_id)
        review_after = timedelta(hours=self._settings.review_after_hours)

        approved = 0
        escalated = 0
        for anomaly in self._anomalies.list_for_merchant(
            merchant_id=int(merchant_id), statuses=[ValidationStatus.PENDING]
        ):
            shift = self._shifts.get_by_id(anomaly.shift_id)
            if not shift:
                continue
            if work_date is not None and shift.work_date != work_date:
                continue

            deviation = self._current_deviation(anomaly, shift)
            if deviation is not None and abs(deviation) <= self._settings.auto_approve_tolerance_minutes:
                ok = self._anomalies.transition(
                    anomaly_id=anomaly.anomaly_id,
                    from_statuses=[ValidationStatus.PENDING],
                    to_status=ValidationStatus.AUTO_APPROVED,
                    resolved_by=SYSTEM_ACTOR_LABEL,
                    resolved_at=as_of,
                )
                if ok:
                    approved += 1
                else:
                    logger.warning("Sweep skipped anomaly %s: no longer Pending", anomaly.anomaly_id)
            elif as_of - anomaly.created_at > review_after:
                ok = self._anomalies.transition(
                    anomaly_id=anomaly.anomaly_id,
                    from_statuses=[ValidationStatus.PENDING],
                    to_status=ValidationStatus.REQUIRES_REVIEW,
                )
                if ok:
                    escalated += 1
                else:
                    logger.warning("Sweep skipped anomaly %s: no longer Pending", anomaly.anomaly_id)

        logger.info(
            "Auto-validate sweep for merchant %s at %s: approved=%s escalated=%s",
            merchant_id,
            as_of,
            approved,
            escalated,
        )
        return SweepResult(approved=approved, escalated=escalated)

    def batch_approve(self, shift_ids: Iterable[Any], *, actor: Actor, now: datetime | None = None) -> int:
        """Approve every open anomaly of the given shifts; returns how many changed."""

        now = now or now_local()
        actor.require_manager()

        ids: list[int] = []
        for raw in shift_ids or []:
            shift_id = require_id(raw, "Turno")
            if shift_id not in ids:
                ids.append(shift_id)
        if not ids:
            raise ValidationError("Nessun turno selezionato")

        managed: list[int] = []
        for shift_id in ids:
            shift = self._shifts.get_by_id(shift_id)
            if not shift or not actor.can_manage(shift.merchant_id):
                logger.warning("Batch approve: shift %s skipped (missing or not managed by %s)", shift_id, actor.label)
                continue
            managed.append(shift_id)

        count = 0
        for anomaly in self._anomalies.list_for_shifts(managed):
            if not anomaly.is_open:
                continue
            ok = self._anomalies.transition(
                anomaly_id=anomaly.anomaly_id,
                from_statuses=OPEN_STATUSES,
                to_status=ValidationStatus.MANUALLY_APPROVED,
                reason=AnomalyReason.NOT_SPECIFIED if anomaly.resolution_reason is None else None,
                resolved_by=actor.label,
                resolved_at=now,
            )
            if ok:
                count += 1

        logger.info("Batch approve by %s: %s anomalies on %s shifts", actor.label, count, len(managed))
        return count

    def list_merchant_shifts(self, merchant_id: int, work_date: date, *, actor: Actor) -> list[dict[str, Any]]:
        merchant_id = self._managed_merchant(actor, merchant_id)

        shifts = list(self._shifts.list_for_merchant(merchant_id=merchant_id, work_date=work_date))
        if not shifts:
            return []
        ids = [s.shift_id for s in shifts]
        events = self._events.list_for_shifts(ids)
        by_shift: dict[int, list[Anomaly]] = {}
        for a in self._anomalies.list_for_shifts(ids):
            by_shift.setdefault(a.shift_id, []).append(a)

        names: dict[int, str] = {}
        rows: list[dict[str, Any]] = []
        for shift in shifts:
            if shift.employee_id not in names:
                employee = self._directory.get_employee(shift.employee_id)
                names[shift.employee_id] = employee.full_name if employee else f"#{shift.employee_id}"

            sh = self._hours.shift_hours(shift, events=events)
            anomalies = by_shift.get(shift.shift_id, [])
            rows.append(
                {
                    "id": shift.shift_id,
                    "employeeName": names[shift.employee_id],
                    "date": shift.work_date.strftime("%Y-%m-%d"),
                    "startTime": shift.planned_start.strftime("%H:%M") if shift.planned_start else None,
                    "endTime": shift.planned_end.strftime("%H:%M") if shift.planned_end else None,
                    "checkInTime": sh.check_in.strftime("%H:%M") if sh.check_in else None,
                    "checkOutTime": sh.check_out.strftime("%H:%M") if sh.check_out else None,
                    "validationStatus": derive_shift_status(anomalies, checked_out=sh.check_out is not None).value,
                    "hasAnomalies": bool(anomalies),
                    "hasOvertime": sh.overtime_minutes > self._settings.overtime_threshold_minutes,
                    "totalHours": hours(sh.worked_minutes),
                }
            )
        return rows
