from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from ..attendance.repository import ClockEventRepository
from ..common.actor import Actor
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, parse_enum
from ..core.enums import ClockEventKind, CorrectionStatus
from ..core.exceptions import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from ..core.settings import TimbratureSettings
from ..shifts.repository import ShiftRepository
from .model import ClockCorrection, effective_time
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)


def correction_payload(c: ClockCorrection) -> dict[str, Any]:
    return {
        "id": c.correction_id,
        "shiftId": c.shift_id,
        "kind": c.kind.value,
        "originalTime": c.original_time.isoformat(),
        "correctedTime": c.corrected_time.isoformat(),
        "reason": c.reason,
        "isWithinWindow": c.is_within_window,
        "status": c.status.value,
    }


class CorrectionService:
    """Employee-proposed clock corrections; the original event is never rewritten."""

    def __init__(
        self,
        shifts: ShiftRepository,
        clock_events: ClockEventRepository,
        corrections: CorrectionRepository,
        *,
        settings: TimbratureSettings | None = None,
    ):
        self._shifts = shifts
        self._events = clock_events
        self._corrections = corrections
        self._settings = settings or TimbratureSettings()

    def effective_time(self, shift_id: int, kind: ClockEventKind) -> Optional[datetime]:
        event = self._events.get_for_shift(int(shift_id), kind)
        if not event:
            return None
        return effective_time(event.event_time, self._corrections.latest_approved(int(shift_id), kind))

    def correct_clock_event(
        self,
        shift_id: int,
        kind: Any,
        corrected_time: datetime,
        *,
        actor: Actor,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> ClockCorrection:
        now = now or now_local()
        employee_id = actor.require_employee()

        shift = self._shifts.get_by_id(int(shift_id))
        if not shift or shift.employee_id != employee_id:
            raise NotFoundError("Turno non trovato")

        kind = parse_enum(ClockEventKind, kind, "Tipo timbratura")
        event = self._events.get_for_shift(shift.shift_id, kind)
        if not event:
            raise NotFoundError("Timbratura non trovata")

        if kind == ClockEventKind.CHECK_OUT:
            check_in = self.effective_time(shift.shift_id, ClockEventKind.CHECK_IN)
            if check_in and corrected_time < check_in:
                raise ValidationError("L'uscita non può precedere l'entrata")
        else:
            check_out = self.effective_time(shift.shift_id, ClockEventKind.CHECK_OUT)
            if check_out and corrected_time > check_out:
                raise ValidationError("L'entrata non può seguire l'uscita")

        within = now - event.event_time <= timedelta(hours=self._settings.self_resolution_hours)
        status = CorrectionStatus.APPROVED if within else CorrectionStatus.PENDING

        correction_id = self._corrections.create(
            shift_id=shift.shift_id,
            employee_id=employee_id,
            kind=kind,
            original_time=event.event_time,
            corrected_time=corrected_time,
            reason=optional_text(reason),
            is_within_window=within,
            status=status,
            created_at=now,
            decided_by=actor.label if within else None,
        )
        logger.info(
            "Correction %s for %s on shift %s: %s -> %s (%s)",
            correction_id,
            kind.value,
            shift.shift_id,
            event.event_time,
            corrected_time,
            status.value,
        )
        created = self._corrections.get_by_id(correction_id)
        if not created:
            raise NotFoundError("Correzione non trovata")
        return created

    def decide_correction(
        self,
        correction_id: int,
        approve: bool,
        *,
        actor: Actor,
        now: datetime | None = None,
    ) -> ClockCorrection:
        now = now or now_local()
        actor.require_manager()

        current = self._corrections.get_by_id(int(correction_id))
        if not current:
            raise NotFoundError("Correzione non trovata")
        shift = self._shifts.get_by_id(current.shift_id)
        if not shift:
            raise NotFoundError("Turno non trovato")
        if not actor.can_manage(shift.merchant_id):
            raise AuthorizationError("Non puoi gestire i turni di un altro merchant")
        if current.status != CorrectionStatus.PENDING:
            raise InvalidStateError("Correzione già decisa")

        status = CorrectionStatus.APPROVED if approve else CorrectionStatus.REJECTED
        ok = self._corrections.decide(
            correction_id=current.correction_id,
            status=status,
            decided_by=actor.label,
            decided_at=now,
        )
        if not ok:
            raise InvalidStateError("Correzione già decisa")
        logger.info("Correction %s %s by %s", current.correction_id, status.value, actor.label)

        decided = self._corrections.get_by_id(current.correction_id)
        if not decided:
            raise NotFoundError("Correzione non trovata")
        return decided
