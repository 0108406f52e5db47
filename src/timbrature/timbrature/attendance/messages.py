"""Testi mostrati al dipendente (italiano) e opzioni di risoluzione rapida."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from ..common.validators import parse_enum
from ..core.constants import BREAK_SUGGESTION_MIN_SHIFT_HOURS
from ..core.enums import AnomalyReason, AnomalyType
from ..shifts.model import ScheduledShift

REASON_LABELS: dict[str, AnomalyReason] = {
    "Traffico": AnomalyReason.TRAFFIC,
    "Permesso": AnomalyReason.AUTHORIZED_LEAVE,
    "Recupero": AnomalyReason.TIME_RECOVERY,
    "Emergenza personale": AnomalyReason.PERSONAL_EMERGENCY,
    "Dimenticato": AnomalyReason.FORGOTTEN,
    "Problema tecnico": AnomalyReason.TECHNICAL_ISSUE,
    "Smart working": AnomalyReason.SMART_WORKING,
    "Altro": AnomalyReason.OTHER,
}

QUICK_RESOLUTION_OPTIONS: dict[AnomalyType, list[str]] = {
    AnomalyType.LATE_CHECK_IN: ["Traffico", "Permesso", "Recupero", "Altro"],
    AnomalyType.EARLY_CHECK_OUT: ["Permesso", "Emergenza personale", "Recupero", "Altro"],
    AnomalyType.LATE_CHECK_OUT: ["Recupero", "Smart working", "Altro"],
    AnomalyType.EARLY_CHECK_IN: ["Recupero", "Altro"],
    AnomalyType.LOCATION_MISMATCH: ["Smart working", "Problema tecnico", "Altro"],
    AnomalyType.EXTENDED_BREAK: ["Emergenza personale", "Recupero", "Altro"],
}


def quick_options(anomaly_type: AnomalyType) -> list[str]:
    return list(QUICK_RESOLUTION_OPTIONS.get(anomaly_type, ["Altro"]))


def reason_from_input(value: Any) -> AnomalyReason:
    """Accept an Italian quick-option label, or the enum value/name."""

    raw = str(value or "").strip()
    for label, reason in REASON_LABELS.items():
        if raw.lower() == label.lower():
            return reason
    return parse_enum(AnomalyReason, value, "Motivo")


# ---- Empathetic messages ----

def late_check_in(minutes: int) -> str:
    return f"Noto che oggi sei arrivato {minutes} minuti più tardi del solito. C'è stato qualche imprevisto?"


def early_check_in() -> str:
    return "Noto che sei arrivato più presto del solito. Grazie per la puntualità! 😊"


def late_check_out() -> str:
    return "Stai facendo molte ore, va tutto bene? Ricorda di prenderti cura di te! 💚"


def early_check_out() -> str:
    return "Noto che oggi hai finito prima. Tutto ok?"


def location_mismatch() -> str:
    return "La posizione della timbratura non corrisponde alla sede. Stai lavorando da remoto?"


def extended_break(minutes: int) -> str:
    return f"La pausa è durata {minutes} minuti più del previsto. Va tutto bene?"


# ---- Response texts ----

def check_in_message(at: datetime) -> str:
    return f"✓ Entrata {at:%H:%M}"


def check_in_context(shift: ScheduledShift) -> str:
    span_hours = shift.planned_span_minutes / 60.0
    return f"Giornata {span_hours:.1f}h, pausa prevista {int(shift.planned_break_minutes or 0)} min"


def check_in_next_steps(shift: ScheduledShift) -> str:
    start = shift.planned_start_at
    span = shift.planned_span_minutes
    if start is not None and span >= BREAK_SUGGESTION_MIN_SHIFT_HOURS * 60:
        break_at = start + timedelta(minutes=span // 2)
        return f"Pausa consigliata verso le {break_at:%H:%M}"
    return "Ricorda l'uscita stasera"


def check_out_message(at: datetime) -> str:
    return f"✓ Uscita {at:%H:%M}"


def check_out_context(worked_hours: float, planned_hours: float) -> str:
    return f"Ore lavorate: {worked_hours:g} h (previste: {planned_hours:g} h)"


def overtime_prompt(minutes: int) -> str:
    return f"Rilevato straordinario di {minutes} minuti. Come preferisci gestirlo?"


GOOD_REST = "Buon riposo! 🌙"

# ---- Status query ----

NO_SHIFT_TODAY = "Nessun turno oggi"
ENJOY_REST = "Goditi il riposo! 🌟"
NOT_CHECKED_IN = "Non hai ancora fatto check-in"
REMEMBER_CHECK_IN = "Ricorda di fare check-in quando arrivi"
SHIFT_COMPLETED = "Hai completato il turno"
ON_BREAK = "Sei in pausa"
ENJOY_BREAK = "Goditi la pausa! ☕"
AT_WORK = "Sei al lavoro"
TIME_FOR_BREAK = "Forse è ora di una pausa?"
KEEP_GOING = "Continua così! 💪"

# ---- Wellbeing ----

WELLBEING_ALERT = "Stai facendo molte ore, va tutto bene? Ricorda di prenderti cura di te! 💚"
