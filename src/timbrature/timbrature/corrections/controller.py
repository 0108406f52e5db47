from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import actor_from_session, json_body, json_endpoint
from ..common.validators import require_id, require_non_empty
from ..container import Container
from ..core.constants import API_PREFIX
from .service import correction_payload


def register(app: Flask, container: Container) -> None:
    service = container.correction_service

    @app.route(f"{API_PREFIX}/correct", methods=["POST"], endpoint="timbrature_correct")
    @json_endpoint
    def correct():
        actor = actor_from_session()
        data = json_body()
        correction = service.correct_clock_event(
            require_id(data.get("shiftId"), "Turno"),
            data.get("kind"),
            parse_iso_datetime(require_non_empty(data.get("correctedTime") or "", "Orario corretto")),
            actor=actor,
            reason=data.get("reason"),
        )
        return jsonify({"success": True, "correction": correction_payload(correction)}), 200

    def _decide(correction_id: int, approve: bool):
        correction = service.decide_correction(correction_id, approve, actor=actor_from_session())
        return jsonify({"success": True, "correction": correction_payload(correction)}), 200

    @app.route(
        f"{API_PREFIX}/corrections/<int:correction_id>/approve",
        methods=["POST"],
        endpoint="timbrature_correction_approve",
    )
    @json_endpoint
    def correction_approve(correction_id: int):
        return _decide(correction_id, True)

    @app.route(
        f"{API_PREFIX}/corrections/<int:correction_id>/reject",
        methods=["POST"],
        endpoint="timbrature_correction_reject",
    )
    @json_endpoint
    def correction_reject(correction_id: int):
        return _decide(correction_id, False)
