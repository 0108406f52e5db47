from __future__ import annotations

from flask import Flask, jsonify

from ..common.geo import GeoPoint
from ..common.http import actor_from_session, json_body, json_endpoint
from ..common.validators import require_id
from ..container import Container
from ..core.constants import API_PREFIX
from .service import break_payload, overtime_payload, shift_payload


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route(f"{API_PREFIX}/check-in", methods=["POST"], endpoint="timbrature_check_in")
    @json_endpoint
    def check_in():
        actor = actor_from_session()
        data = json_body()
        result = service.check_in(
            require_id(data.get("shiftId"), "Turno"),
            actor=actor,
            location=GeoPoint.from_payload(data.get("location")),
        )
        return jsonify(result.to_dict()), 200

    @app.route(f"{API_PREFIX}/check-out", methods=["POST"], endpoint="timbrature_check_out")
    @json_endpoint
    def check_out():
        actor = actor_from_session()
        data = json_body()
        result = service.check_out(
            require_id(data.get("shiftId"), "Turno"),
            actor=actor,
            location=GeoPoint.from_payload(data.get("location")),
        )
        return jsonify(result.to_dict()), 200

    @app.route(f"{API_PREFIX}/break/start", methods=["POST"], endpoint="timbrature_break_start")
    @json_endpoint
    def break_start():
        actor = actor_from_session()
        data = json_body()
        started = service.start_break(
            require_id(data.get("shiftId"), "Turno"),
            actor=actor,
            break_type=data.get("breakType") or "General",
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "message": "Pausa iniziata", "break": break_payload(started)}), 200

    @app.route(f"{API_PREFIX}/break/end", methods=["POST"], endpoint="timbrature_break_end")
    @json_endpoint
    def break_end():
        actor = actor_from_session()
        data = json_body()
        ended = service.end_break(require_id(data.get("breakId"), "Pausa"), actor=actor)
        return jsonify({"success": True, "message": "Pausa terminata", "break": break_payload(ended)}), 200

    @app.route(f"{API_PREFIX}/status", methods=["GET"], endpoint="timbrature_status")
    @json_endpoint
    def status():
        employee_id = actor_from_session().require_employee()
        return jsonify(service.get_current_status(employee_id)), 200

    @app.route(f"{API_PREFIX}/today", methods=["GET"], endpoint="timbrature_today")
    @json_endpoint
    def today():
        employee_id = actor_from_session().require_employee()
        return jsonify(shift_payload(service.get_today_shift(employee_id))), 200

    @app.route(f"{API_PREFIX}/overtime/classify", methods=["POST"], endpoint="timbrature_overtime_classify")
    @json_endpoint
    def overtime_classify():
        actor = actor_from_session()
        data = json_body()
        rec = service.classify_overtime(
            require_id(data.get("overtimeId"), "Straordinario"),
            data.get("overtimeType"),
            actor=actor,
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "overtime": overtime_payload(rec)}), 200
