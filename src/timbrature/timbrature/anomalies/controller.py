from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.actor import Actor
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import actor_from_session, json_body, json_endpoint
from ..common.validators import require_id
from ..container import Container
from ..core.constants import API_PREFIX
from ..core.exceptions import ValidationError
from .service import anomaly_payload


def register(app: Flask, container: Container) -> None:
    service = container.anomaly_service

    def _merchant_id(actor: Actor) -> int:
        if actor.merchant_id:
            return int(actor.merchant_id)
        return require_id(request.args.get("merchantId"), "Merchant")

    @app.route(f"{API_PREFIX}/anomaly/resolve", methods=["POST"], endpoint="timbrature_anomaly_resolve")
    @json_endpoint
    def anomaly_resolve():
        actor = actor_from_session()
        data = json_body()
        approve = data.get("approve")
        if approve is not None and not isinstance(approve, bool):
            raise ValidationError("Il campo approve deve essere true o false")
        anomaly = service.resolve(
            require_id(data.get("anomalyId"), "Anomalia"),
            data.get("reason"),
            actor=actor,
            approve=approve,
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "anomaly": anomaly_payload(anomaly)}), 200

    def _decide(anomaly_id: int, approve: bool):
        actor = actor_from_session()
        data = json_body()
        anomaly = service.resolve(
            anomaly_id,
            data.get("reason"),
            actor=actor,
            approve=approve,
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "anomaly": anomaly_payload(anomaly)}), 200

    @app.route(f"{API_PREFIX}/anomaly/<int:anomaly_id>/approve", methods=["POST"], endpoint="timbrature_anomaly_approve")
    @json_endpoint
    def anomaly_approve(anomaly_id: int):
        return _decide(anomaly_id, True)

    @app.route(f"{API_PREFIX}/anomaly/<int:anomaly_id>/reject", methods=["POST"], endpoint="timbrature_anomaly_reject")
    @json_endpoint
    def anomaly_reject(anomaly_id: int):
        return _decide(anomaly_id, False)

    @app.route(f"{API_PREFIX}/auto-validate", methods=["POST"], endpoint="timbrature_auto_validate")
    @json_endpoint
    def auto_validate():
        actor = actor_from_session()
        actor.require_manager()
        date_s = request.args.get("date")
        work_date = parse_iso_date(date_s) if date_s else None
        result = service.auto_validate_sweep(
            _merchant_id(actor), as_of=now_local(), work_date=work_date, actor=actor
        )
        return jsonify(result.to_dict()), 200

    @app.route(f"{API_PREFIX}/batch-approve", methods=["POST"], endpoint="timbrature_batch_approve")
    @json_endpoint
    def batch_approve():
        actor = actor_from_session()
        data = request.get_json(silent=True)
        shift_ids = data.get("shiftIds") if isinstance(data, dict) else data
        if not isinstance(shift_ids, list):
            raise ValidationError("Elenco turni non valido")
        count = service.batch_approve(shift_ids, actor=actor)
        return jsonify({"success": True, "message": f"{count} anomalie approvate", "countApproved": count}), 200

    @app.route(f"{API_PREFIX}/merchant/shifts", methods=["GET"], endpoint="timbrature_merchant_shifts")
    @json_endpoint
    def merchant_shifts():
        actor = actor_from_session()
        date_s = request.args.get("date")
        work_date = parse_iso_date(date_s) if date_s else now_local().date()
        rows = service.list_merchant_shifts(_merchant_id(actor), work_date, actor=actor)
        return jsonify(rows), 200
