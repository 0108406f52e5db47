from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import actor_from_session, json_endpoint
from ..container import Container
from ..core.constants import API_PREFIX


def register(app: Flask, container: Container) -> None:
    @app.route(f"{API_PREFIX}/wellbeing", methods=["GET"], endpoint="timbrature_wellbeing")
    @json_endpoint
    def wellbeing():
        employee_id = actor_from_session().require_employee()
        return jsonify(container.wellbeing_service.get_wellbeing(employee_id)), 200
