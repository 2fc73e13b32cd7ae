from __future__ import annotations

from flask import Flask, request

from ..attendance.geofence import GeoCoordinate
from ..common.responses import error_response, fail, ok
from ..common.validators import require_float, require_non_empty
from ..container import Container
from ..core.constants import DEFAULT_YEAR_PREFIX
from ..core.enums import LocationErrorKind
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import PinQuery
from .devices import ReportedGeolocation
from .session import session_to_dict
from .state_machine import Failed


def _error_kind(value: str) -> LocationErrorKind:
    try:
        return LocationErrorKind(value)
    except ValueError:
        return LocationErrorKind.UNKNOWN


def register(app: Flask, container: Container) -> None:
    service = container.capture_service

    @app.route("/api/capture/sessions", methods=["POST"], endpoint="open_capture_session")
    def open_capture_session():
        try:
            data = request.get_json(silent=True) or {}
            query = PinQuery(
                year_prefix=str(data.get("year") or DEFAULT_YEAR_PREFIX),
                branch=require_non_empty(data.get("branch"), "branch"),
                roll_fragment=require_non_empty(str(data.get("roll") or ""), "roll"),
            )
            student = container.resolvers.get("default").resolve(query)
            if student is None:
                raise NotFoundError(f"No student with PIN {query.compose()}")

            session = service.open_session(student)
            snapshot = session_to_dict(session)
            if isinstance(session.state, Failed):
                # Kept so the kiosk can retry once permissions are granted.
                return fail(session.state.message, 409, data=snapshot)
            return ok(snapshot, 201)
        except Exception as e:
            return error_response(e)

    @app.route("/api/capture/sessions/<session_id>", methods=["GET"], endpoint="get_capture_session")
    def get_capture_session(session_id: str):
        try:
            return ok(session_to_dict(service.get(session_id)))
        except Exception as e:
            return error_response(e)

    @app.route("/api/capture/sessions/<session_id>/location", methods=["POST"], endpoint="report_location")
    def report_location(session_id: str):
        """Position (or the browser's geolocation error) for a running session."""
        try:
            session = service.get(session_id)
            geolocation = session.geolocation
            if not isinstance(geolocation, ReportedGeolocation):
                raise ValidationError("This kiosk reports a fixed position")

            data = request.get_json(silent=True) or {}
            if data.get("error"):
                geolocation.fail(_error_kind(str(data["error"])), str(data.get("message") or ""))
            else:
                geolocation.report(
                    GeoCoordinate(
                        latitude=require_float(data.get("latitude"), "latitude"),
                        longitude=require_float(data.get("longitude"), "longitude"),
                    )
                )
            return ok(session_to_dict(session))
        except Exception as e:
            return error_response(e)

    @app.route("/api/capture/sessions/<session_id>/cancel", methods=["POST"], endpoint="cancel_capture_session")
    def cancel_capture_session(session_id: str):
        try:
            return ok(session_to_dict(service.cancel(session_id)))
        except Exception as e:
            return error_response(e)

    @app.route("/api/capture/sessions/<session_id>/reset", methods=["POST"], endpoint="reset_capture_session")
    def reset_capture_session(session_id: str):
        try:
            return ok(session_to_dict(service.reset(session_id)))
        except Exception as e:
            return error_response(e)

    @app.route("/api/capture/sessions/<session_id>/retry", methods=["POST"], endpoint="retry_capture_session")
    def retry_capture_session(session_id: str):
        try:
            session = service.retry(session_id)
            snapshot = session_to_dict(session)
            if isinstance(session.state, Failed):
                return fail(session.state.message, 409, data=snapshot)
            return ok(snapshot)
        except Exception as e:
            return error_response(e)

    @app.route("/api/capture/sessions/<session_id>", methods=["DELETE"], endpoint="discard_capture_session")
    def discard_capture_session(session_id: str):
        try:
            service.discard(session_id)
            return ok(None)
        except Exception as e:
            return error_response(e)
