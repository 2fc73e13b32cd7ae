from __future__ import annotations

from flask import Flask, request

from ..common.responses import error_response, ok
from ..container import Container
from ..core.constants import DEFAULT_YEAR_PREFIX
from .model import PinQuery, user_to_dict


def _query_from(params) -> PinQuery:
    return PinQuery(
        year_prefix=str(params.get("year") or DEFAULT_YEAR_PREFIX),
        branch=str(params.get("branch") or ""),
        roll_fragment=str(params.get("roll") or ""),
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students/resolve", methods=["GET"], endpoint="resolve_student")
    def resolve_student():
        try:
            resolver = container.resolvers.get("default")
            query = resolver.normalize(_query_from(request.args))
            student = resolver.resolve(query)
            return ok(user_to_dict(student) if student else None, pin=query.compose())
        except Exception as e:
            return error_response(e)

    @app.route("/api/kiosks/<kiosk_id>/identifier", methods=["POST"], endpoint="kiosk_identifier")
    def kiosk_identifier(kiosk_id: str):
        """Keystroke feed from a kiosk. Only the latest identifier is answered."""
        try:
            data = request.get_json(silent=True) or {}
            resolver = container.resolvers.get(kiosk_id)
            if "branch" in data and str(data["branch"]).upper() != resolver.query.branch:
                resolver.change_branch(str(data["branch"]))

            current = resolver.query
            resolution = resolver.update(
                PinQuery(
                    year_prefix=str(data.get("year") or current.year_prefix),
                    branch=current.branch,
                    roll_fragment=str(data.get("roll") or ""),
                )
            )
            return ok(
                user_to_dict(resolution.student) if resolution.student else None,
                pin=resolution.query.compose(),
                roll=resolution.query.roll_fragment,
                stale=resolution.stale,
            )
        except Exception as e:
            return error_response(e)
