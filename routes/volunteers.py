"""Volunteer registration and attendance update API."""

import logging
from datetime import datetime

from flask import Blueprint, jsonify, redirect, request

import database
from attendance import ATTENDANCE_STATUSES, REMARKS
from errors import ConflictError, NotFoundError, ValidationError
from hours import compute_hours

logger = logging.getLogger(__name__)

volunteers_bp = Blueprint('volunteers', __name__)

_REQUIRED_FIELDS = (
    "district", "event_name", "event_id", "event_format", "name", "email",
    "mobile_no", "role", "date", "start_time", "end_time",
)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _validate(data):
    """Check a full volunteer payload; returns it with the date normalized."""
    missing = [f for f in _REQUIRED_FIELDS if not str(data.get(f) or "").strip()]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    try:
        data["date"] = datetime.strptime(str(data["date"])[:10], "%Y-%m-%d").date().isoformat()
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD.") from None
    # New registrations start as registered; an explicit empty status is rejected
    data.setdefault("attendance", "registered")
    if data["attendance"] not in ATTENDANCE_STATUSES:
        raise ValidationError(f"Invalid attendance: {data['attendance']!r}")
    if data.get("remarks") is None:
        data["remarks"] = ""
    if data["remarks"] not in REMARKS:
        raise ValidationError(f"Invalid remarks: {data['remarks']!r}")
    return data


def _payload():
    data = request.get_json(silent=True) or {}
    # Hours are derived from the shift times and never taken from the client
    data.pop("hours_volunteered", None)
    return {k: data[k] for k in database.VOLUNTEER_FIELDS if k in data}


# ---------------------------------------------------------------------------
# Legacy path
# ---------------------------------------------------------------------------

@volunteers_bp.route("/api/volunteer", methods=["GET", "POST", "PUT", "DELETE"])
@volunteers_bp.route("/api/volunteer/<path:rest>", methods=["GET", "POST", "PUT", "DELETE"])
def legacy_volunteer_path(rest=None):
    """Redirect the singular path to /api/volunteers, keeping the method."""
    target = "/api/volunteers" + (f"/{rest}" if rest else "")
    if request.query_string:
        target += "?" + request.query_string.decode()
    logger.info(f"Redirecting {request.method} {request.full_path} -> {target}")
    return redirect(target, code=307)


# ---------------------------------------------------------------------------
# Volunteers CRUD
# ---------------------------------------------------------------------------

@volunteers_bp.route("/api/volunteers")
def list_volunteers():
    return jsonify(database.get_volunteers())


@volunteers_bp.route("/api/volunteers/search")
def search_volunteers():
    query = request.args.get("query", "").strip()
    if len(query) < 2:
        return jsonify([])
    return jsonify(database.search_volunteers(query))


@volunteers_bp.route("/api/volunteers", methods=["POST"])
def create_volunteer():
    data = _validate(_payload())

    existing = database.find_duplicate_registration(
        data["event_id"], data["date"], data["name"], data["email"], data["mobile_no"],
    )
    if existing:
        raise ConflictError(
            "Volunteer already exists for this event. "
            f"Found: {existing['name']} ({existing['email']})"
        )

    hours = compute_hours(data["start_time"], data["end_time"])
    volunteer = database.create_volunteer(data, hours)
    return jsonify(volunteer), 201


@volunteers_bp.route("/api/volunteers/<int:volunteer_id>", methods=["PUT"])
def update_volunteer(volunteer_id):
    current = database.get_volunteer(volunteer_id)
    if not current:
        raise NotFoundError("Volunteer not found")

    # Attendance updates send only the fields that changed
    merged = {f: current.get(f) for f in database.VOLUNTEER_FIELDS}
    merged.update(_payload())
    data = _validate(merged)

    hours = compute_hours(data["start_time"], data["end_time"])
    volunteer = database.update_volunteer(volunteer_id, data, hours)
    if not volunteer:
        raise NotFoundError("Volunteer not found")
    return jsonify(volunteer)


@volunteers_bp.route("/api/volunteers/<int:volunteer_id>", methods=["DELETE"])
def delete_volunteer(volunteer_id):
    if not database.delete_volunteer(volunteer_id):
        raise NotFoundError("Volunteer not found")
    return jsonify({"message": "Volunteer deleted successfully"})


@volunteers_bp.route("/api/volunteers/event/<event_id>")
def event_volunteers(event_id):
    date = request.args.get("date", "")
    volunteers = database.fetch_records(
        event_id=event_id, date_from=date or None, date_to=date or None,
    )
    return jsonify(volunteers)
