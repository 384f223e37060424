"""Mastersheet, summary and individual report endpoints."""

import logging
from datetime import datetime
from io import BytesIO

from flask import Blueprint, jsonify, request, send_file

import database
from attendance import match_person, person_report, summarize
from errors import NotFoundError, ValidationError
from pdf_generator import ReportFormat, render_to, report_filename

logger = logging.getLogger(__name__)

reports_bp = Blueprint('reports', __name__)


def _parse_date(value):
    try:
        return datetime.strptime(str(value)[:10], "%Y-%m-%d").date().isoformat()
    except ValueError:
        raise ValidationError("Invalid date format. Use YYYY-MM-DD.") from None


def _send_pdf(fmt, records, metadata, filename):
    output = BytesIO()
    render_to(output, fmt, records, metadata)
    output.seek(0)
    return send_file(
        output, as_attachment=True, download_name=filename,
        mimetype="application/pdf",
    )


# ---------------------------------------------------------------------------
# Event mastersheets
# ---------------------------------------------------------------------------

@reports_bp.route("/api/generate-pdf", methods=["POST"])
def generate_pdf():
    data = request.get_json(silent=True) or {}
    event_id = str(data.get("event_id") or "").strip()
    event_name = str(data.get("event_name") or "").strip()
    date = data.get("date", "")
    report_type = data.get("type") or ReportFormat.FULL.value

    if not event_id or not event_name or not date:
        raise ValidationError("Event ID, event name, and date are required")
    if report_type not in (ReportFormat.FULL.value, ReportFormat.SUMMARY.value):
        raise ValidationError(f"Unknown mastersheet type: {report_type}")
    date = _parse_date(date)

    records = database.fetch_records(event_id=event_id, date_from=date, date_to=date)
    if not records:
        shown = datetime.fromisoformat(date).strftime("%d/%m/%Y")
        raise NotFoundError(f"No volunteers found for event {event_id} on {shown}")

    metadata = {
        "event_id": event_id,
        "event_name": event_name,
        "date": date,
        "reporting_time": data.get("reporting_time"),
        "venue": data.get("venue"),
    }
    if report_type == ReportFormat.SUMMARY.value:
        rows = summarize(records, "event")["people"]
    else:
        rows = records
    logger.info(f"Generating {report_type} mastersheet for {event_id} on {date} ({len(records)} records)")
    return _send_pdf(report_type, rows, metadata, report_filename(report_type, event_id, date))


@reports_bp.route("/api/summary")
def summary():
    event_id = request.args.get("event_id", "").strip()
    records = database.fetch_records(event_id=event_id or None)
    scope = "event" if event_id else "all"
    result = summarize(records, scope)
    result["scope"] = scope
    result["total_records"] = len(records)
    return jsonify(result)


# ---------------------------------------------------------------------------
# Individual report
# ---------------------------------------------------------------------------

def _individual_records(name, email, phone):
    if not name or not email or not phone:
        raise ValidationError("Name, phone number, and email are required")
    candidates = database.fetch_records(person={"email": email})
    records = match_person(candidates, name, email, phone)
    if not records:
        raise NotFoundError(
            "No matching volunteer found. Please check the name, phone number, and email address."
        )
    return records


@reports_bp.route("/api/individual-report")
def individual_report():
    name = request.args.get("name", "").strip()
    email = request.args.get("email", "").strip()
    phone = request.args.get("phone", "").strip()
    records = _individual_records(name, email, phone)
    return jsonify({"person": person_report(records), "history": records})


@reports_bp.route("/api/generate-individual-pdf", methods=["POST"])
def generate_individual_pdf():
    data = request.get_json(silent=True) or {}
    name = str(data.get("name") or "").strip()
    email = str(data.get("email") or "").strip()
    phone = str(data.get("phone") or "").strip()
    records = _individual_records(name, email, phone)
    filename = report_filename(ReportFormat.INDIVIDUAL, name)
    logger.info(f"Generating individual report for {email} ({len(records)} records)")
    return _send_pdf(ReportFormat.INDIVIDUAL, records, {"name": name}, filename)
