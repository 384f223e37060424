"""Per-person and per-event roll-ups of volunteer attendance records."""

import config
from errors import ValidationError

ATTENDED = "attended"
ATTENDANCE_STATUSES = ("registered", "attended", "no show")
REMARKS = ("", "Warning", "Blacklist")
SCOPES = ("event", "all")


# ---------------------------------------------------------------------------
# Person identity
# ---------------------------------------------------------------------------

def _norm(value):
    return str(value or "").strip().casefold()


def person_key(record, policy=None):
    """Grouping key for a record: (name, email) as stored, or normalized."""
    policy = policy or config.PERSON_KEY_POLICY
    name = record.get("name", "")
    email = record.get("email", "")
    if policy == "exact":
        return (name, email)
    if policy == "normalized":
        return (_norm(name), _norm(email))
    raise ValidationError(f"Unknown person key policy: {policy}")


def _record_hours(record):
    try:
        return float(record.get("hours_volunteered") or 0)
    except (TypeError, ValueError):
        return 0.0


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------

def summarize(records, scope="event", policy=None):
    """Group records by person, totalling hours for attended records only.

    With scope "all" the records are also rolled up by event_id. Groups keep
    the order their key was first seen. Returns
    {"people": [...], "events": [...]}; both lists are empty for no input.
    """
    if scope not in SCOPES:
        raise ValidationError(f"Unknown summary scope: {scope}")

    people = {}
    events = {}
    for r in records:
        key = person_key(r, policy)
        person = people.get(key)
        if person is None:
            person = people[key] = {
                "name": r.get("name", ""),
                "email": r.get("email", ""),
                "mobile_no": r.get("mobile_no", ""),
                "role": r.get("role", ""),
                "total_hours": 0.0,
                "events_registered": 0,
                "events_attended": 0,
            }
        person["events_registered"] += 1
        if r.get("attendance") == ATTENDED:
            person["events_attended"] += 1
            person["total_hours"] += _record_hours(r)

        if scope == "all":
            event_id = r.get("event_id", "")
            if event_id not in events:
                events[event_id] = {
                    "event_id": event_id,
                    "event_name": r.get("event_name", ""),
                    "date": r.get("date", ""),
                    "event_format": r.get("event_format", ""),
                    "district": r.get("district", ""),
                    "count": 0,
                }
            events[event_id]["count"] += 1

    for person in people.values():
        person["total_hours"] = round(person["total_hours"], 2)

    return {"people": list(people.values()), "events": list(events.values())}


# ---------------------------------------------------------------------------
# Individual report
# ---------------------------------------------------------------------------

def match_person(records, name, email, mobile_no):
    """Records belonging to one person: name/email ignore case, mobile exact."""
    name_n = _norm(name)
    email_n = _norm(email)
    mobile = str(mobile_no or "").strip()
    return [
        r for r in records
        if _norm(r.get("name")) == name_n
        and _norm(r.get("email")) == email_n
        and str(r.get("mobile_no") or "").strip() == mobile
    ]


def person_report(records):
    """Personal-info block for the individual report, or None for no records."""
    if not records:
        return None
    first = records[0]
    attended = [r for r in records if r.get("attendance") == ATTENDED]
    return {
        "name": first.get("name", ""),
        "email": first.get("email", ""),
        "mobile_no": first.get("mobile_no", ""),
        "events_registered": len(records),
        "events_attended": len(attended),
        "total_hours": round(sum(_record_hours(r) for r in attended), 2),
    }
