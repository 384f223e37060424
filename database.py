import logging
import sqlite3
from datetime import datetime

import config

logger = logging.getLogger(__name__)

SERIAL_COUNTER = "volunteer_serial"

# Columns a client may write; serial_number, hours_volunteered and the
# timestamps are always set here.
VOLUNTEER_FIELDS = (
    "district", "event_name", "event_id", "event_format", "details",
    "name", "email", "mobile_no", "role", "date", "start_time", "end_time",
    "vms", "attendance", "remarks", "volunteer_shirt_taken", "shirt_size",
)
_BOOL_FIELDS = ("vms", "volunteer_shirt_taken")


# ---------------------------------------------------------------------------
# Connection
# ---------------------------------------------------------------------------

def get_db():
    conn = sqlite3.connect(str(config.DATABASE_PATH))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

def init_db():
    conn = get_db()
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS volunteers (
            id                    INTEGER PRIMARY KEY AUTOINCREMENT,
            serial_number         INTEGER UNIQUE NOT NULL,
            district              TEXT NOT NULL,
            event_name            TEXT NOT NULL,
            event_id              TEXT NOT NULL,
            event_format          TEXT NOT NULL,
            details               TEXT DEFAULT '',
            name                  TEXT NOT NULL,
            email                 TEXT NOT NULL,
            mobile_no             TEXT NOT NULL,
            role                  TEXT NOT NULL,
            date                  TEXT NOT NULL,
            start_time            TEXT NOT NULL,
            end_time              TEXT NOT NULL,
            hours_volunteered     REAL NOT NULL,
            vms                   INTEGER DEFAULT 0,
            attendance            TEXT NOT NULL DEFAULT 'registered'
                                  CHECK (attendance IN ('registered', 'attended', 'no show')),
            remarks               TEXT NOT NULL DEFAULT ''
                                  CHECK (remarks IN ('', 'Warning', 'Blacklist')),
            volunteer_shirt_taken INTEGER DEFAULT 0,
            shirt_size            TEXT DEFAULT '',
            created_at            TEXT NOT NULL,
            updated_at            TEXT NOT NULL
        );
        CREATE INDEX IF NOT EXISTS idx_volunteers_event ON volunteers(event_id, date);
        CREATE INDEX IF NOT EXISTS idx_volunteers_email ON volunteers(email);

        CREATE TABLE IF NOT EXISTS counters (
            name  TEXT PRIMARY KEY,
            value INTEGER NOT NULL
        );
    """)
    # Seed the sequence from existing rows so serials continue after a restore
    conn.execute(
        """INSERT OR IGNORE INTO counters (name, value)
           SELECT ?, COALESCE(MAX(serial_number), 0) FROM volunteers""",
        (SERIAL_COUNTER,),
    )
    conn.commit()
    conn.close()


def _row_to_dict(row):
    d = dict(row)
    for field in _BOOL_FIELDS:
        if field in d:
            d[field] = bool(d[field])
    return d


def _next_serial(conn):
    """Increment the serial counter inside the caller's write transaction.

    The UPDATE takes sqlite's write lock, which is held until the caller
    commits, so no other connection can read the same value.
    """
    conn.execute(
        "UPDATE counters SET value = value + 1 WHERE name = ?", (SERIAL_COUNTER,),
    )
    row = conn.execute(
        "SELECT value FROM counters WHERE name = ?", (SERIAL_COUNTER,),
    ).fetchone()
    return row["value"]


# ---------------------------------------------------------------------------
# Volunteers
# ---------------------------------------------------------------------------

def create_volunteer(data, hours_volunteered):
    """Insert a volunteer record and return it with its new serial number."""
    values = {f: data.get(f) for f in VOLUNTEER_FIELDS}
    values["details"] = values["details"] or ""
    values["shirt_size"] = values["shirt_size"] or ""
    values["remarks"] = values["remarks"] or ""
    values["attendance"] = values["attendance"] or "registered"
    for field in _BOOL_FIELDS:
        values[field] = 1 if values[field] else 0

    now = datetime.now().isoformat()
    conn = get_db()
    try:
        serial = _next_serial(conn)
        cols = ", ".join(VOLUNTEER_FIELDS)
        marks = ", ".join("?" for _ in VOLUNTEER_FIELDS)
        cur = conn.execute(
            f"""INSERT INTO volunteers
                (serial_number, {cols}, hours_volunteered, created_at, updated_at)
                VALUES (?, {marks}, ?, ?, ?)""",
            (serial, *[values[f] for f in VOLUNTEER_FIELDS], hours_volunteered, now, now),
        )
        volunteer_id = cur.lastrowid
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    logger.info(f"Created volunteer {volunteer_id} with serial number {serial}")
    return get_volunteer(volunteer_id)


def get_volunteer(volunteer_id):
    conn = get_db()
    row = conn.execute("SELECT * FROM volunteers WHERE id = ?", (volunteer_id,)).fetchone()
    conn.close()
    return _row_to_dict(row) if row else None


def get_volunteers():
    """All volunteers, newest serial number first."""
    conn = get_db()
    rows = conn.execute("SELECT * FROM volunteers ORDER BY serial_number DESC").fetchall()
    conn.close()
    return [_row_to_dict(r) for r in rows]


def search_volunteers(query, limit=10):
    """Case-insensitive substring match on name, email or mobile number.

    % and _ in the query match literally.
    """
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    like = f"%{escaped}%"
    conn = get_db()
    rows = conn.execute(
        """SELECT * FROM volunteers
           WHERE name LIKE ? ESCAPE '\\' OR email LIKE ? ESCAPE '\\'
              OR mobile_no LIKE ? ESCAPE '\\'
           ORDER BY updated_at DESC LIMIT ?""",
        (like, like, like, limit),
    ).fetchall()
    conn.close()
    return [_row_to_dict(r) for r in rows]


def update_volunteer(volunteer_id, data, hours_volunteered):
    """Overwrite the writable fields and the recomputed hours. Returns the row."""
    values = {f: data.get(f) for f in VOLUNTEER_FIELDS}
    for field in _BOOL_FIELDS:
        values[field] = 1 if values[field] else 0
    now = datetime.now().isoformat()
    assignments = ", ".join(f"{f} = ?" for f in VOLUNTEER_FIELDS)
    conn = get_db()
    cur = conn.execute(
        f"""UPDATE volunteers
            SET {assignments}, hours_volunteered = ?, updated_at = ?
            WHERE id = ?""",
        (*[values[f] for f in VOLUNTEER_FIELDS], hours_volunteered, now, volunteer_id),
    )
    conn.commit()
    conn.close()
    if cur.rowcount == 0:
        return None
    logger.info(f"Updated volunteer {volunteer_id}")
    return get_volunteer(volunteer_id)


def delete_volunteer(volunteer_id):
    """Permanently delete a volunteer. Returns True if a row was removed."""
    conn = get_db()
    cur = conn.execute("DELETE FROM volunteers WHERE id = ?", (volunteer_id,))
    conn.commit()
    conn.close()
    if cur.rowcount:
        logger.info(f"Deleted volunteer {volunteer_id}")
    return cur.rowcount > 0


def find_duplicate_registration(event_id, date, name, email, mobile_no):
    """Existing record for the same event and date sharing name, email or mobile."""
    conn = get_db()
    row = conn.execute(
        """SELECT * FROM volunteers
           WHERE event_id = ? AND date = ?
             AND (name = ? OR email = ? OR mobile_no = ?)
           LIMIT 1""",
        (event_id, date, name, email, mobile_no),
    ).fetchone()
    conn.close()
    return _row_to_dict(row) if row else None


def fetch_records(event_id=None, date_from=None, date_to=None, person=None):
    """Volunteer records for reports, ordered by serial number.

    date_from/date_to are inclusive ISO dates. person is a dict with any of
    name, email, mobile_no; name and email match without regard to case.
    """
    sql = "SELECT * FROM volunteers WHERE 1=1"
    params = []
    if event_id:
        sql += " AND event_id = ?"
        params.append(event_id)
    if date_from:
        sql += " AND date >= ?"
        params.append(date_from)
    if date_to:
        sql += " AND date <= ?"
        params.append(date_to)
    if person:
        if person.get("name"):
            sql += " AND LOWER(name) = LOWER(?)"
            params.append(person["name"])
        if person.get("email"):
            sql += " AND LOWER(email) = LOWER(?)"
            params.append(person["email"])
        if person.get("mobile_no"):
            sql += " AND mobile_no = ?"
            params.append(person["mobile_no"])
    sql += " ORDER BY serial_number ASC"
    conn = get_db()
    rows = conn.execute(sql, params).fetchall()
    conn.close()
    return [_row_to_dict(r) for r in rows]
