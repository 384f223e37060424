"""Mastersheet and individual-report PDFs for volunteer attendance."""

import logging
from collections import namedtuple
from datetime import datetime
from enum import Enum

from fpdf import FPDF

import config
from attendance import person_report, summarize
from errors import NotFoundError, StreamError, ValidationError
from hours import format_hours

logger = logging.getLogger(__name__)


class ReportFormat(str, Enum):
    FULL = "full"
    SUMMARY = "summary"
    INDIVIDUAL = "individual"


Column = namedtuple("Column", "label width align")

# Page geometry is in points on A4 landscape. Column widths are fixed so the
# printed sign-in sheet lines up with the physical forms.
MARGIN = 50
PAGE_BOTTOM_GAP = 100
HEADER_LINE_HEIGHT = 10
CELL_PADDING = 5

FULL_COLUMNS = [
    Column("S/N", 40, "C"),
    Column("Name", 120, "L"),
    Column("Shift Start Time\n(hh:mm)", 80, "C"),
    Column("Shift End Time\n(hh:mm)", 80, "C"),
    Column("Acknowledgement of\nReceipt of Meal Allowance\nOnly sign if received", 120, "C"),
    Column("Time In\n(hh:mm)", 80, "C"),
    Column("Sign In", 80, "C"),
    Column("Time Out\n(hh:mm)", 80, "C"),
    Column("Sign Out", 80, "C"),
]
SUMMARY_COLUMNS = [
    Column("S/N", 40, "C"),
    Column("Name", 150, "L"),
    Column("Email", 190, "L"),
    Column("Mobile", 100, "C"),
    Column("Role", 120, "C"),
    Column("Total Hours", 80, "C"),
]
INDIVIDUAL_COLUMNS = [
    Column("Event ID", 90, "C"),
    Column("Event Name", 220, "C"),
    Column("Date", 90, "C"),
    Column("Role", 120, "C"),
    Column("Hours", 70, "C"),
    Column("Status", 90, "C"),
]

Layout = namedtuple("Layout", "columns table_top header_height row_height repeat_header")

LAYOUTS = {
    ReportFormat.FULL: Layout(FULL_COLUMNS, 180, 40, 25, True),
    ReportFormat.SUMMARY: Layout(SUMMARY_COLUMNS, 160, 30, 25, False),
    ReportFormat.INDIVIDUAL: Layout(INDIVIDUAL_COLUMNS, 210, 30, 20, False),
}


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def _safe(text):
    """Replace non-latin-1 chars so Helvetica won't choke."""
    return str(text).encode("latin-1", "replace").decode("latin-1")


def _fit_text(pdf, text, max_width):
    """Trim text with an ellipsis until it fits max_width."""
    max_width -= 2 * pdf.c_margin
    if pdf.get_string_width(text) <= max_width:
        return text
    while text and pdf.get_string_width(text + "...") > max_width:
        text = text[:-1]
    return text + "..." if text else ""


def _fmt_date(value):
    """ISO date to DD/MM/YYYY; anything unparseable is shown as-is."""
    s = str(value or "")
    try:
        return datetime.fromisoformat(s[:10]).strftime("%d/%m/%Y")
    except ValueError:
        return s


def _label(pdf, x, y, text, size=12, style=""):
    pdf.set_font("Helvetica", style, size)
    pdf.set_xy(x, y)
    pdf.cell(pdf.w - x - MARGIN, size + 2, _safe(text))


# ---------------------------------------------------------------------------
# Table drawing
# ---------------------------------------------------------------------------

def _draw_cell(pdf, x, y, width, height, text="", align="C"):
    """Stroke a cell border and place its text.

    Text is split on newlines and the lines are stacked, centred vertically
    as a block. Left-aligned text is inset by CELL_PADDING.
    """
    pdf.rect(x, y, width, height)
    if not text:
        return
    lines = _safe(text).split("\n")
    line_height = height if len(lines) == 1 else HEADER_LINE_HEIGHT
    top = y + (height - line_height * len(lines)) / 2
    inset = CELL_PADDING if align == "L" else 0
    inner = width - 2 * inset
    for i, line in enumerate(lines):
        pdf.set_xy(x + inset, top + i * line_height)
        pdf.cell(inner, line_height, _fit_text(pdf, line, inner), align=align)


def _draw_row(pdf, columns, y, height, values):
    x = MARGIN
    for col, value in zip(columns, values):
        _draw_cell(pdf, x, y, col.width, height, value, col.align)
        x += col.width


def _draw_table_header(pdf, layout, y):
    pdf.set_font("Helvetica", "B", 9)
    x = MARGIN
    for col in layout.columns:
        # Header labels are always centred, even over left-aligned columns
        _draw_cell(pdf, x, y, col.width, layout.header_height, col.label, "C")
        x += col.width
    pdf.set_font("Helvetica", "", 9)
    return y + layout.header_height


def _draw_table(pdf, layout, rows):
    """Draw the header and data rows, breaking pages past the bottom gap."""
    limit = pdf.h - PAGE_BOTTOM_GAP
    y = _draw_table_header(pdf, layout, layout.table_top)
    for values in rows:
        if y > limit:
            pdf.add_page()
            y = MARGIN
            if layout.repeat_header:
                y = _draw_table_header(pdf, layout, y)
        _draw_row(pdf, layout.columns, y, layout.row_height, values)
        y += layout.row_height


# ---------------------------------------------------------------------------
# Page headers and row builders per format
# ---------------------------------------------------------------------------

def _event_header(pdf, title, metadata):
    _label(pdf, MARGIN, 50, title, size=14)
    _label(pdf, 250, 50, metadata.get("event_name", ""))
    _label(pdf, MARGIN, 80, "Event Date")
    _label(pdf, 250, 80, _fmt_date(metadata.get("date")))
    _label(pdf, MARGIN, 100, "Reporting Time")
    _label(pdf, 250, 100, metadata.get("reporting_time") or config.REPORTING_TIME)
    _label(pdf, MARGIN, 120, "Reporting Venue")
    _label(pdf, 250, 120, metadata.get("venue") or config.REPORTING_VENUE)


def _full_page(pdf, records, metadata):
    _event_header(pdf, "Volunteer Deployment for", metadata)
    pdf.set_font("Helvetica", "", 10)
    pdf.set_xy(MARGIN, 145)
    pdf.multi_cell(pdf.w - 2 * MARGIN, 12, _safe(metadata.get("note") or config.SERVICE_HOURS_NOTE))
    # The trailing five columns stay blank for signing on paper
    return [
        [str(r.get("serial_number", "")), r.get("name", ""),
         r.get("start_time", ""), r.get("end_time", ""), "", "", "", "", ""]
        for r in records
    ]


def _summary_page(pdf, people, metadata):
    # Raw volunteer records are rolled up per person first
    if any("total_hours" not in p for p in people):
        people = summarize(people, "event")["people"]
    _event_header(pdf, "Volunteer Hours Summary for", metadata)
    return [
        [str(i), p.get("name", ""), p.get("email", ""), p.get("mobile_no", ""),
         p.get("role", ""), format_hours(p.get("total_hours"))]
        for i, p in enumerate(people, 1)
    ]


def _individual_page(pdf, records, metadata):
    info = person_report(records)
    _label(pdf, MARGIN, 50, "Individual Volunteer Report", size=14, style="B")
    block = [
        ("Name", metadata.get("name") or info["name"]),
        ("Email", info["email"]),
        ("Phone", info["mobile_no"]),
        ("Total Events Registered", info["events_registered"]),
        ("Events Attended", info["events_attended"]),
        ("Total Hours Volunteered", f"{format_hours(info['total_hours'])} hours"),
    ]
    for i, (label, value) in enumerate(block):
        y = 80 + i * 20
        _label(pdf, MARGIN, y, label, size=11, style="B")
        _label(pdf, 250, y, str(value), size=11)
    return [
        [r.get("event_id", ""), r.get("event_name", ""), _fmt_date(r.get("date")),
         r.get("role", ""), format_hours(r.get("hours_volunteered"), 2),
         r.get("attendance", "")]
        for r in records
    ]


_PAGE_BUILDERS = {
    ReportFormat.FULL: _full_page,
    ReportFormat.SUMMARY: _summary_page,
    ReportFormat.INDIVIDUAL: _individual_page,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _coerce_format(fmt):
    try:
        return ReportFormat(fmt)
    except ValueError:
        raise ValidationError(f"Unknown report format: {fmt}") from None


def build_document(fmt, records, metadata=None):
    """Lay out a report and return the FPDF document without emitting it.

    records are raw volunteer records for "full" and "individual", and person
    summaries (see attendance.summarize) for "summary"; raw records passed
    for "summary" are summarized per person.
    """
    fmt = _coerce_format(fmt)
    if not records:
        raise NotFoundError("No volunteers found for this report")
    metadata = metadata or {}

    pdf = FPDF(orientation="L", unit="pt", format="A4")
    pdf.set_auto_page_break(False)
    pdf.set_margins(MARGIN, MARGIN, MARGIN)
    pdf.set_title(_safe(metadata.get("event_name") or f"{fmt.value} report"))
    pdf.add_page()

    rows = _PAGE_BUILDERS[fmt](pdf, records, metadata)
    _draw_table(pdf, LAYOUTS[fmt], rows)
    return pdf


def render(fmt, records, metadata=None):
    """Return the report as PDF bytes."""
    pdf = build_document(fmt, records, metadata)
    data = bytes(pdf.output())
    logger.info(
        f"Rendered {ReportFormat(fmt).value} report: {len(records)} rows, "
        f"{pdf.pages_count} pages, {len(data)} bytes"
    )
    return data


def render_to(stream, fmt, records, metadata=None):
    """Write the report to a binary file-like object.

    A failed write raises StreamError; bytes already written are left as-is.
    """
    data = render(fmt, records, metadata)
    try:
        stream.write(data)
    except (OSError, ValueError) as e:
        logger.error(f"Writing {len(data)}-byte PDF failed: {e}")
        raise StreamError(f"PDF output failed: {e}") from e
    return len(data)


def report_filename(fmt, event_id, date=None):
    """Download filename, e.g. mastersheet-full_E1_2026-03-01.pdf."""
    day = str(date or datetime.now().date().isoformat())[:10]
    safe_id = str(event_id).replace(" ", "_").replace("/", "-")
    if ReportFormat(fmt) is ReportFormat.INDIVIDUAL:
        return f"individual_{safe_id}_{day}.pdf"
    return f"mastersheet-{ReportFormat(fmt).value}_{safe_id}_{day}.pdf"
