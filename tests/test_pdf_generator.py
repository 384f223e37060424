import re
from io import BytesIO

import pytest

from attendance import summarize
from errors import NotFoundError, StreamError, ValidationError
from pdf_generator import (
    CELL_PADDING, FULL_COLUMNS, LAYOUTS, MARGIN, PAGE_BOTTOM_GAP, ReportFormat,
    build_document, render, render_to, report_filename,
)

META = {"event_id": "E1", "event_name": "Beach Cleanup", "date": "2026-03-01"}


def _uncompressed(pdf):
    pdf.set_compression(False)
    return bytes(pdf.output())


class _BrokenStream:
    def write(self, data):
        raise OSError("connection reset")


def test_render_full_returns_pdf(make_record):
    data = render("full", [make_record(), make_record(name="Bob")], META)
    assert data.startswith(b"%PDF")


def test_render_summary_and_individual(make_record):
    records = [make_record(), make_record(attendance="no show")]
    people = summarize(records)["people"]
    assert render(ReportFormat.SUMMARY, people, META).startswith(b"%PDF")
    assert render(ReportFormat.INDIVIDUAL, records, {"name": "Alice Tan"}).startswith(b"%PDF")


@pytest.mark.parametrize("fmt", ["full", "summary", "individual"])
def test_empty_records_raise_not_found_without_output(fmt):
    out = BytesIO()
    with pytest.raises(NotFoundError):
        render_to(out, fmt, [], META)
    assert out.getvalue() == b""


def test_unknown_format_rejected(make_record):
    with pytest.raises(ValidationError):
        render("weekly", [make_record()], META)


def test_full_sheet_content(make_record):
    pdf = build_document("full", [make_record(name="Alice Tan", start_time="08:30")], META)
    data = _uncompressed(pdf)
    assert b"(Alice Tan)" in data
    assert b"(08:30)" in data
    assert b"(Shift Start Time)" in data
    assert b"Beach Cleanup" in data
    assert b"01/03/2026" in data


def test_short_full_sheet_fits_one_page(make_record):
    pdf = build_document("full", [make_record() for _ in range(5)], META)
    assert pdf.pages_count == 1


def test_full_sheet_paginates_and_repeats_header(make_record):
    layout = LAYOUTS[ReportFormat.FULL]
    pdf = build_document("full", [make_record()], META)
    usable = pdf.h - PAGE_BOTTOM_GAP - layout.table_top
    n = int(usable // layout.row_height) + 40

    pdf = build_document("full", [make_record(name=f"V{i}") for i in range(n)], META)
    data = _uncompressed(pdf)

    assert pdf.pages_count > 1
    assert data.count(b"(S/N)") == pdf.pages_count


def test_summary_header_drawn_once(make_record):
    records = [make_record(name=f"V{i}", email=f"v{i}@x.com") for i in range(60)]
    people = summarize(records)["people"]
    pdf = build_document("summary", people, META)
    data = _uncompressed(pdf)

    assert pdf.pages_count > 1
    assert data.count(b"(Total Hours)") == 1


def test_individual_report_lists_every_record(make_record):
    records = [
        make_record(event_id="E1", hours_volunteered=5.0),
        make_record(event_id="E2", hours_volunteered=3.5),
        make_record(event_id="E3", attendance="no show"),
    ]
    data = _uncompressed(build_document("individual", records, {"name": "Alice Tan"}))
    for event_id in (b"(E1)", b"(E2)", b"(E3)"):
        assert event_id in data
    assert b"8.5 hours" in data
    assert b"(no show)" in data


def test_long_names_are_truncated_to_cell(make_record):
    long_name = "Bartholomew " * 10
    data = _uncompressed(build_document("full", [make_record(name=long_name)], META))
    assert long_name.encode() not in data
    assert b"..." in data


def test_non_latin_text_is_replaced(make_record):
    data = render("full", [make_record(name="Zoë 李")], META)
    assert data.startswith(b"%PDF")


def test_render_to_writes_bytes(make_record):
    out = BytesIO()
    size = render_to(out, "full", [make_record()], META)
    assert size == len(out.getvalue()) > 0


def test_render_to_stream_failure(make_record):
    with pytest.raises(StreamError):
        render_to(_BrokenStream(), "full", [make_record()], META)


def test_full_columns_fixed_widths():
    assert [c.width for c in FULL_COLUMNS] == [40, 120, 80, 80, 120, 80, 80, 80, 80]
    assert MARGIN == 50


def test_report_filename():
    assert report_filename("full", "E1", "2026-03-01") == "mastersheet-full_E1_2026-03-01.pdf"
    assert report_filename("summary", "E 2", "2026-03-01T10:00") == "mastersheet-summary_E_2_2026-03-01.pdf"
    assert report_filename(ReportFormat.INDIVIDUAL, "Alice Tan", "2026-03-01") == "individual_Alice_Tan_2026-03-01.pdf"


def _text_x(data, text):
    match = re.search(rb"BT ([\d.]+) [\d.]+ Td[^()]*\(" + re.escape(text) + rb"\) Tj", data)
    assert match, text
    return float(match.group(1))


def test_identity_columns_left_aligned_others_centred():
    left = {"Name", "Email"}
    for layout in LAYOUTS.values():
        for col in layout.columns:
            assert col.align == ("L" if col.label in left else "C"), col.label


def test_name_text_inset_and_serial_centred(make_record):
    pdf = build_document("full", [make_record(serial_number=7, name="Alice Tan")], META)
    data = _uncompressed(pdf)
    sn_col, name_col = FULL_COLUMNS[0], FULL_COLUMNS[1]

    name_x = MARGIN + sn_col.width
    assert _text_x(data, b"Alice Tan") == pytest.approx(
        name_x + CELL_PADDING + pdf.c_margin, abs=0.02)

    pdf.set_font("Helvetica", "", 9)
    expected = MARGIN + (sn_col.width - pdf.get_string_width("7")) / 2
    assert _text_x(data, b"7") == pytest.approx(expected, abs=0.02)
    assert name_col.align == "L"


def test_summary_accepts_raw_records(make_record):
    records = [make_record(hours_volunteered=5.0), make_record(hours_volunteered=3.5)]
    data = _uncompressed(build_document("summary", records, META))
    assert b"(8.5)" in data
    assert data.count(b"(Alice Tan)") == 1
