from __future__ import annotations

import zipfile
from pathlib import Path

from dcreport.export.xls_export import (
    MIME_TYPE,
    NO_DATA_NOTICE,
    bucket_by_month,
    build_export_documents,
    export_cases,
    export_cases_archive,
    month_stem,
    render_month_document,
)


def test_month_stem(make_case) -> None:
    assert month_stem(make_case(date="01 10 2025")) == "DC_Records_October_2025"
    assert month_stem(make_case(date="15 01 2024")) == "DC_Records_January_2024"
    assert month_stem(make_case(date="01 13 2025")) == "DC_Records_Unknown_Date"
    assert month_stem(make_case(date="01 00 2025")) == "DC_Records_Unknown_Date"
    assert month_stem(make_case(date="01 ab 2025")) == "DC_Records_Unknown_Date"
    assert month_stem(make_case(date="2025-10-01")) == "DC_Records_Unknown_Date"


def test_invalid_month_goes_to_unknown_file(make_case) -> None:
    good = make_case(date="05 10 2025")
    bad = make_case(date="05 13 2025")
    docs = build_export_documents([good, bad])
    assert [d.filename for d in docs] == [
        "DC_Records_October_2025.xls",
        "DC_Records_Unknown_Date.xls",
    ]
    assert all(d.mime_type == MIME_TYPE for d in docs)


def test_buckets_keep_first_encounter_order(make_case) -> None:
    nov = make_case(date="03 11 2025")
    octo = make_case(date="01 10 2025")
    nov2 = make_case(date="09 11 2025")
    buckets = bucket_by_month([nov, octo, nov2])
    assert list(buckets) == ["DC_Records_November_2025", "DC_Records_October_2025"]
    assert buckets["DC_Records_November_2025"] == [nov, nov2]


def test_document_layout(make_case) -> None:
    x1 = make_case(referrer="Dr. X", name="Zed 40 YRS", dc_amount=100)
    a1 = make_case(referrer="Dr. A", name="Amy 22 YRS", dc_amount=30)
    x2 = make_case(referrer="Dr. X", name="Bob 51 YRS", dc_amount=50)

    content = render_month_document("DC_Records_October_2025", [x1, a1, x2])

    assert "<x:Name>DC_Records_October_2025</x:Name>" in content
    for label in ("Date", "Patient Name", "Test Name", "Remark", "Gross Amount",
                  "Discount", "Payment Received", "Balance", "DC"):
        assert f'<th class="header">{label}</th>' in content

    # groups sorted, subtotal in the last cell, cases in input order
    assert content.index("<b>Dr. A</b>") < content.index("<b>Dr. X</b>")
    assert '<td colspan="8" class="group-header"><b>Dr. X</b></td><td class="dc-cell">150</td>' in content
    assert content.index("Zed 40 YRS") < content.index("Bob 51 YRS")
    assert content.index("<b>Dr. X</b>") < content.index("Zed 40 YRS")


def test_cells_are_escaped_and_amounts_plain(make_case) -> None:
    case = make_case(referrer="Dr. <Smith> & Co", total_fee=1234.6, fee_paid=1234.6)
    content = render_month_document("DC_Records_October_2025", [case])
    assert "Dr. &lt;Smith&gt; &amp; Co" in content
    assert '<td class="text-right">1235</td>' in content


def test_export_writes_one_file_per_month(tmp_path: Path, make_case) -> None:
    cases = [make_case(date="01 10 2025"), make_case(date="01 11 2025"), make_case(date="xx")]
    report = export_cases(cases, tmp_path / "out")

    assert report.notice is None
    assert sorted(p.name for p in report.files) == [
        "DC_Records_November_2025.xls",
        "DC_Records_October_2025.xls",
        "DC_Records_Unknown_Date.xls",
    ]
    for path in report.files:
        assert path.exists()
        assert path.read_text(encoding="utf-8").startswith("<html")


def test_empty_export_is_a_notice_not_an_error(tmp_path: Path) -> None:
    out = tmp_path / "out"
    report = export_cases([], out)
    assert report.is_empty
    assert report.notice == NO_DATA_NOTICE
    assert not out.exists()

    archive = export_cases_archive([], tmp_path / "reports.zip")
    assert archive.is_empty
    assert not (tmp_path / "reports.zip").exists()


def test_archive_bundles_all_documents(tmp_path: Path, make_case) -> None:
    cases = [make_case(date="01 10 2025"), make_case(date="01 13 2025")]
    report = export_cases_archive(cases, tmp_path / "reports.zip")

    assert report.files == [tmp_path / "reports.zip"]
    with zipfile.ZipFile(report.files[0]) as zf:
        assert sorted(zf.namelist()) == [
            "DC_Records_October_2025.xls",
            "DC_Records_Unknown_Date.xls",
        ]
