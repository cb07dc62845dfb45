from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from dcreport.cli import main


def test_export_embedded_dataset(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["export", str(tmp_path)]) == 0

    names = sorted(p.name for p in tmp_path.iterdir())
    assert names == ["DC_Records_November_2025.xls", "DC_Records_October_2025.xls"]
    assert "DC_Records_October_2025.xls" in capsys.readouterr().out


def test_export_with_filters(tmp_path: Path) -> None:
    assert main(["export", str(tmp_path), "--date", "2025-11-03", "--search", "sinha"]) == 0

    files = list(tmp_path.iterdir())
    assert [p.name for p in files] == ["DC_Records_November_2025.xls"]
    content = files[0].read_text(encoding="utf-8")
    assert "LALITA DEVI 60 YRS" in content
    assert "PANKAJ MISHRA" not in content


def test_export_with_no_match_reports_notice(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out = tmp_path / "out"
    assert main(["export", str(out), "--search", "no such patient"]) == 0
    assert "No data to export." in capsys.readouterr().out
    assert not out.exists()


def test_export_zip(tmp_path: Path) -> None:
    assert main(["export", str(tmp_path), "--zip", "--referrer", "Unknown"]) == 0
    with zipfile.ZipFile(tmp_path / "DC_Records.zip") as zf:
        assert zf.namelist() == ["DC_Records_October_2025.xls"]


def test_missing_input_file_is_an_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["export", str(tmp_path), "--input", str(tmp_path / "missing.tsv")])
    assert code == 1
    assert "error:" in capsys.readouterr().err


def test_broken_config_is_an_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = tmp_path / "cfg.json"
    cfg.write_text("{", encoding="utf-8")
    assert main(["--config", str(cfg), "export", str(tmp_path / "out")]) == 1
    assert "error:" in capsys.readouterr().err
