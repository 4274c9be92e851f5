import io
import json

import pytest

import run


@pytest.fixture(autouse=True)
def no_config_file(tmp_path, monkeypatch):
    monkeypatch.setattr("lodging.config.CONFIG_FILE", tmp_path / "config.json")
    monkeypatch.setattr(run, "CONFIG_FILE", tmp_path / "config.json")


def test_help(capsys):
    assert run.main(["--help"]) == 0
    assert "Usage:" in capsys.readouterr().out


def test_version(capsys):
    assert run.main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == run.VERSION


def test_parse_file_prints_json(fixtures_dir, capsys):
    assert run.main([str(fixtures_dir / "harbor-view.txt")]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["hotelName"] == "Harbor View Grand Hotel"
    assert data["totalCost"] == "612.40"


def test_parse_file_with_score(fixtures_dir, capsys):
    assert run.main(["--score", str(fixtures_dir / "chic-stay.txt")]) == 0
    assert "Completeness: 100/100 (complete)" in capsys.readouterr().out


def test_missing_file(tmp_path, capsys):
    assert run.main([str(tmp_path / "nope.pdf")]) == 1
    assert "File not found" in capsys.readouterr().err


def test_unsupported_file(tmp_path, capsys):
    path = tmp_path / "booking.docx"
    path.write_bytes(b"")

    assert run.main([str(path)]) == 1
    assert "Unsupported file type" in capsys.readouterr().err


def test_text_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("Thanks, Maria Lopez\nTotal: $123.45"))

    assert run.main(["--text"]) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["guestName"] == "Maria Lopez"
    assert data["currency"] == "USD"


def test_suite_on_fixture_dir(fixtures_dir, capsys):
    assert run.main(["--suite", str(fixtures_dir)]) == 0

    out = capsys.readouterr().out
    assert "PASS chic-stay.txt" in out
    assert "2/2 fixtures passed" in out


def test_suite_reports_failures(tmp_path, capsys):
    (tmp_path / "a.txt").write_text("Thanks, Maria Lopez", encoding="utf-8")
    (tmp_path / "a.json").write_text(json.dumps({"guestName": "Someone Else"}), encoding="utf-8")

    assert run.main(["--suite", str(tmp_path)]) == 1

    out = capsys.readouterr().out
    assert "FAIL a.txt:" in out
    assert 'guestName: expected "Someone Else", got "Maria Lopez"' in out


def test_suite_missing_dir(tmp_path, capsys):
    assert run.main(["--suite", str(tmp_path / "nope")]) == 1
    assert "No lodging fixtures found" in capsys.readouterr().err


def test_init_config(tmp_path, capsys):
    assert run.main(["--init-config"]) == 0
    assert json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))["indent"] == 2
