import json

import pytest
from PIL import Image

from lodging.suite import compare, find_fixtures, run_suite


def test_bundled_fixtures_pass(fixtures_dir):
    results = run_suite(fixtures_dir)

    assert [r.name for r in results] == ["chic-stay.txt", "harbor-view.txt"]
    assert all(r.passed for r in results), [r.diffs for r in results]


def test_compare_only_checks_expected_keys():
    parsed = {"hotelName": "Riverside Hotel", "paid": True, "rooms": "2"}
    expected = {"hotelName": "Riverside Hotel", "paid": True, "phone": None}

    assert compare(parsed, expected) == []


def test_compare_reports_mismatches():
    diffs = compare({"totalCost": "50.00", "paid": False}, {"totalCost": "123.45", "paid": True, "rooms": "1"})

    assert diffs == [
        'totalCost: expected "123.45", got "50.00"',
        'paid: expected "True", got "False"',
        'rooms: expected "1", got "None"',
    ]


def test_missing_and_invalid_expected_json(tmp_path):
    (tmp_path / "a.txt").write_text("Thanks, Maria Lopez", encoding="utf-8")
    (tmp_path / "b.txt").write_text("Thanks, Maria Lopez", encoding="utf-8")
    (tmp_path / "b.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "c.txt").write_text("Thanks, Maria Lopez", encoding="utf-8")
    (tmp_path / "c.json").write_text(json.dumps({"guestName": "Maria Lopez"}), encoding="utf-8")
    (tmp_path / "notes.md").write_text("ignored", encoding="utf-8")

    results = {r.name: r for r in run_suite(tmp_path)}

    assert sorted(results) == ["a.txt", "b.txt", "c.txt"]
    assert "Missing expected JSON" in results["a.txt"].error
    assert "Invalid expected JSON" in results["b.txt"].error
    assert results["c.txt"].passed


def test_find_fixtures_pairs_documents(tmp_path):
    (tmp_path / "x.pdf").write_bytes(b"%PDF")
    (tmp_path / "x.json").write_text("{}", encoding="utf-8")
    (tmp_path / "y.png").write_bytes(b"")

    pairs = find_fixtures(tmp_path)

    assert pairs == [(tmp_path / "x.pdf", tmp_path / "x.json"), (tmp_path / "y.png", None)]


def test_missing_directory(tmp_path):
    with pytest.raises(FileNotFoundError):
        run_suite(tmp_path / "nope")


def test_truncated_image_is_reported_not_raised(tmp_path):
    Image.effect_noise((64, 64), 80).save(tmp_path / "cut.png")
    data = (tmp_path / "cut.png").read_bytes()
    (tmp_path / "cut.png").write_bytes(data[:-60])
    (tmp_path / "cut.json").write_text(json.dumps({"paid": False}), encoding="utf-8")
    (tmp_path / "ok.txt").write_text("Thanks, Maria Lopez", encoding="utf-8")
    (tmp_path / "ok.json").write_text(json.dumps({"guestName": "Maria Lopez"}), encoding="utf-8")

    results = {r.name: r for r in run_suite(tmp_path)}

    assert "Unreadable image" in results["cut.png"].error
    assert results["ok.txt"].passed
