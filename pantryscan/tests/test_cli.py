import json
from pathlib import Path

import pytest

from pantryscan.cli.main import main


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1
    assert "scan" in capsys.readouterr().out


def test_parse_text_prints_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    text_file = tmp_path / "receipt.txt"
    text_file.write_text("PUBLIX\nWHOLE MILK 3.50\nBREAD 579\nTOTAL 9.29\n", encoding="utf-8")

    exit_code = main(["parse-text", str(text_file), "--json", "--purchase-date", "2025-08-20"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["purchaseDate"] == "2025-08-20"
    assert payload["storeName"] == "PUBLIX"
    assert [(item["name"], item["price"]) for item in payload["items"]] == [("Whole Milk", 3.5), ("Bread", 5.79)]


def test_parse_text_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["parse-text", str(tmp_path / "missing.txt")]) == 1
    assert "file not found" in capsys.readouterr().out


def test_parse_text_without_items_fails(tmp_path: Path) -> None:
    text_file = tmp_path / "receipt.txt"
    text_file.write_text("TOTAL 9.29\n", encoding="utf-8")

    assert main(["parse-text", str(text_file)]) == 1


def test_dictate_prints_table(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["dictate", "3", "apples,", "a", "pint", "of", "blueberries"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Items:      2" in out
    assert "apples" in out
    assert "blueberries" in out


def test_dictate_from_file_with_local_enhancement(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("ENHANCE_SERVICE_URL", raising=False)
    transcript = tmp_path / "list.txt"
    transcript.write_text("2 pounds of chicken", encoding="utf-8")

    exit_code = main(["dictate", "--file", str(transcript), "--enhance", "--json"])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "local categorization" in captured.err
    payload = json.loads(captured.out)
    assert payload["items"][0]["unit"] == "lbs"
    assert payload["items"][0]["category"] == "meat"


def test_dictate_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["dictate", "--file", str(tmp_path / "missing.txt")]) == 1
    assert "file not found" in capsys.readouterr().out


def test_dictate_without_items_fails(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["dictate", "the"]) == 1
    assert "Error:" in capsys.readouterr().out


def test_invalid_purchase_date(tmp_path: Path) -> None:
    text_file = tmp_path / "receipt.txt"
    text_file.write_text("MILK 3.50\n", encoding="utf-8")

    assert main(["parse-text", str(text_file), "--purchase-date", "20/08/2025"]) == 2


def test_scan_missing_image(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["scan", str(tmp_path / "missing.jpg")]) == 1
    assert "Receipt file not found" in capsys.readouterr().out
