import json

import pytest

from receipt_understanding.cli.main import main


@pytest.fixture
def no_rules(tmp_path):
    return str(tmp_path / "missing-rules.json")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("RECEIPT_DATE_ORDER", "RECEIPT_MAX_AMOUNT", "RECEIPT_OCR_LANG"):
        monkeypatch.delenv(var, raising=False)


def test_text_mode_prints_json(tmp_path, no_rules, capsys):
    scan = tmp_path / "scan.txt"
    scan.write_text("CAFE COFFEE DAY\nCappuccino  Rs.120\nTotal: Rs.120", encoding="utf-8")

    status = main(["--text", str(scan), "--rules", no_rules])

    assert status == 0
    out = json.loads(capsys.readouterr().out.strip())
    assert out["file"] == scan.as_posix()
    assert out["success"] is True
    assert out["data"]["category"] == "Food & Dining"
    assert out["data"]["items"] == ["Cappuccino"]


def test_text_mode_reports_failures(tmp_path, no_rules, capsys):
    good = tmp_path / "good.txt"
    good.write_text("Total: Rs.50", encoding="utf-8")
    bad = tmp_path / "bad.txt"
    bad.write_text("no amount here", encoding="utf-8")

    status = main(["--text", str(good), str(bad), "--rules", no_rules])

    assert status == 1
    lines = [json.loads(ln) for ln in capsys.readouterr().out.splitlines()]
    assert [ln["success"] for ln in lines] == [True, False]
    assert lines[1]["error"] == "amount not found"


def test_date_order_from_environment(tmp_path, no_rules, monkeypatch, capsys):
    scan = tmp_path / "scan.txt"
    scan.write_text("Date: 03/04/2024\nTotal: Rs.50", encoding="utf-8")
    monkeypatch.setenv("RECEIPT_DATE_ORDER", "mdy")

    main(["--text", str(scan), "--rules", no_rules])

    assert json.loads(capsys.readouterr().out)["data"]["date"] == "2024-03-04"


def test_custom_rules_file(tmp_path, capsys):
    rules = tmp_path / "rules.json"
    rules.write_text(json.dumps({"categories": [{"name": "Education", "keywords": ["school"]}]}),
                     encoding="utf-8")
    scan = tmp_path / "scan.txt"
    scan.write_text("DPS School\nFees Rs.2000", encoding="utf-8")

    main(["--text", str(scan), "--rules", str(rules)])

    assert json.loads(capsys.readouterr().out)["data"]["category"] == "Education"


@pytest.mark.parametrize("args, env", [
    (["--max-amount", "lots"], {}),
    (["--max-amount", "-5"], {}),
    ([], {"RECEIPT_DATE_ORDER": "ymd"}),
])
def test_bad_configuration_exits_1(tmp_path, no_rules, monkeypatch, capsys, args, env):
    for k, v in env.items():
        monkeypatch.setenv(k, v)
    scan = tmp_path / "scan.txt"
    scan.write_text("Total: Rs.50", encoding="utf-8")

    assert main(["--text", str(scan), "--rules", no_rules] + args) == 1
    assert "[ERROR]" in capsys.readouterr().err


def test_bad_rules_file_exits_1(tmp_path, capsys):
    rules = tmp_path / "rules.json"
    rules.write_text("{broken", encoding="utf-8")

    assert main(["--text", "whatever.txt", "--rules", str(rules)]) == 1
    assert "not valid JSON" in capsys.readouterr().err


def test_batch_mode(tmp_path, no_rules, capsys):
    incoming = tmp_path / "in"
    incoming.mkdir()
    (incoming / "cafe.txt").write_text("CAFE COFFEE DAY\nTotal: Rs.120", encoding="utf-8")
    output = tmp_path / "out"

    status = main(["--incoming", str(incoming), "--output", str(output), "--subdir", "batch-1",
                   "--rules", no_rules, "--export-db", "-v"])

    assert status == 0
    reports = output / "batch-1" / "reports"
    assert (reports / "receipts.csv").exists()
    assert (reports / "results.json").exists()
    assert (reports / "receipts.sqlite").exists()
    out = capsys.readouterr().out
    assert "[INFO] Processing receipts for: batch-1" in out
    assert "[DEBUG] Food & Dining: 20 keyword(s)" in out


def test_batch_mode_with_nothing_to_do(tmp_path, no_rules):
    status = main(["--incoming", str(tmp_path / "in"), "--output", str(tmp_path / "out"),
                   "--subdir", "empty", "--rules", no_rules])
    assert status == 0


def test_rules_directory_exits_1(tmp_path, capsys):
    assert main(["--text", "whatever.txt", "--rules", str(tmp_path)]) == 1
    assert "cannot read rules file" in capsys.readouterr().err
