from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from keyword_taxonomy.scripts import group_keywords as cli


@pytest.fixture(autouse=True)
def _quiet_metrics(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OBSERVABILITY_METRICS_ENABLED", "false")
    monkeypatch.delenv("KEYWORD_LEXICON_PATH", raising=False)
    monkeypatch.delenv("KEYWORD_INVALID_RECORD_POLICY", raising=False)
    monkeypatch.delenv("KEYWORD_USE_ASSIGNED_CATEGORIES", raising=False)


def _write_records(tmp_path: Path, payload) -> Path:
    path = tmp_path / "keywords.json"
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


def test_cli_prints_grouped_keywords(tmp_path: Path, capsys) -> None:
    path = _write_records(
        tmp_path,
        [
            {"keyword": "yaz lastiği", "search_volume": 120},
            {"keyword": "yaz lastigi", "search_volume": 300},
            {"keyword": "petlas 205/55r16 fiyatı", "search_volume": 50},
        ],
    )

    exit_code = cli.main([str(path)])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["stats"]["duplicates_merged"] == 1
    assert [item["id"] for item in output["groups"]] == ["brands", "sizes", "price", "other"]
    assert output["groups"][-1]["keywords"][0]["keyword"] == "yaz lastiği"


def test_cli_summary_only_accepts_data_envelope(tmp_path: Path, capsys) -> None:
    path = _write_records(tmp_path, {"data": [{"keyword": "michelin vs pirelli", "search_volume": 40}]})

    exit_code = cli.main([str(path), "--summary-only", "--indent", "0"])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert "groups" not in output
    assert output["summary"]["total_groups"] == 2
    assert output["summary"]["total_volume"] == 80


def test_cli_reads_stdin(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO('[{"keyword": "lastik nasıl seçilir"}]'))

    exit_code = cli.main(["-"])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert [item["id"] for item in output["groups"]] == ["questions"]


def test_cli_reports_invalid_records(tmp_path: Path, capsys) -> None:
    path = _write_records(tmp_path, [{"keyword": "michelin"}, {"search_volume": 10}])

    exit_code = cli.main([str(path)])

    assert exit_code == 1
    assert "Record 1" in capsys.readouterr().err


def test_cli_skip_invalid(tmp_path: Path, capsys) -> None:
    path = _write_records(tmp_path, [{"keyword": "michelin"}, {"search_volume": 10}])

    exit_code = cli.main([str(path), "--skip-invalid", "--summary-only"])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["skipped_invalid"] == [{"index": 1, "reason": "keyword is missing or empty"}]


def test_cli_assigned_categories(tmp_path: Path, capsys) -> None:
    path = _write_records(
        tmp_path,
        [
            {"keyword": "kış lastiği", "search_volume": 70, "ai_category": "Mevsimsel"},
            {"keyword": "michelin", "search_volume": 10},
        ],
    )

    exit_code = cli.main([str(path), "--assigned-categories"])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["strategy"] == "assigned"
    assert [item["name"] for item in output["groups"]] == ["Mevsimsel", "Diğer"]


def test_cli_uses_lexicon_file(tmp_path: Path, capsys) -> None:
    path = _write_records(tmp_path, [{"keyword": "acme tires"}])
    lexicon_path = tmp_path / "lexicons.yaml"
    lexicon_path.write_text("brands:\n  - term: acme\n    display: ACME\n", encoding="utf-8")

    exit_code = cli.main([str(path), "--lexicons", str(lexicon_path)])

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["groups"][0]["subgroups"][0]["display_name"] == "ACME"


def test_cli_rejects_missing_lexicon_file(tmp_path: Path) -> None:
    path = _write_records(tmp_path, [])

    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(path), "--lexicons", str(tmp_path / "missing.yaml")])

    assert excinfo.value.code == 2


def test_cli_rejects_non_list_input(tmp_path: Path) -> None:
    path = _write_records(tmp_path, {"rows": []})

    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(path)])

    assert excinfo.value.code == 2
