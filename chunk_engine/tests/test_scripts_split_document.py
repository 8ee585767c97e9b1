from __future__ import annotations

import importlib
import json
import sys

import pytest


def test_split_document_help(monkeypatch):
    module = importlib.import_module("chunk_engine.scripts.split_document")
    monkeypatch.setattr(sys, "argv", ["split_document.py", "--help"])

    with pytest.raises(SystemExit) as exc:
        module.main()

    assert exc.value.code == 0


def test_split_document_writes_json_lines(monkeypatch, tmp_path, capsys):
    source = tmp_path / "docs"
    source.mkdir()
    (source / "a.md").write_text("---\nkbId: 7\n---\none two three four five", encoding="utf-8")
    (source / "b.txt").write_text("six seven", encoding="utf-8")
    output = tmp_path / "out.jsonl"

    module = importlib.import_module("chunk_engine.scripts.split_document")
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "split_document.py",
            "--source", str(source),
            "--max-tokens", "3",
            "--overlap", "0",
            "--estimator", "words",
            "--output", str(output),
        ],
    )

    module.main()

    rows = [json.loads(line) for line in output.read_text(encoding="utf-8").splitlines()]
    assert [r["text"] for r in rows] == ["one two three ", "four five", "six seven"]
    assert rows[0]["metadata"]["kbId"] == "7"
    assert [r["metadata"]["index"] for r in rows] == ["0", "1", "0"]
    assert "Split 2 document(s) into 3 segment(s)." in capsys.readouterr().err


def test_split_document_rejects_invalid_budget(monkeypatch, tmp_path):
    (tmp_path / "a.md").write_text("text", encoding="utf-8")
    module = importlib.import_module("chunk_engine.scripts.split_document")
    monkeypatch.setattr(
        sys,
        "argv",
        ["split_document.py", "--source", str(tmp_path), "--max-tokens", "10", "--overlap", "10", "--estimator", "words"],
    )

    with pytest.raises(SystemExit) as exc:
        module.main()

    assert exc.value.code == 2


def test_split_document_reports_missing_source(monkeypatch, tmp_path, capsys):
    module = importlib.import_module("chunk_engine.scripts.split_document")
    missing = tmp_path / "absent.md"
    monkeypatch.setattr(sys, "argv", ["split_document.py", "--source", str(missing), "--estimator", "words"])

    with pytest.raises(SystemExit) as exc:
        module.main()

    assert exc.value.code == 2
    assert "File not found" in capsys.readouterr().err
