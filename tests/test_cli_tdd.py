from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from bingo_hall.cli import app
from bingo_hall.version import __version__

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_card_json_is_reproducible():
    first = runner.invoke(app, ["card", "--seed", "11", "--json"])
    second = runner.invoke(app, ["card", "--seed", "11", "--json"])
    assert first.exit_code == 0
    card = json.loads(first.output)
    assert card == json.loads(second.output)
    assert card[2][2] == "FREE"


def test_card_table_output():
    result = runner.invoke(app, ["card", "--seed", "3"])
    assert result.exit_code == 0
    assert "FREE" in result.output
    for letter in "BINGO":
        assert letter in result.output


def test_card_out_and_check(tmp_path: Path):
    out = tmp_path / "card.json"
    result = runner.invoke(app, ["card", "--seed", "8", "--json", "--out", str(out)])
    assert result.exit_code == 0
    doc = json.loads(out.read_text(encoding="utf-8"))
    top_row = ",".join(str(v) for v in doc["card"][0])

    win = runner.invoke(app, ["check", str(out), "--drawn", top_row])
    assert win.exit_code == 0
    assert "BINGO: row-0 (row)" in win.output

    miss = runner.invoke(app, ["check", str(out), "--drawn", "1"])
    assert miss.exit_code == 1
    assert "No bingo" in miss.output

    again = runner.invoke(app, ["card", "--seed", "8", "--out", str(out)])
    assert again.exit_code != 0


def test_check_rejects_malformed_card(tmp_path: Path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([[1, 2, 3]]), encoding="utf-8")
    result = runner.invoke(app, ["check", str(bad), "--drawn", "1,2,3"])
    assert result.exit_code == 2


def test_check_rejects_unparseable_file(tmp_path: Path):
    bad = tmp_path / "broken.json"
    bad.write_text("[[1, 2,", encoding="utf-8")
    result = runner.invoke(app, ["check", str(bad), "--drawn", "1"])
    assert result.exit_code == 2
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_patterns_listing():
    result = runner.invoke(app, ["patterns", "--category", "corner"])
    assert result.exit_code == 0
    assert "four-corners [corner]" in result.output
    assert "X . . . X" in result.output
    full = runner.invoke(app, ["patterns"])
    assert full.output.count("[") == 35
    assert runner.invoke(app, ["patterns", "--category", "spiral"]).exit_code != 0


def test_serve_dry_run(tmp_path: Path):
    cfg = tmp_path / "hall.yaml"
    cfg.write_text("port: 8123\n", encoding="utf-8")
    result = runner.invoke(app, ["serve", "--config", str(cfg), "--dry-run"])
    assert result.exit_code == 0
    assert "127.0.0.1:8123" in result.output
    assert "Params hash: sha256:" in result.output
