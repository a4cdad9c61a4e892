"""
Tests for the analyze_matchup command-line script.
Run with: pytest tests/test_analyze_matchup.py -v
"""

import importlib.util
import json
import sys
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "analyze_matchup.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("analyze_matchup", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


analyze_matchup = _load_script()


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["analyze_matchup.py", *args])
    return analyze_matchup.main()


def _write(tmp_path, payload):
    path = tmp_path / "payload.json"
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return str(path)


class TestDemo:
    """--demo runs the bundled sample matchup"""

    def test_demo_output_is_flagged(self, monkeypatch, capsys):
        assert _run(monkeypatch, "--demo") == 0
        body = json.loads(capsys.readouterr().out)
        assert body["demo"] is True
        assert body["home_team"]["alias"] == "DEN"
        assert body["away_team"]["alias"] == "PHX"
        assert body["win_estimate"]["reasons"][-1].startswith("Win probability: ")

    def test_pretty_output_is_indented(self, monkeypatch, capsys):
        assert _run(monkeypatch, "--demo", "--pretty") == 0
        out = capsys.readouterr().out
        assert out.startswith("{\n  ")
        assert json.loads(out)["demo"] is True


class TestInputFile:
    """--input reads an AnalysisRequest payload from disk"""

    def test_valid_payload(self, monkeypatch, capsys, tmp_path):
        path = _write(tmp_path, analyze_matchup.DEMO_PAYLOAD)
        assert _run(monkeypatch, "--input", path) == 0
        body = json.loads(capsys.readouterr().out)
        assert body["demo"] is False
        assert len(body["home_team"]["projections"]) > 0

    def test_missing_file(self, monkeypatch, capsys, tmp_path):
        assert _run(monkeypatch, "--input", str(tmp_path / "missing.json")) == 1
        assert capsys.readouterr().out == ""

    def test_malformed_json(self, monkeypatch, capsys, tmp_path):
        path = _write(tmp_path, "{not json")
        assert _run(monkeypatch, "--input", path) == 1
        assert capsys.readouterr().out == ""

    def test_invalid_payload(self, monkeypatch, capsys, tmp_path):
        payload = dict(analyze_matchup.DEMO_PAYLOAD)
        del payload["home_team_id"]
        path = _write(tmp_path, payload)
        assert _run(monkeypatch, "--input", path) == 1
        assert capsys.readouterr().out == ""

    def test_invalid_moneyline(self, monkeypatch, tmp_path):
        payload = dict(analyze_matchup.DEMO_PAYLOAD, home_moneyline=50)
        assert _run(monkeypatch, "--input", _write(tmp_path, payload)) == 1

    def test_roster_unavailable(self, monkeypatch, capsys, tmp_path):
        payload = dict(analyze_matchup.DEMO_PAYLOAD, home_roster=[], home_season_stats=[])
        assert _run(monkeypatch, "--input", _write(tmp_path, payload)) == 2
        body = json.loads(capsys.readouterr().out)
        assert body["error"] == "RosterUnavailable"
        assert body["team_id"] == analyze_matchup.DEMO_PAYLOAD["home_team_id"]


class TestArguments:

    def test_source_is_required(self, monkeypatch):
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch)
        assert exc.value.code == 2

    def test_sources_are_exclusive(self, monkeypatch, tmp_path):
        with pytest.raises(SystemExit):
            _run(monkeypatch, "--demo", "--input", str(tmp_path / "p.json"))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
