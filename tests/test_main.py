"""
Tests for the command line report.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import main
from arena.stages import generate_bracket, update_bracket_score
from arena.storage import YamlStore, save_stages
from conftest import make_finished_stage


class TestFormatting:
    """Tests for the report formatters."""

    def test_format_standings(self, abc_group):
        lines = main.format_standings(abc_group)
        assert lines[0] == "# Group 1"
        assert lines[1] == "  1. Ana / Bia: 2 W, 0 L, balance +9"
        assert lines[3].endswith("balance -7")

    def test_format_bracket_with_champion(self, seeded_rng):
        stage = generate_bracket(make_finished_stage(1), seeded_rng)
        final = list(stage.tournament_matches.values())[0]
        stage = update_bracket_score(stage, final.id, 6, 4)

        lines = main.format_bracket(stage.tournament_matches)

        assert lines[0] == "## Final"
        assert lines[1] == "  G1P1a / G1P1b vs G1P2a / G1P2b  6-4"
        assert lines[-1] == "Champion: G1P1a / G1P1b"

    def test_format_bracket_pending_slots(self, seeded_rng):
        stage = generate_bracket(make_finished_stage(2), seeded_rng)
        lines = main.format_bracket(stage.tournament_matches)
        assert "  TBD vs TBD" in lines
        assert not any(line.startswith("Champion") for line in lines)


class TestMain:
    """Tests for the main entry point."""

    def test_prints_stored_stage(self, tmp_path, monkeypatch, capsys, seeded_rng):
        data_dir = str(tmp_path / "data")
        save_stages(YamlStore(data_dir), [generate_bracket(make_finished_stage(2, name="Opening"), seeded_rng)])
        monkeypatch.setattr(sys, 'argv', ['main.py', '--data-dir', data_dir])

        main.main()

        out = capsys.readouterr().out
        assert "=== Opening ===" in out
        assert "# Group 2" in out
        assert "## Semifinal" in out

    def test_no_stages(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, 'argv', ['main.py', '--data-dir', str(tmp_path), '--stage', 'Missing'])
        main.main()
        assert "No stages found" in capsys.readouterr().out
