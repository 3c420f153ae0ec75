"""
Tests for the command line simulation.
"""
import pytest
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from main import generate_participants, load_participants, main


class TestLoadParticipants:
    def test_list_of_names(self, tmp_path):
        path = tmp_path / 'players.yaml'
        path.write_text(yaml.dump(['Ann', 'Bob', 'Cat']))
        assert load_participants(str(path)) == [(1, 'Ann'), (2, 'Bob'), (3, 'Cat')]

    def test_mapping(self, tmp_path):
        path = tmp_path / 'players.yaml'
        path.write_text(yaml.dump({'u1': 'Ann', 'u2': 'Bob'}))
        assert load_participants(str(path)) == [('u1', 'Ann'), ('u2', 'Bob')]

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'players.yaml'
        path.write_text('')
        assert load_participants(str(path)) == []

    def test_generated(self):
        assert generate_participants(3) == [(1, 'Player 1'), (2, 'Player 2'), (3, 'Player 3')]


class TestMain:
    def test_generated_players(self, capsys, monkeypatch):
        monkeypatch.delenv('KNOCKOUT_SETTINGS', raising=False)
        assert main(['--count', '7', '--seed', '3']) == 0
        out = capsys.readouterr().out
        assert 'Final Bracket' in out
        assert 'Champion: Player' in out

    def test_players_from_file(self, tmp_path, capsys, monkeypatch):
        monkeypatch.delenv('KNOCKOUT_SETTINGS', raising=False)
        path = tmp_path / 'players.yaml'
        path.write_text(yaml.dump(['Ann', 'Bob', 'Cat', 'Dan', 'Eve']))
        assert main([str(path), '--seed', '11']) == 0
        out = capsys.readouterr().out
        assert 'sat out and rejoined in round 3' in out

    def test_no_players(self, tmp_path, capsys, monkeypatch):
        monkeypatch.delenv('KNOCKOUT_SETTINGS', raising=False)
        path = tmp_path / 'players.yaml'
        path.write_text('')
        assert main([str(path)]) == 1
        assert 'No participants loaded.' in capsys.readouterr().out

    def test_invalid_settings(self, tmp_path, capsys):
        path = tmp_path / 'settings.yaml'
        path.write_text(yaml.dump({'die_sides': 1}))
        assert main(['--settings', str(path)]) == 2
        assert 'Invalid settings' in capsys.readouterr().out

    def test_minimum_not_met(self, tmp_path, capsys):
        path = tmp_path / 'settings.yaml'
        path.write_text(yaml.dump({'min_participants': 10}))
        assert main(['--settings', str(path), '--count', '4']) == 1
        assert 'Tournament stopped' in capsys.readouterr().out
