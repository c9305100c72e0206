"""Tests for nourish.cli."""
from __future__ import annotations

import json
import sqlite3

import pytest

from nourish.cli import build_parser, main


@pytest.fixture
def env(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("NOURISH_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("NOURISH_LOG_LEVEL", raising=False)
    monkeypatch.delenv("NOURISH_HYDRATION_INTERVAL", raising=False)
    return tmp_path


def _run(*argv: str) -> int:
    return main(["--assume-permission", *argv])


class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_meal_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["schedule", "brunch"])


class TestCommands:
    def test_status_json(self, env, capsys):
        assert _run("status", "--json") == 0
        status = json.loads(capsys.readouterr().out)
        assert status["meals"]["lunch"]["window"] == {"start": "12:00", "end": "14:00"}

    def test_window_persists(self, env, capsys):
        assert _run("window", "dinner", "18:00", "20:30") == 0
        capsys.readouterr()
        assert _run("status", "--json") == 0
        status = json.loads(capsys.readouterr().out)
        assert status["meals"]["dinner"]["window"] == {"start": "18:00", "end": "20:30"}

    def test_bad_window(self, env, capsys):
        assert _run("window", "dinner", "25:00", "20:30") == 2
        assert "Time out of range" in capsys.readouterr().err

    def test_schedule_list_clear(self, env, capsys):
        assert _run("schedule", "lunch") == 0
        assert "scheduled for Lunch" in capsys.readouterr().out

        assert _run("list", "--json") == 0
        pending = json.loads(capsys.readouterr().out)
        assert len(pending) == 3
        assert all(p["title"] == "Reminder: Lunch" for p in pending)

        assert _run("cancel", pending[0]["id"]) == 0
        capsys.readouterr()
        assert _run("clear") == 0
        capsys.readouterr()
        assert _run("list") == 0
        assert "No reminders scheduled" in capsys.readouterr().out

    def test_hydrate(self, env, capsys):
        assert _run("hydrate", "--interval", "30") == 0
        assert "2 reminders scheduled for hydration" in capsys.readouterr().out

    def test_hydrate_invalid_interval(self, env, capsys):
        assert _run("hydrate", "--interval", "0") == 2

    def test_repeat(self, env, capsys):
        assert _run("repeat", "breakfast", "on") == 0
        assert "repeat: on" in capsys.readouterr().out

    def test_suggest(self, env, capsys):
        assert _run("suggest", "breakfast") == 0
        assert "Oats Upma" in capsys.readouterr().out


class TestErrors:
    def test_invalid_env_value(self, env, monkeypatch, capsys):
        monkeypatch.setenv("NOURISH_HYDRATION_INTERVAL", "abc")
        assert _run("status") == 2
        assert "❌" in capsys.readouterr().err

    def test_broken_database(self, env, capsys):
        assert _run("status") == 0
        with sqlite3.connect(env / "data" / "notifications.db") as conn:
            # same table name, but without the title/body columns
            conn.execute("DROP TABLE pending_notifications")
            conn.execute("CREATE TABLE pending_notifications (id TEXT, trigger_at TEXT)")
            conn.commit()
        capsys.readouterr()

        assert _run("list") == 1
        assert "could not list notifications" in capsys.readouterr().err

        assert _run("schedule", "lunch") == 1
        assert "Failed: could not list notifications" in capsys.readouterr().err
