"""Tests for the bootstrap entry point."""
from unittest.mock import MagicMock, patch

import pytest

from src import main


def _context(project="p"):
    ctx = MagicMock()
    ctx.project_id = project
    ctx.__enter__.return_value = ctx
    ctx.__exit__.return_value = False
    return ctx


def test_run_success(monkeypatch):
    ctx = _context()
    monkeypatch.setattr(main.FirestoreContext, "create", MagicMock(return_value=ctx))

    with patch("src.main.check_connection", return_value=["students"]) as probe:
        assert main.run() == 0

    probe.assert_called_once_with(ctx.db)
    ctx.__exit__.assert_called_once()


def test_run_with_empty_database(monkeypatch):
    ctx = _context()
    monkeypatch.setattr(main.FirestoreContext, "create", MagicMock(return_value=ctx))

    with patch("src.main.check_connection", return_value=[]):
        assert main.run() == 0


def test_run_reports_missing_config(monkeypatch, caplog):
    monkeypatch.setenv("FIREBASE_PROJECT_ID", "")

    with patch("src.main.check_connection") as probe:
        assert main.run() == main.EXIT_CONFIG_ERROR

    probe.assert_not_called()
    assert "projectId" in caplog.text


def test_run_closes_context_when_probe_fails(monkeypatch):
    ctx = _context()
    monkeypatch.setattr(main.FirestoreContext, "create", MagicMock(return_value=ctx))

    with patch("src.main.check_connection", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            main.run()

    ctx.__exit__.assert_called_once()
