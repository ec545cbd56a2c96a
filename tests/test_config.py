"""
Tests for environment-driven settings.
"""
from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from studydash.config import Settings, load_settings


def test_jwt_secret_is_required():
    with patch.dict(os.environ, {}, clear=True):
        with pytest.raises(RuntimeError, match="JWT_SECRET"):
            load_settings()


def test_defaults():
    with patch.dict(os.environ, {"JWT_SECRET": "s3cret"}, clear=True):
        s = load_settings()
    assert s.canvas_api_url == "https://uc.instructure.com/api/v1"
    assert s.db_path == Path("data/studydash.db")
    assert s.sync_interval_hours == 3
    assert s.sync_cache_hours == 1
    assert s.sync_active_days == 7
    assert s.sync_extra_sources == ()
    assert s.scheduler_enabled is True
    assert s.users_file is None


def test_overrides_and_sources():
    env = {
        "JWT_SECRET": "s3cret",
        "CANVAS_API_URL": "https://school.instructure.com/api/v1/",
        "SYNC_EXTRA_SOURCES": "planner, Quizzes",
        "SCHEDULER_ENABLED": "false",
        "PORT": "8080",
        "USERS_FILE": "users.txt",
    }
    with patch.dict(os.environ, env, clear=True):
        s = load_settings()
    assert s.canvas_api_url == "https://school.instructure.com/api/v1"
    assert s.sync_extra_sources == ("planner", "quizzes")
    assert s.scheduler_enabled is False
    assert s.port == 8080
    assert s.users_file == Path("users.txt")


def test_unknown_source_is_rejected():
    with patch.dict(os.environ, {"JWT_SECRET": "x", "SYNC_EXTRA_SOURCES": "grades"}, clear=True):
        with pytest.raises(RuntimeError, match="grades"):
            load_settings()


def test_bad_number_is_rejected():
    with patch.dict(os.environ, {"JWT_SECRET": "x", "SYNC_INTERVAL_HOURS": "often"}, clear=True):
        with pytest.raises(RuntimeError):
            load_settings()


def test_canvas_web_url_strips_api_suffix():
    assert Settings(jwt_secret="x", canvas_api_url="https://uc.instructure.com/api/v1").canvas_web_url == "https://uc.instructure.com"
