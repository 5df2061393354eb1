"""Tests for configuration resolution."""

import multiprocessing

import pytest

from bgsched.config import DEFAULT_TICK_SECONDS, get_max_workers, get_tick_seconds


class TestTickSeconds:
    """Tests for get_tick_seconds."""

    def test_default(self, clean_env):
        assert get_tick_seconds() == DEFAULT_TICK_SECONDS

    def test_from_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("BGSCHED_TICK_SECONDS", "2.5")

        assert get_tick_seconds() == 2.5

    def test_explicit_value_wins(self, clean_env, monkeypatch):
        monkeypatch.setenv("BGSCHED_TICK_SECONDS", "2.5")

        assert get_tick_seconds(10) == 10.0

    @pytest.mark.parametrize("raw", ["abc", "0", "-3"])
    def test_invalid_environment_falls_back(self, clean_env, monkeypatch, raw):
        monkeypatch.setenv("BGSCHED_TICK_SECONDS", raw)

        assert get_tick_seconds() == DEFAULT_TICK_SECONDS

    def test_explicit_non_positive_rejected(self, clean_env):
        with pytest.raises(ValueError):
            get_tick_seconds(0)


class TestMaxWorkers:
    """Tests for get_max_workers."""

    def test_default_is_cpu_count(self, clean_env):
        assert get_max_workers() == multiprocessing.cpu_count()

    def test_from_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("BGSCHED_MAX_WORKERS", "3")

        assert get_max_workers() == 3

    @pytest.mark.parametrize("raw", ["many", "0"])
    def test_invalid_environment_falls_back(self, clean_env, monkeypatch, raw):
        monkeypatch.setenv("BGSCHED_MAX_WORKERS", raw)

        assert get_max_workers() == multiprocessing.cpu_count()
