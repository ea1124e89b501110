"""Test suite for configuration, logging setup and the terminal front end."""

import io
import logging
from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError
from rich.console import Console

from pomodoro.__main__ import format_remaining, run_command
from pomodoro.common.app import AppDirs
from pomodoro.common.log import configure_logging
from pomodoro.keeper.config import KeeperConfig, build_keeper, load_config, save_config
from pomodoro.keeper.time_keeper import TimeKeeper
from tests.test_utils import ManualClock


def make_console() -> tuple[Console, io.StringIO]:
    """Console writing plain text into a buffer."""
    buffer = io.StringIO()
    return Console(file=buffer, no_color=True, width=120), buffer


class TestConfig:
    """Test keeper configuration."""

    def test_defaults(self):
        """Defaults match a twenty minute pomodoro."""
        config = KeeperConfig()
        assert config.default_duration_minutes == 20
        assert config.log_level == "INFO"
        assert config.log_file is None

    @pytest.mark.parametrize("minutes", [0, -5, float("nan")])
    def test_rejects_bad_duration(self, minutes: float):
        """Default durations must be positive and finite."""
        with pytest.raises(ValidationError):
            KeeperConfig(default_duration_minutes=minutes)

    def test_load_missing_file(self, tmp_path: Path):
        """A missing file yields the defaults."""
        assert load_config(tmp_path / "missing.json") == KeeperConfig()

    def test_save_and_load(self, tmp_path: Path):
        """Saved configuration is read back."""
        path = tmp_path / "nested" / "config.json"
        config = KeeperConfig(default_duration_minutes=25, log_level="DEBUG", log_file=tmp_path / "p.log")
        save_config(config, path)

        assert load_config(path) == config

    def test_build_keeper_uses_default_duration(self):
        """The configured duration is used for zero-duration starts."""
        clock = ManualClock()
        with build_keeper(KeeperConfig(default_duration_minutes=0.5), clock=clock) as keeper:
            keeper.start("alice")
            assert keeper.get("alice").remaining == timedelta(seconds=30)


class TestAppDirs:
    """Test data directory handling."""

    def test_temp_dir(self):
        """Temporary mode moves every path under a fresh directory."""
        dirs = AppDirs()
        dirs.use_temp_app_data_dir()

        assert dirs.app_data_dir.exists()
        assert dirs.app_config_path.parent == dirs.app_data_dir
        assert dirs.app_log_path.parent == dirs.app_data_dir


class TestLogging:
    """Test logging setup."""

    def test_file_handler(self, tmp_path: Path):
        """Records reach the configured file."""
        log_file = tmp_path / "logs" / "pomodoro.log"
        configure_logging("debug", log_file=log_file, disable_console=True)
        try:
            logging.getLogger("pomodoro.test").debug("hello")
            for handler in logging.getLogger("pomodoro").handlers:
                handler.flush()

            text = log_file.read_text()
            assert "POMODORO:" in text
            assert "hello" in text
        finally:
            configure_logging("INFO", disable_console=True)

    def test_unknown_level(self):
        """Unknown levels are rejected."""
        with pytest.raises(ValueError):
            configure_logging("chatty")


class TestRunCommand:
    """Test terminal command handling."""

    @pytest.fixture
    def started(self, keeper: TimeKeeper) -> str:
        """A running ten minute pomodoro."""
        return keeper.start("alice", None, 10)

    def test_pause_resume(self, keeper: TimeKeeper, started: str):
        """Pause and resume drive the keeper."""
        console, buffer = make_console()

        assert run_command(keeper, started, "pause\n", console)
        assert keeper.get(started).status == "paused"
        assert run_command(keeper, started, " RESUME ", console)
        assert keeper.get(started).status == "running"
        assert "Paused" in buffer.getvalue()
        assert "Resumed" in buffer.getvalue()

    def test_status(self, keeper: TimeKeeper, clock: ManualClock, started: str):
        """Status prints the remaining time."""
        console, buffer = make_console()
        clock.advance(65)

        assert run_command(keeper, started, "status", console)
        assert "running: 08:55 left" in buffer.getvalue()

    def test_stop_ends_session(self, keeper: TimeKeeper, started: str):
        """Stop removes the timer and ends the session."""
        console, _ = make_console()
        assert not run_command(keeper, started, "stop", console)
        assert started not in keeper

    def test_quit_ends_session(self, keeper: TimeKeeper, started: str):
        """Quit ends the session and leaves the timer alone."""
        console, _ = make_console()
        assert not run_command(keeper, started, "quit", console)
        assert started in keeper

    def test_errors_are_reported(self, keeper: TimeKeeper, started: str):
        """Keeper errors are printed, not raised."""
        console, buffer = make_console()
        assert run_command(keeper, started, "resume", console)
        assert "not paused" in buffer.getvalue()

    def test_unknown_command(self, keeper: TimeKeeper, started: str):
        """Unknown commands list the valid ones."""
        console, buffer = make_console()
        assert run_command(keeper, started, "snooze", console)
        assert "expected one of" in buffer.getvalue()

    def test_blank_line(self, keeper: TimeKeeper, started: str):
        """Blank input is ignored."""
        console, buffer = make_console()
        assert run_command(keeper, started, "   ", console)
        assert buffer.getvalue() == ""


def test_format_remaining():
    """Durations are shown as minutes and seconds."""
    assert format_remaining(timedelta(minutes=20)) == "20:00"
    assert format_remaining(timedelta(seconds=61.9)) == "01:01"
    assert format_remaining(timedelta(seconds=-3)) == "00:00"
