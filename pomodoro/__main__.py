"""Application entry point."""

import argparse
import queue
import shutil
import sys
import threading
from datetime import timedelta

from rich.console import Console

from .common.app import app_dirs
from .common.errors import TimerError
from .common.log import configure_logging
from .keeper.config import build_keeper, load_config, save_config
from .keeper.time_keeper import TimeKeeper

COMMANDS = ("pause", "resume", "stop", "status", "quit")
POLL_INTERVAL = 0.2


def format_remaining(remaining: timedelta) -> str:
    """Format a duration as ``MM:SS``."""
    total = max(int(remaining.total_seconds()), 0)
    return f"{total // 60:02d}:{total % 60:02d}"


def run_command(keeper: TimeKeeper, identifier: str, command: str, console: Console) -> bool:
    """Apply one terminal command to the pomodoro. Return False when the session should end."""
    command = command.strip().lower()
    if not command:
        return True

    try:
        if command == "pause":
            keeper.pause(identifier)
            console.print("Paused", style="yellow")
        elif command == "resume":
            keeper.resume(identifier)
            console.print("Resumed", style="green")
        elif command == "stop":
            keeper.stop(identifier)
            console.print("Stopped", style="red")
            return False
        elif command == "status":
            snapshot = keeper.get(identifier)
            console.print(f"{snapshot.status}: {format_remaining(snapshot.remaining)} left")
        elif command == "quit":
            return False
        else:
            console.print(f"Unknown command {command!r}, expected one of: {', '.join(COMMANDS)}", style="red")
    except TimerError as e:
        console.print(str(e), style="red")
    return True


def reset_all() -> None:
    """Delete the app data directory."""
    if app_dirs.app_data_dir.exists():
        shutil.rmtree(app_dirs.app_data_dir)
        print(f"App data directory deleted: {app_dirs.app_data_dir}")
    else:
        print(f"App data directory does not exist: {app_dirs.app_data_dir}")


def _read_commands(lines: "queue.Queue[str]") -> None:
    for line in sys.stdin:
        lines.put(line)
    lines.put("quit")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Pomodoro - countdown timer")
    parser.add_argument("--minutes", type=float, default=0, help="Length of the pomodoro (default from config)")
    parser.add_argument("--id", default="", help="Timer identifier, generated if omitted")
    parser.add_argument("--temp", action="store_true", help="Run in temporary mode")
    parser.add_argument("--reset", action="store_true", help="Delete all app data")

    args = parser.parse_args(argv)

    if args.reset:
        reset_all()
        return 0

    if args.temp:
        app_dirs.use_temp_app_data_dir()

    config = load_config(app_dirs.app_config_path)
    configure_logging(config.log_level, config.log_file, config.disable_console_logging)

    console = Console()
    finished = threading.Event()

    def on_finished() -> None:
        console.print("Pomodoro finished!", style="bold green")
        finished.set()

    lines: queue.Queue[str] = queue.Queue()
    threading.Thread(target=_read_commands, args=(lines,), daemon=True).start()

    with build_keeper(config) as keeper:
        try:
            identifier = keeper.start(args.id, None, args.minutes, on_finished)
        except TimerError as e:
            console.print(str(e), style="red")
            return 1

        console.print(f"Started pomodoro {identifier}")
        console.print(f"Commands: {', '.join(COMMANDS)}", style="dim")
        try:
            while not finished.is_set():
                try:
                    line = lines.get(timeout=POLL_INTERVAL)
                except queue.Empty:
                    continue
                if not run_command(keeper, identifier, line, console):
                    break
        finally:
            save_config(config, app_dirs.app_config_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
