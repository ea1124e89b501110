"""Keeper configuration."""

from pathlib import Path

from pydantic import BaseModel, Field

from ..common.clock import Clock
from ..common.ids import IdentifierGenerator
from .store import TimerStore
from .time_keeper import DEFAULT_DURATION_MINUTES, TimeKeeper


class KeeperConfig(BaseModel):
    """Keeper configuration."""

    default_duration_minutes: float = Field(default=DEFAULT_DURATION_MINUTES, gt=0, allow_inf_nan=False)
    log_level: str = "INFO"
    log_file: Path | None = None
    disable_console_logging: bool = False


def load_config(path: Path) -> KeeperConfig:
    """Read the configuration at ``path``, falling back to defaults if it does not exist."""
    if not path.exists():
        return KeeperConfig()
    return KeeperConfig.model_validate_json(path.read_text())


def save_config(config: KeeperConfig, path: Path) -> None:
    """Write the configuration to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2))


def build_keeper(
    config: KeeperConfig,
    store: TimerStore | None = None,
    clock: Clock | None = None,
    id_generator: IdentifierGenerator | None = None,
) -> TimeKeeper:
    """Build the time keeper."""
    return TimeKeeper(
        store=store,
        clock=clock,
        id_generator=id_generator,
        default_duration=config.default_duration_minutes,
    )
