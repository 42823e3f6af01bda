"""Configuration loading from environment variables and continuum.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_CONFIG_FILENAME = "continuum.toml"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ContinuityConfig:
    """Ledger/handoff restoration settings."""

    auto_load_ledger: bool = True
    auto_load_handoff: bool = True
    ledger_max_age_hours: float = 24
    handoff_max_age_days: float = 7
    compaction_window_minutes: float = 60
    ledger_dir: Path = Path("thoughts/ledgers")
    ledger_pattern: str = "CONTINUITY_*.md"
    handoff_dir: Path = Path("thoughts/shared/handoffs")
    handoff_pattern: str = "**/*.md"


@dataclass
class ReviewConfig:
    """Review queue settings."""

    queue_file: Path = Path("thoughts/shared/review-queue.json")
    history_retention_days: int = 30


@dataclass
class HooksConfig:
    """Hook behavior toggles."""

    backup_before_edit: bool = True
    backup_keep: int = 10
    validator_command: list[str] = field(default_factory=list)
    validate_suffixes: list[str] = field(default_factory=lambda: [".py"])


@dataclass
class ContinuumConfig:
    """Top-level configuration, loaded once per invocation."""

    root: Path = field(default_factory=Path.cwd)
    continuity: ContinuityConfig = field(default_factory=ContinuityConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    hooks: HooksConfig = field(default_factory=HooksConfig)
    state_dir: Path = Path(".continuum")
    session_file: Path = Path(".continuum/session-state.json")
    log_level: str = "WARNING"

    def resolve(self, path: Path) -> Path:
        """Resolve a configured path against the project root."""
        return path if path.is_absolute() else self.root / path

    @property
    def ledger_dir(self) -> Path:
        return self.resolve(self.continuity.ledger_dir)

    @property
    def handoff_dir(self) -> Path:
        return self.resolve(self.continuity.handoff_dir)

    @property
    def queue_file(self) -> Path:
        return self.resolve(self.review.queue_file)

    @property
    def session_path(self) -> Path:
        return self.resolve(self.session_file)

    @property
    def versions_dir(self) -> Path:
        return self.resolve(self.state_dir) / "versions"


def _read_file_data(config_path: Path | None) -> dict:
    if config_path and config_path.exists():
        return tomllib.loads(config_path.read_text(encoding="utf-8"))
    # Search current dir and ~/.continuum/
    for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".continuum" / _CONFIG_FILENAME]:
        if candidate.exists():
            return tomllib.loads(candidate.read_text(encoding="utf-8"))
    return {}


def load_config(config_path: Path | None = None) -> ContinuumConfig:
    """Load configuration from environment variables and optional continuum.toml.

    Priority: environment variables > continuum.toml > defaults.
    """
    file_data = _read_file_data(config_path)

    continuity_data = file_data.get("continuity", {})
    review_data = file_data.get("review", {})
    hooks_data = file_data.get("hooks", {})
    defaults = ContinuityConfig()

    root = Path(os.getenv("CONTINUUM_ROOT", file_data.get("root", str(Path.cwd()))))

    config = ContinuumConfig(
        root=root,
        continuity=ContinuityConfig(
            auto_load_ledger=_env_bool(
                "CONTINUUM_AUTO_LOAD_LEDGER", continuity_data.get("auto_load_ledger", True)
            ),
            auto_load_handoff=_env_bool(
                "CONTINUUM_AUTO_LOAD_HANDOFF", continuity_data.get("auto_load_handoff", True)
            ),
            ledger_max_age_hours=float(continuity_data.get("ledger_max_age_hours", 24)),
            handoff_max_age_days=float(continuity_data.get("handoff_max_age_days", 7)),
            compaction_window_minutes=float(
                os.getenv(
                    "CONTINUUM_COMPACTION_WINDOW",
                    continuity_data.get("compaction_window_minutes", 60),
                )
            ),
            ledger_dir=Path(
                os.getenv("CONTINUUM_LEDGER_DIR", continuity_data.get("ledger_dir", str(defaults.ledger_dir)))
            ),
            ledger_pattern=continuity_data.get("ledger_pattern", defaults.ledger_pattern),
            handoff_dir=Path(
                os.getenv(
                    "CONTINUUM_HANDOFF_DIR", continuity_data.get("handoff_dir", str(defaults.handoff_dir))
                )
            ),
            handoff_pattern=continuity_data.get("handoff_pattern", defaults.handoff_pattern),
        ),
        review=ReviewConfig(
            queue_file=Path(
                os.getenv(
                    "CONTINUUM_QUEUE_FILE",
                    review_data.get("queue_file", str(ReviewConfig.queue_file)),
                )
            ),
            history_retention_days=int(review_data.get("history_retention_days", 30)),
        ),
        hooks=HooksConfig(
            backup_before_edit=bool(hooks_data.get("backup_before_edit", True)),
            backup_keep=int(hooks_data.get("backup_keep", 10)),
            validator_command=list(hooks_data.get("validator_command", [])),
            validate_suffixes=list(hooks_data.get("validate_suffixes", [".py"])),
        ),
        state_dir=Path(file_data.get("state_dir", ".continuum")),
        session_file=Path(file_data.get("session_file", ".continuum/session-state.json")),
        log_level=os.getenv("CONTINUUM_LOG_LEVEL", file_data.get("log_level", "WARNING")),
    )
    return config
