"""Board configuration loaded from YAML.

Missing keys fall back to DEFAULTS. Configured playbooks are layered over
the built-in ones, replacing any with the same name.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml

from apptboard.errors import ConfigError
from apptboard.lifecycle import DEFAULT_POLICY, LifecyclePolicy
from apptboard.playbook import BUILTIN_PLAYBOOKS, Playbook, parse_playbooks
from apptboard.rank import DEFAULT_MAX_LENGTH, DEFAULT_STEP

DEFAULTS: dict[str, dict[str, Any]] = {
    "lifecycle": {
        "grace_window_minutes": 15,
        "no_show_window_minutes": 15,
        "allow_cancel_after_completion": False,
    },
    "ranks": {
        "step": DEFAULT_STEP,
        "max_length": DEFAULT_MAX_LENGTH,
    },
}


@dataclass
class Config:
    policy: LifecyclePolicy = DEFAULT_POLICY
    rank_step: int = DEFAULT_STEP
    max_rank_length: int = DEFAULT_MAX_LENGTH
    playbooks: dict[str, Playbook] = field(default_factory=lambda: dict(BUILTIN_PLAYBOOKS))

    def board_options(self) -> dict[str, Any]:
        """Keyword arguments for building a Board under this config."""
        return {
            "policy": self.policy,
            "rank_step": self.rank_step,
            "max_rank_length": self.max_rank_length,
        }


def _coerce(section: str, key: str, raw: Any) -> Any:
    """Type-coerce a value using the type of its default."""
    default = DEFAULTS[section].get(key)
    if default is None:
        raise ConfigError(f"unknown setting {section}.{key}")
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        return str(raw).lower() in ("true", "yes", "1")
    if isinstance(default, int):
        try:
            value = int(raw)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{section}.{key} must be a whole number, got {raw!r}") from e
        if value < 0:
            raise ConfigError(f"{section}.{key} must not be negative")
        return value
    return raw


def _section(data: dict, name: str) -> dict[str, Any]:
    """Read one section, coerced and merged over its defaults."""
    raw = data.get(name) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{name} must be a mapping")
    values = dict(DEFAULTS[name])
    for key, value in raw.items():
        py_key = str(key).replace("-", "_")
        values[py_key] = _coerce(name, py_key, value)
    return values


def parse_config(data: dict | None) -> Config:
    """Build a Config from already-parsed YAML data."""
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigError("config must be a mapping")

    lifecycle = _section(data, "lifecycle")
    ranks = _section(data, "ranks")
    if ranks["step"] < 1:
        raise ConfigError("ranks.step must be at least 1")
    if ranks["max_length"] < 2:
        raise ConfigError("ranks.max_length must be at least 2")

    playbooks = dict(BUILTIN_PLAYBOOKS)
    playbooks.update(parse_playbooks(data.get("playbooks")))

    return Config(
        policy=LifecyclePolicy(
            grace_window=timedelta(minutes=lifecycle["grace_window_minutes"]),
            no_show_window=timedelta(minutes=lifecycle["no_show_window_minutes"]),
            allow_cancel_after_completion=lifecycle["allow_cancel_after_completion"],
        ),
        rank_step=ranks["step"],
        max_rank_length=ranks["max_length"],
        playbooks=playbooks,
    )


def load_config(path: str | Path | None = None) -> Config:
    """Load config from path, or the defaults when path is None."""
    if path is None:
        return Config()
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text())
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"{path} is not valid YAML: {e}") from e
    return parse_config(data)
