"""User configuration stored as JSON in the home directory."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_FILE_NAME = ".gatorconfig.json"


def config_path() -> Path:
    """Return the location of the configuration file in the user's home."""
    return Path.home() / CONFIG_FILE_NAME


@dataclass
class Config:
    """Database location and the name of the logged-in user."""

    db_url: str = ""
    current_user_name: str = ""
    path: Path | None = field(default=None, repr=False, compare=False)

    def set_user(self, user_name: str) -> None:
        """Record ``user_name`` as the current user and save the file."""
        self.current_user_name = user_name
        self.write()

    def write(self) -> None:
        """Save the configuration as compact JSON."""
        target = Path(self.path) if self.path is not None else config_path()
        document = {
            "db_url": self.db_url,
            "current_user_name": self.current_user_name,
        }
        target.write_text(
            json.dumps(document, separators=(",", ":"), ensure_ascii=False),
            encoding="utf-8",
        )


def _string_field(document: dict, key: str) -> str:
    value = document.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"config field {key!r} must be a string")
    return value


def read(path: str | Path | None = None) -> Config:
    """Load the configuration from ``path`` or from the default location."""
    target = Path(path) if path is not None else config_path()
    document = json.loads(target.read_text(encoding="utf-8"))
    if not isinstance(document, dict):
        raise ValueError("config file must hold a JSON object")
    return Config(
        db_url=_string_field(document, "db_url"),
        current_user_name=_string_field(document, "current_user_name"),
        path=target,
    )