"""Persistent JSON config helpers.

Settings come from built-in defaults, the user config file, and an optional
per-project ``.ctxtree.json``, later sources winning per key. All access is
defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path

from platformdirs import user_config_dir

from .exclusion import ExclusionPolicy, ExclusionRules

APP_NAME = "ctxtree"
CONFIG_FILENAME = "config.json"
PROJECT_CONFIG_FILENAME = ".ctxtree.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_EXCLUDE_FILES = ("LICENCE", "package-lock.json", "LICENSE")
DEFAULT_EXCLUDE_PATHS = (".git", "__pycache__", "build", ".compile-context")
DEFAULT_EXCLUDE_HIDDEN = True
DEFAULT_OUTPUT_FILE = ".compile-context/file_context.txt"


@dataclass(frozen=True)
class Settings:
    """Configuration snapshot read once per operation."""

    rules: ExclusionRules
    output_file: str = DEFAULT_OUTPUT_FILE

    @property
    def policy(self) -> ExclusionPolicy:
        return ExclusionPolicy(self.rules)

    def output_path(self, root: Path) -> Path:
        """Resolve ``output_file`` against ``root`` unless already absolute."""
        candidate = Path(self.output_file).expanduser()
        if candidate.is_absolute():
            return candidate
        return root / candidate


def default_settings() -> Settings:
    return Settings(
        rules=ExclusionRules.from_iterables(
            DEFAULT_EXCLUDE_FILES,
            DEFAULT_EXCLUDE_PATHS,
            DEFAULT_EXCLUDE_HIDDEN,
        ),
        output_file=DEFAULT_OUTPUT_FILE,
    )


def _read_json_object(path: Path) -> dict[str, object]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def load_config() -> dict[str, object]:
    """Load the user JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    return _read_json_object(CONFIG_PATH)


def save_config(data: dict[str, object]) -> None:
    """Persist user config data as pretty-printed JSON.

    Filesystem errors are ignored so a read-only config directory never breaks
    a command.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def load_project_config(root: Path) -> dict[str, object]:
    """Load ``.ctxtree.json`` from the project root, if present."""
    return _read_json_object(root / PROJECT_CONFIG_FILENAME)


def _string_list(value: object) -> list[str] | None:
    """Return ``value`` as a list of strings, or ``None`` when it is not a JSON string array."""
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


def apply_config(settings: Settings, data: dict[str, object]) -> Settings:
    """Overlay valid keys from ``data`` on ``settings``; invalid values are ignored."""
    rules = settings.rules
    exclude_files = _string_list(data.get("exclude_files"))
    exclude_paths = _string_list(data.get("exclude_paths"))
    exclude_hidden = data.get("exclude_hidden")
    rules = ExclusionRules.from_iterables(
        exclude_files if exclude_files is not None else rules.exclude_files,
        exclude_paths if exclude_paths is not None else rules.exclude_paths,
        exclude_hidden if isinstance(exclude_hidden, bool) else rules.exclude_hidden,
    )

    output_file = data.get("output_file")
    if not isinstance(output_file, str) or not output_file.strip():
        output_file = settings.output_file
    return replace(settings, rules=rules, output_file=output_file.strip())


def settings_to_config(settings: Settings) -> dict[str, object]:
    """Return ``settings`` in the JSON shape accepted by ``apply_config``."""
    return {
        "exclude_files": sorted(settings.rules.exclude_files),
        "exclude_paths": list(settings.rules.exclude_paths),
        "exclude_hidden": settings.rules.exclude_hidden,
        "output_file": settings.output_file,
    }


def load_settings(root: Path | None = None) -> Settings:
    """Return defaults overlaid with user config, then project config for ``root``."""
    settings = apply_config(default_settings(), load_config())
    if root is not None:
        settings = apply_config(settings, load_project_config(root))
    return settings


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "PROJECT_CONFIG_FILENAME",
    "DEFAULT_EXCLUDE_FILES",
    "DEFAULT_EXCLUDE_PATHS",
    "DEFAULT_EXCLUDE_HIDDEN",
    "DEFAULT_OUTPUT_FILE",
    "Settings",
    "default_settings",
    "load_config",
    "save_config",
    "load_project_config",
    "apply_config",
    "settings_to_config",
    "load_settings",
]
