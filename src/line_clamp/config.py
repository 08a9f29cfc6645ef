"""Clamp options and their persistence."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from typing_extensions import TypeAlias

logger = logging.getLogger(__name__)

ClampValue: TypeAlias = Union[int, float, str]
AnimateValue: TypeAlias = Union[bool, int, float]

DEFAULT_SPLIT_ON_CHARS: tuple[str, ...] = (".", "-", "–", "—", " ")


@dataclass(frozen=True)
class ClampOptions:
    """Immutable options for one clamp request."""

    clamp: ClampValue = 2
    use_native_clamp: bool = True
    split_on_chars: tuple[str, ...] = DEFAULT_SPLIT_ON_CHARS
    animate: AnimateValue = False
    truncation_char: str = "…"
    truncation_markup: Optional[str] = None


def merge_options(
    options: Union[ClampOptions, Mapping[str, Any], None] = None, **overrides: Any
) -> ClampOptions:
    """Merge ``options`` and keyword overrides over the defaults."""
    if isinstance(options, ClampOptions):
        base = options
    else:
        base = ClampOptions()
        overrides = {**dict(options or {}), **overrides}
    if "split_on_chars" in overrides:
        overrides["split_on_chars"] = tuple(overrides["split_on_chars"])
    if not overrides:
        return base
    return replace(base, **overrides)


def get_config_dir(app_name: str = "line-clamp") -> Path:
    """Return the per-user config directory for the current platform."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            root = Path(base)
        else:
            root = Path.home() / "AppData" / "Roaming"
        return _ensure_dir(root / app_name)
    elif os.name == "posix":
        if _is_macos():
            return _ensure_dir(
                Path.home() / "Library" / "Application Support" / app_name
            )
        base = os.environ.get("XDG_CONFIG_HOME")
        root = Path(base) if base else Path.home() / ".config"
        return _ensure_dir(root / app_name)
    else:
        return _ensure_dir(Path.home() / ".config" / app_name)


def get_config_path() -> Path:
    """Return the full config file path."""
    return get_config_dir() / "config.json"


def load_options(path: Optional[Path] = None) -> ClampOptions:
    """Load default options from disk, falling back to defaults on error."""
    path = path or get_config_path()
    if not path.exists():
        return ClampOptions()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        logger.exception("Failed to load options from %s", path)
        return ClampOptions()
    if not isinstance(raw, dict):
        return ClampOptions()
    return options_from_mapping(raw)


def save_options(options: ClampOptions, path: Optional[Path] = None) -> Path:
    """Persist options to disk atomically and return the written path."""
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(".tmp")
    data = {field.name: getattr(options, field.name) for field in fields(options)}
    data["split_on_chars"] = list(options.split_on_chars)
    temp_path.write_text(
        json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    os.replace(temp_path, path)
    return path


def _ensure_dir(path: Path) -> Path:
    """Create the directory if needed and return the path."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def _is_macos() -> bool:
    """Return True when running on macOS."""
    return os.uname().sysname == "Darwin" if hasattr(os, "uname") else False


def _get_bool(raw: dict[str, Any], key: str, default: bool) -> bool:
    """Fetch a boolean value with fallback for invalid types."""
    value = raw.get(key, default)
    if isinstance(value, bool):
        return value
    return default


def _get_str(
    raw: dict[str, Any],
    key: str,
    default: str,
    *,
    allow_empty: bool = False,
) -> str:
    """Fetch a string value, optionally allowing empty strings."""
    value = raw.get(key, default)
    if not isinstance(value, str):
        return default
    if not value and not allow_empty:
        return default
    return value


def _get_clamp(raw: dict[str, Any]) -> ClampValue:
    value = raw.get("clamp", 2)
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return 2
    if isinstance(value, (int, float)) and value < 0:
        return 2
    if isinstance(value, str) and not value.strip():
        return 2
    return value


def _get_animate(raw: dict[str, Any]) -> AnimateValue:
    value = raw.get("animate", False)
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value > 0:
        return value
    return False


def _get_split_chars(raw: dict[str, Any]) -> tuple[str, ...]:
    value = raw.get("split_on_chars")
    if not isinstance(value, list) or not all(isinstance(c, str) for c in value):
        return DEFAULT_SPLIT_ON_CHARS
    return tuple(value)


def options_from_mapping(raw: dict[str, Any]) -> ClampOptions:
    """Normalize raw JSON data into ClampOptions."""
    markup = raw.get("truncation_markup")
    if markup is not None and not isinstance(markup, str):
        markup = None
    return ClampOptions(
        clamp=_get_clamp(raw),
        use_native_clamp=_get_bool(raw, "use_native_clamp", True),
        split_on_chars=_get_split_chars(raw),
        animate=_get_animate(raw),
        truncation_char=_get_str(raw, "truncation_char", "…", allow_empty=True),
        truncation_markup=markup or None,
    )
