"""YAML helpers for request files and saved form states."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from .cli_errors import ConfigError

__all__ = ["load_config", "load_mapping", "dump_config"]


def _require_yaml():
    try:
        import yaml  # type: ignore

        return yaml
    except Exception as exc:  # pragma: no cover - runtime guard
        raise RuntimeError("PyYAML not installed. Run: pip install pyyaml") from exc


def load_config(path: Optional[str]) -> Any:
    """Load a YAML file; returns {} if the path is unset, missing or empty."""
    if not path:
        return {}
    yaml = _require_yaml()
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    data = yaml.safe_load(text)
    return {} if data is None else data


def load_mapping(path: str, what: str = "request") -> Dict[str, Any]:
    """Load a YAML file that must exist and hold a mapping.

    Raises:
        ConfigError: If the file is missing, unparseable or not a mapping.
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"{what.capitalize()} file not found: {p}")
    yaml = _require_yaml()
    try:
        data = load_config(str(p))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {what} file {p}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(
            f"Top-level YAML in {p} must be a mapping (dict)",
            hint=f"Write the {what} as key: value pairs",
        )
    return data


def dump_config(path: str, data: Dict[str, Any]) -> None:
    """Write a dict to YAML with stable ordering for humans."""
    yaml = _require_yaml()
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(
        yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8"
    )
