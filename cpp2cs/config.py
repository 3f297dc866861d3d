"""Configuration loading for cpp2cs (.cpp2cs.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".cpp2cs.yml"

_LINE_ENDINGS = {"lf": "\n", "crlf": "\r\n"}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class NamespaceConfig:
    """How generated files open their namespace and which usings they carry."""

    name: str = "Generated_{file}"
    file_scoped: bool = False
    usings: List[str] = field(default_factory=list)
    interface_usings: Optional[List[str]] = None

    def resolve(self, file_name: str) -> str:
        return self.name.replace("{file}", file_name)

    def usings_for(self, *, interfaces_only: bool) -> List[str]:
        if interfaces_only and self.interface_usings is not None:
            return list(self.interface_usings)
        return list(self.usings)


@dataclass
class ConverterConfig:
    """Represents the settings defined in .cpp2cs.yml."""

    root: Path
    namespace: NamespaceConfig = field(default_factory=NamespaceConfig)
    output_subdir: str = "converted"
    exclude_paths: List[str] = field(default_factory=list)
    type_map: Dict[str, str] = field(default_factory=dict)
    create_attribute: bool = True
    line_ending: str = "\n"


def load_config(config_path: Path) -> ConverterConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ConverterConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    namespace = NamespaceConfig()
    namespace_name = _as_str(data.get("namespace"))
    if namespace_name:
        namespace.name = namespace_name
    namespace.file_scoped = _as_bool(data.get("file_scoped_namespace")) or False
    namespace.usings = _as_str_list(data.get("usings"))
    if "interface_usings" in data:
        namespace.interface_usings = _as_str_list(data.get("interface_usings"))

    output_subdir = _as_str(data.get("output_subdir")) or "converted"

    type_map: Dict[str, str] = {}
    for key, value in _as_dict(data.get("type_map")).items():
        converted = _as_str(value)
        if converted is None:
            raise ConfigError(f"type_map entry for {key!r} must be a string")
        type_map[str(key)] = converted

    create_attribute = _as_bool(data.get("create_attribute"))

    line_ending_key = (_as_str(data.get("line_ending")) or "lf").lower()
    if line_ending_key not in _LINE_ENDINGS:
        raise ConfigError(
            f"line_ending must be one of {sorted(_LINE_ENDINGS)}, got {line_ending_key!r}"
        )

    return ConverterConfig(
        root=root,
        namespace=namespace,
        output_subdir=output_subdir,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        type_map=type_map,
        create_attribute=True if create_attribute is None else create_attribute,
        line_ending=_LINE_ENDINGS[line_ending_key],
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "ConverterConfig",
    "NamespaceConfig",
    "load_config",
]
