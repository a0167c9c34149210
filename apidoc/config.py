"""Configuration loading for apidoc (.apidoc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".apidoc.yml"

DEFAULT_FORMATS = ("markdown",)
DEFAULT_VERSION = "V1.0.0"


@dataclass
class DocSettings:
    """Document header and endpoint rendering options."""

    title: str = "API Documentation"
    author: str = ""
    version: str = DEFAULT_VERSION
    use_git_branch_as_version: bool = False
    application_name: str = ""
    show_request_json: bool = True
    show_response_json: bool = True
    excluded_parent_classes: List[str] = field(default_factory=list)
    excluded_fields: Dict[str, List[str]] = field(default_factory=dict)

    def is_class_excluded(self, class_name: str) -> bool:
        simple = _simple_name(class_name)
        return any(
            class_name == excluded or simple == _simple_name(excluded)
            for excluded in self.excluded_parent_classes
        )

    def excluded_fields_for(self, class_name: str) -> set[str]:
        simple = _simple_name(class_name)
        result: set[str] = set()
        for key, names in self.excluded_fields.items():
            if key == class_name or _simple_name(key) == simple:
                result.update(names)
        return result


@dataclass
class ApiDocConfig:
    """Represents the settings defined in .apidoc.yml."""

    root: Path
    formats: List[str] = field(default_factory=lambda: list(DEFAULT_FORMATS))
    output_dir: Optional[Path] = None
    include: List[str] = field(default_factory=list)
    exclude_paths: List[str] = field(default_factory=list)
    include_private: bool = False
    max_workers: int = 4
    templates_dir: Optional[Path] = None
    doc: DocSettings = field(default_factory=DocSettings)


def load_config(config_path: Path) -> ApiDocConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ApiDocConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    config = ApiDocConfig(root=root)

    formats = _as_str_list(data.get("formats", data.get("format")))
    if formats:
        config.formats = [item.lower() for item in formats]

    output_dir = _as_str(data.get("output_dir"))
    if output_dir:
        config.output_dir = root / output_dir

    templates_dir = _as_str(data.get("templates_dir"))
    if templates_dir:
        config.templates_dir = root / templates_dir

    config.include = _as_str_list(data.get("include"))
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))

    include_private = _as_bool(data.get("include_private"))
    if include_private is not None:
        config.include_private = include_private

    if "max_workers" in data:
        workers = _as_int(data.get("max_workers"))
        if workers is None or workers < 1:
            raise ConfigError("max_workers must be a positive integer")
        config.max_workers = workers

    doc_data = _as_dict(data.get("doc"))
    if doc_data:
        config.doc = _parse_doc_settings(doc_data)

    return config


def _parse_doc_settings(data: Dict[str, Any]) -> DocSettings:
    settings = DocSettings()
    for name in ("title", "author", "version", "application_name"):
        value = _as_str(data.get(name))
        if value is not None:
            setattr(settings, name, value)
    for name in ("use_git_branch_as_version", "show_request_json", "show_response_json"):
        value = _as_bool(data.get(name))
        if value is not None:
            setattr(settings, name, value)
    settings.excluded_parent_classes = _as_str_list(data.get("excluded_parent_classes"))

    excluded_fields = data.get("excluded_fields")
    if excluded_fields is not None and not isinstance(excluded_fields, dict):
        raise ConfigError("doc.excluded_fields must map class names to field lists")
    for class_name, names in (excluded_fields or {}).items():
        settings.excluded_fields[str(class_name)] = _as_str_list(names)
    return settings


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _simple_name(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


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
    "ApiDocConfig",
    "CONFIG_FILENAME",
    "ConfigError",
    "DocSettings",
    "load_config",
]
