"""Configuration loading utilities for the ynap CLI suite."""

from __future__ import annotations

import codecs
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from . import paths
from .exceptions import ConfigurationError


@dataclass(frozen=True, slots=True)
class BankSettings:
    """Where bank format descriptors are looked up by name."""

    paths: tuple[Path, ...]


@dataclass(frozen=True, slots=True)
class InputSettings:
    """Input decoding configuration."""

    fallback_encoding: str


@dataclass(frozen=True, slots=True)
class RuleSettings:
    """Rule file configuration."""

    default_files: tuple[Path, ...]
    case_insensitive_payees: bool


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Top-level application configuration."""

    source_path: Path
    banks: BankSettings
    input: InputSettings
    rules: RuleSettings


def _default_config(env: Mapping[str, str]) -> dict[str, Any]:
    return {
        "banks": {"paths": [str(paths.default_banks_path(env=env))]},
        "input": {"fallback_encoding": "iso-8859-1"},
        "rules": {
            "default_files": [],
            "case_insensitive_payees": True,
        },
    }


ENV_OVERRIDE_SPEC: dict[str, tuple[str, type]] = {
    "banks.paths": ("YNAP_BANK_PATHS", list),
    "input.fallback_encoding": ("YNAP_FALLBACK_ENCODING", str),
    "rules.default_files": ("YNAP_RULE_FILES", list),
    "rules.case_insensitive_payees": ("YNAP_CASE_INSENSITIVE_PAYEES", bool),
}


def load_config(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load configuration from defaults, YAML file, and env overrides."""
    env = dict(env or os.environ)
    resolved_config_path = _resolve_config_path(config_path, env)
    file_data = _load_yaml(resolved_config_path)
    defaults = _default_config(env)
    merged: dict[str, Any] = _deep_merge(defaults, file_data)
    merged = _apply_env_overrides(merged, env)
    return _build_config(merged, resolved_config_path)


def _resolve_config_path(
    config_path: str | Path | None, env: Mapping[str, str]
) -> Path:
    if config_path:
        return paths.resolve_path(config_path)
    return paths.default_config_path(env=env)


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Config file at {path} is not valid YAML: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigurationError(f"Config file at {path} must define a mapping root object.")
        return dict(data)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    config_copy = _deep_merge(config, {})  # shallow copy via merge
    for dotted_key, (env_key, expected_type) in ENV_OVERRIDE_SPEC.items():
        if env_key not in env:
            continue
        raw_value = env[env_key]
        try:
            value = _coerce_env_value(raw_value, expected_type)
        except ValueError as exc:
            raise ConfigurationError(
                f"Environment override {env_key} has invalid value '{raw_value}': {exc}"
            ) from exc
        _assign_nested(config_copy, dotted_key.split("."), value)
    return config_copy


def _coerce_env_value(raw: str, expected_type: type) -> Any:
    cleaned = raw.strip()
    if expected_type is bool:
        lowered = cleaned.lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ValueError("expected boolean (true/false)")
    if expected_type is list:
        if not cleaned:
            return []
        return tuple(part.strip() for part in cleaned.split(",") if part.strip())
    return cleaned


def _assign_nested(target: MutableMapping[str, Any], keys: list[str], value: Any) -> None:
    current = target
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], MutableMapping):
            current[key] = {}
        current = current[key]  # type: ignore[assignment]
    current[keys[-1]] = value


def _build_config(data: Mapping[str, Any], source_path: Path) -> AppConfig:
    try:
        banks = BankSettings(
            paths=tuple(paths.resolve_path(p) for p in data["banks"]["paths"]),
        )
        input_settings = InputSettings(
            fallback_encoding=str(data["input"]["fallback_encoding"]),
        )
        rules_cfg = data["rules"]
        rules = RuleSettings(
            default_files=tuple(paths.resolve_path(p) for p in rules_cfg["default_files"]),
            case_insensitive_payees=bool(rules_cfg["case_insensitive_payees"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration structure: {exc}") from exc

    try:
        codecs.lookup(input_settings.fallback_encoding)
    except LookupError as exc:
        raise ConfigurationError(
            f"Unknown fallback encoding '{input_settings.fallback_encoding}'"
        ) from exc

    return AppConfig(
        source_path=source_path,
        banks=banks,
        input=input_settings,
        rules=rules,
    )
