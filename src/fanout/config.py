from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_CONFIG_FILE = "FANOUT_CONFIG"


def _as_bool(value: Any) -> bool:
    """Interpret common truthy/falsey values into a bool.

    Accepts: True/False, 1/0, "true"/"false", "yes"/"no", "on"/"off" (case-insensitive).
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    v = str(value).strip().lower()
    if v in {"1", "true", "yes", "y", "on"}:
        return True
    if v in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"not a boolean: {value!r}")


class RegistryConfig(BaseModel):
    """Runtime configuration for an EventRegistry.

    Values can be constructed/overridden from (lowest to highest precedence):
    - Field defaults
    - A YAML file (explicit path, or env FANOUT_CONFIG)
    - Environment variables (prefix: FANOUT_)
    """

    isolate_errors: bool = Field(
        False, description="Log listener failures and keep dispatching instead of propagating"
    )
    max_listeners: int = Field(10, description="Per-event listener count that triggers a leak warning; 0 disables")
    error_event: str = Field("error", description="Event name treated as the reserved error channel")

    model_config = {"frozen": True}

    @field_validator("max_listeners")
    @classmethod
    def non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_listeners must be >= 0")
        return v

    @field_validator("error_event")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("error_event must not be empty")
        return v

    # ------------------------ Loading & Overrides ------------------------
    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
        env = os.environ if env is None else env
        mapping = {
            "FANOUT_ISOLATE_ERRORS": ("isolate_errors", _as_bool),
            "FANOUT_MAX_LISTENERS": ("max_listeners", int),
            "FANOUT_ERROR_EVENT": ("error_event", str),
        }
        out: Dict[str, Any] = {}
        for env_key, (field_name, caster) in mapping.items():
            if env.get(env_key, "") == "":
                continue
            try:
                out[field_name] = caster(env[env_key])
            except ValueError as exc:
                raise ConfigError(f"Invalid env {env_key}={env[env_key]!r}: {exc}") from exc
        return out

    @classmethod
    def from_yaml_file(cls, path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse config YAML {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        # Accept either top-level keys or a [registry] section
        section = raw.get("registry", raw)
        if not isinstance(section, dict):
            raise ConfigError(f"Config section 'registry' in {path} must be a mapping, got {type(section).__name__}")
        allowed = set(cls.model_fields)
        unknown = sorted(k for k in section if k not in allowed)
        if unknown:
            logger.warning("Ignoring unknown config keys in %s: %s", path, unknown)
        logger.debug("Loaded registry config from path: %s", path)
        return {k: v for k, v in section.items() if k in allowed}

    @classmethod
    def from_sources(
        cls,
        *,
        env: Optional[Mapping[str, str]] = None,
        file_path: Optional[Path | str] = None,
    ) -> "RegistryConfig":
        env = os.environ if env is None else env
        data: Dict[str, Any] = {}
        if file_path is None and env.get(ENV_CONFIG_FILE):
            file_path = env[ENV_CONFIG_FILE]
        if file_path is not None:
            data.update(cls.from_yaml_file(Path(file_path).expanduser().resolve()))
        data.update(cls.from_env(env))
        try:
            config = cls(**data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc
        logger.info(
            "Registry config: isolate_errors=%s max_listeners=%s error_event=%s",
            config.isolate_errors,
            config.max_listeners,
            config.error_event,
        )
        return config


__all__ = ["RegistryConfig", "ENV_CONFIG_FILE"]
