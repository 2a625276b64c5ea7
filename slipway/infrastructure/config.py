"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to all deployment settings
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass, passed explicitly into every component
- Nested config sections map to sub-dataclasses
- A relative workspace path is resolved against the config file's directory
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional
import dataclasses
import json
import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "slipway.json"


@dataclass(frozen=True)
class DeployConfig:
    """Deployment target and lifecycle commands."""
    deploy_to: str = ""
    repository: str = ""
    workspace: str = ""
    bookmark: str = ""
    keep_releases: int = 3
    dirs_to_copy: tuple[str, ...] = ()
    build: tuple[str, ...] = ()
    setup: tuple[str, ...] = ()
    restart: tuple[str, ...] = ()


@dataclass(frozen=True)
class FleetConfig:
    """Fleet target configuration."""
    targets: tuple[str, ...] = ()


@dataclass(frozen=True)
class RemoteCopyConfig:
    """Upload behaviour for copying source directories to the fleet."""
    delete_extraneous: bool = True
    excludes: tuple[str, ...] = (".hg",)


@dataclass(frozen=True)
class TelemetryConfig:
    """OpenTelemetry configuration."""
    endpoint: str = ""
    insecure: bool = False
    environment: str = "production"


@dataclass(frozen=True)
class SlipwayConfig:
    """Root configuration for the Slipway application."""
    deploy: DeployConfig = field(default_factory=DeployConfig)
    fleet: FleetConfig = field(default_factory=FleetConfig)
    remote_copy: RemoteCopyConfig = field(default_factory=RemoteCopyConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = "WARNING"


_SECTIONS = ("deploy", "fleet", "remote_copy", "telemetry")


def _env_override(data: dict, prefix: str = "SLIPWAY") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern SLIPWAY_SECTION_KEY.
    For example: SLIPWAY_DEPLOY_KEEP_RELEASES=5, SLIPWAY_FLEET_TARGETS=web1,web2
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        name = key[len(prefix) + 1:].lower()
        section = next(
            (s for s in _SECTIONS if name.startswith(f"{s}_")), None
        )
        if section is None:
            data[name] = value
            continue
        if not isinstance(data.get(section), dict):
            data[section] = {}
        data[section][name[len(section) + 1:]] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            return json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    for f in dataclasses.fields(cls):
        if f.name not in filtered:
            continue
        val = filtered[f.name]

        # Comma-separated strings and lists become tuples
        if f.type == "tuple[str, ...]":
            if isinstance(val, str):
                filtered[f.name] = tuple(v.strip() for v in val.split(",") if v.strip())
            elif isinstance(val, list):
                filtered[f.name] = tuple(str(v) for v in val)

        elif isinstance(val, str):
            if f.type == "int":
                filtered[f.name] = int(val)
            elif f.type == "bool":
                filtered[f.name] = val.lower() in ("true", "1", "yes")

    return cls(**filtered)


def _resolve_workspace(deploy: DeployConfig, base_dir: Path) -> DeployConfig:
    if not deploy.workspace or os.path.isabs(deploy.workspace):
        return deploy
    return replace(deploy, workspace=str((base_dir / deploy.workspace).resolve()))


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "SLIPWAY",
) -> SlipwayConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (SLIPWAY_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to slipway.json in CWD.
        env_prefix: Environment variable prefix. Defaults to SLIPWAY.
    """
    config_path = Path(path) if path else Path(DEFAULT_CONFIG_FILE)
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    deploy = _build_sub_config(DeployConfig, data.get("deploy", {}))
    deploy = _resolve_workspace(deploy, config_path.parent.absolute())

    return SlipwayConfig(
        deploy=deploy,
        fleet=_build_sub_config(FleetConfig, data.get("fleet", {})),
        remote_copy=_build_sub_config(RemoteCopyConfig, data.get("remote_copy", {})),
        telemetry=_build_sub_config(TelemetryConfig, data.get("telemetry", {})),
        log_level=data.get("log_level", "WARNING"),
    )
