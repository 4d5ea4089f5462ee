"""
Load the platform catalogue (`platforms.yaml`) with optional env overrides.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from trending.models import Platform, Source, SourceKind
from trending.strategies import StrategyRegistry, default_registry

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    pass


def load_sources_config(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise ConfigurationError(f"platform catalogue not found at {config_path}")
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"cannot read platform catalogue {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"platform catalogue {config_path} must be a mapping")
    return _expand_env(data)


def _expand_env(data: Dict[str, Any]) -> Dict[str, Any]:
    def replace(value: Any) -> Any:
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_key = value[2:-1]
            return os.getenv(env_key, "")
        if isinstance(value, dict):
            return {k: replace(v) for k, v in value.items()}
        if isinstance(value, list):
            return [replace(item) for item in value]
        return value

    return replace(data)  # type: ignore[return-value]


def proxy_instances(config: Dict[str, Any], override: Optional[List[str]] = None) -> List[str]:
    if override:
        return list(override)
    raw = config.get("proxy_instances") or []
    instances = [str(item).strip() for item in raw if isinstance(item, str) and item.strip()]
    if not instances:
        raise ConfigurationError("no proxy instances configured")
    return instances


def build_platforms(
    config: Dict[str, Any],
    registry: Optional[StrategyRegistry] = None,
    only: Optional[List[str]] = None,
) -> List[Platform]:
    registry = registry or default_registry()
    section = config.get("platforms") or {}
    if not isinstance(section, dict) or not section:
        raise ConfigurationError("no platforms configured")

    platforms: List[Platform] = []
    for platform_id, cfg in section.items():
        if not isinstance(cfg, dict):
            raise ConfigurationError(f"platform '{platform_id}' must be a mapping")
        if only is not None:
            if platform_id not in only:
                continue
        elif not cfg.get("enabled", True):
            logger.debug("Platform %s disabled in catalogue", platform_id)
            continue
        platforms.append(_build_platform(str(platform_id), cfg, registry))

    if only:
        unknown = sorted(set(only) - {platform.id for platform in platforms})
        if unknown:
            raise ConfigurationError(f"unknown platform ids: {', '.join(unknown)}")
    return platforms


def _build_platform(platform_id: str, cfg: Dict[str, Any], registry: StrategyRegistry) -> Platform:
    entries = cfg.get("strategies") or []
    if not entries:
        raise ConfigurationError(f"platform '{platform_id}' has no strategies")
    strategies = []
    for index, entry in enumerate(entries):
        try:
            source = _build_source(entry)
            strategies.append(registry.build(source, entry))
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigurationError(f"platform '{platform_id}' strategy #{index + 1}: {exc}") from exc
    max_items = cfg.get("max_items")
    return Platform(
        id=platform_id,
        name=str(cfg.get("name") or platform_id),
        icon=str(cfg.get("icon") or ""),
        strategies=tuple(strategies),
        search_url=cfg.get("search_url"),
        max_items=int(max_items) if max_items else None,
    )


def _build_source(entry: Dict[str, Any]) -> Source:
    if not isinstance(entry, dict):
        raise TypeError("strategy entry must be a mapping")
    kind = SourceKind(entry["kind"])
    headers: Tuple[Tuple[str, str], ...] = tuple(
        (str(key), str(value)) for key, value in (entry.get("headers") or {}).items()
    )
    url = str(entry.get("url") or "")
    if not url and kind is not SourceKind.STATIC_FALLBACK:
        raise ValueError(f"{kind.value} strategy requires a url")
    return Source(url=url, kind=kind, headers=headers)
