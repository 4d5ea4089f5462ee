"""
Centralised settings for the trending pipeline (env-first, code-light).
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "platforms.yaml"


@dataclass
class TrendingSettings:
    config_path: Path
    output_path: Path
    probe_timeout: float = 5.0
    fetch_timeout: float = 15.0
    run_timeout: float = 0.0
    feed_max_items: int = 20
    proxy_instances: List[str] = field(default_factory=list)
    log_level: str = "INFO"
    log_file: Optional[Path] = None


def _int_from_env(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(raw)
        return value if value > 0 else default
    except Exception:
        logger.warning("Invalid int value for %s=%s; using default %s", key, raw, default)
        return default


def _float_from_env(key: str, default: float, allow_zero: bool = False) -> float:
    raw = os.getenv(key)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = float(raw)
    except Exception:
        logger.warning("Invalid float value for %s=%s; using default %s", key, raw, default)
        return default
    if value > 0 or (allow_zero and value == 0):
        return value
    logger.warning("Out of range value for %s=%s; using default %s", key, raw, default)
    return default


def _parse_instances(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


def load_settings() -> TrendingSettings:
    config_env = os.getenv("TRENDING_CONFIG_PATH")
    log_file = os.getenv("TRENDING_LOG_FILE")
    return TrendingSettings(
        config_path=Path(config_env) if config_env else DEFAULT_CONFIG_PATH,
        output_path=Path(os.getenv("TRENDING_OUTPUT_PATH") or Path("data") / "trending.json"),
        probe_timeout=_float_from_env("TRENDING_PROBE_TIMEOUT", 5.0),
        fetch_timeout=_float_from_env("TRENDING_FETCH_TIMEOUT", 15.0),
        run_timeout=_float_from_env("TRENDING_RUN_TIMEOUT", 0.0, allow_zero=True),
        feed_max_items=_int_from_env("TRENDING_FEED_MAX_ITEMS", 20),
        proxy_instances=_parse_instances(os.getenv("TRENDING_PROXY_INSTANCES")),
        log_level=(os.getenv("TRENDING_LOG_LEVEL") or "INFO").upper(),
        log_file=Path(log_file) if log_file else None,
    )
