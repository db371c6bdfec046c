from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
import yaml
from dotenv import load_dotenv

from sqldash.exceptions.errors import ConfigError

load_dotenv()

LEGEND_POSITIONS = ("top", "bottom", "left", "right", "none")
THEMES = ("light", "dark")

def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)

def _env_list(key: str, default: List[str]) -> List[str]:
    val = os.environ.get(key)
    if not val:
        return default
    return [x.strip() for x in val.split(",") if x.strip()]

@dataclass(frozen=True)
class Settings:
    env: str
    log_level: str
    log_file: str

    # Local JSON record store (connections, dashboards, widgets)
    data_dir: str

    # Connectivity probe bound, network engines only
    probe_timeout_ms: int

    chart_theme: str
    chart_colors: List[str]
    chart_legend_position: str
    stat_thousands_separator: str
    stat_decimal_separator: str

def load_settings(config_dir: str = "config") -> Settings:
    app_env = _env("APP_ENV", "dev")
    cfg_path = Path(config_dir) / f"{app_env}.yaml"
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config not found: {cfg_path}")

    cfg = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}

    app_cfg = cfg.get("app") or {}
    store_cfg = cfg.get("store") or {}
    query_cfg = cfg.get("query") or {}
    chart_cfg = cfg.get("charts") or {}
    stat_cfg = chart_cfg.get("stat") or {}

    try:
        probe_timeout_ms = int(_env("PROBE_TIMEOUT_MS", str(query_cfg.get("probe_timeout_ms", 5000))))
    except ValueError as e:
        raise ConfigError(f"PROBE_TIMEOUT_MS must be an integer: {e}") from e
    if probe_timeout_ms <= 0:
        raise ConfigError("PROBE_TIMEOUT_MS must be positive")

    chart_theme = (_env("CHART_THEME", str(chart_cfg.get("theme", "light"))) or "light").strip().lower()
    if chart_theme not in THEMES:
        raise ConfigError(f"Unknown chart theme: {chart_theme}")

    legend_position = (
        _env("CHART_LEGEND_POSITION", str(chart_cfg.get("legend_position", "bottom"))) or "bottom"
    ).strip().lower()
    if legend_position not in LEGEND_POSITIONS:
        raise ConfigError(f"legend position must be one of {LEGEND_POSITIONS}, got {legend_position!r}")

    return Settings(
        env=app_env,
        log_level=_env("LOG_LEVEL", str(app_cfg.get("log_level", "INFO"))),
        log_file=_env("LOG_FILE", str(app_cfg.get("log_file", "logs/app.log"))),
        data_dir=_env("DATA_DIR", str(store_cfg.get("data_dir", "data"))),
        probe_timeout_ms=probe_timeout_ms,
        chart_theme=chart_theme,
        chart_colors=_env_list("CHART_COLORS", list(chart_cfg.get("colors") or [])),
        chart_legend_position=legend_position,
        stat_thousands_separator=_env(
            "STAT_THOUSANDS_SEPARATOR", str(stat_cfg.get("thousands_separator", ","))
        ),
        stat_decimal_separator=_env("STAT_DECIMAL_SEPARATOR", str(stat_cfg.get("decimal_separator", "."))),
    )
