from __future__ import annotations

# datalayer/config.py
import os
from typing import Optional

import yaml
from pydantic import BaseModel, ValidationError

_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
CONFIG_PATH = os.path.join(_PROJECT_ROOT, "config.yaml")


class Settings(BaseModel):
    db_path: Optional[str] = None
    test_db_path: Optional[str] = None
    foreign_keys: bool = True
    log_level: str = "INFO"


def _read_config_yaml(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    out = {}
    for k, v in cfg.items():
        # blank strings fall back to defaults
        if isinstance(v, str) and not v.strip():
            continue
        out[k] = v.strip() if isinstance(v, str) else v
    return out


def load_settings(path: str | None = None) -> Settings:
    """
    Read config.yaml (optional) into Settings.
    DATALAYER_CONFIG overrides the location; a missing file yields defaults.
    """
    cfg_path = path or os.environ.get("DATALAYER_CONFIG") or CONFIG_PATH
    raw = _read_config_yaml(cfg_path)
    try:
        return Settings(**raw)
    except ValidationError as e:
        raise ValueError(f"{cfg_path}: invalid settings: {e}") from e
