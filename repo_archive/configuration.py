# configuration.py - Cache settings
# ============================================================================
# FILE: repo_archive/configuration.py
# Settings dataclass plus YAML / JSON file loading
# ============================================================================

import os
import json
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

BACKENDS = ("memory", "sqlite", "redis")
SECTION = "archive_cache"


@dataclass
class CacheSettings:
    max_archives: int = 10
    max_age_hours: float = 24.0
    extreme_threshold_bytes: int = 100 * 1024
    standard_level: int = 6
    lossy_preprocess: bool = False
    verify_writes: bool = True
    backend: str = "memory"
    sqlite_path: Optional[str] = None
    redis_url: Optional[str] = None
    namespace: str = "repo-archive"

    def __post_init__(self):
        if self.max_archives < 1:
            raise ValueError(f"max_archives must be >= 1, got {self.max_archives}")
        if self.max_age_hours <= 0:
            raise ValueError(f"max_age_hours must be > 0, got {self.max_age_hours}")
        if self.extreme_threshold_bytes < 0:
            raise ValueError("extreme_threshold_bytes must be >= 0")
        if not 0 <= self.standard_level <= 9:
            raise ValueError(f"standard_level must be between 0 and 9, got {self.standard_level}")
        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend '{self.backend}', expected one of {BACKENDS}")
        if self.backend == "redis" and not self.redis_url:
            raise ValueError("redis backend requires redis_url")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CacheSettings":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown cache settings: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})


def load_settings(path: str) -> CacheSettings:
    """
    Load CacheSettings from a YAML or JSON file.

    The settings may sit under a top-level `archive_cache:` key or make up
    the whole document.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        if path.endswith(".json"):
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    data = data or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    section = data.get(SECTION, data)
    settings = CacheSettings.from_dict(section)
    logger.info(f"Loaded cache settings from {path} (backend={settings.backend})")
    return settings
