# topik_data/config.py
"""
Configuration for the TOPIK data service.

This module centralizes all tunable settings (timezone, dataset locations, cache TTLs,
load timeout, query defaults, and startup behaviour).
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import List, Optional


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, returning default on missing/invalid values."""
    try:
        return int(os.getenv(name, str(default)))
    except Exception:
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    """
    Read a float environment variable.

    Missing, empty, invalid or non-positive values return default.
    """
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_bool(name: str, default: bool) -> bool:
    """
    Read a boolean-ish environment variable.

    Treats these as false: 0, false, no, off
    """
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


def _env_list(name: str, default: List[str]) -> List[str]:
    """
    Read a comma-delimited string list from the environment.

    Example:
      EXCLUDED_EXAM_ID_PREFIXES="35-,36-,37-"
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    return [x.strip() for x in raw.split(",") if x.strip()]


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable app configuration.

    Notes on dataset locations:
      - *_data_path defaults to a file under data_dir when left empty.
      - *_data_url, when set, replaces the file with an HTTP source.
    """

    # Core settings
    tz: str = os.getenv("TZ", "Asia/Seoul")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Dataset locations
    data_dir: str = os.getenv("DATA_DIR", "data")
    exams_data_path: str = os.getenv("EXAMS_DATA_PATH", "")
    documents_data_path: str = os.getenv("DOCUMENTS_DATA_PATH", "")
    exams_data_url: str = os.getenv("EXAMS_DATA_URL", "")
    documents_data_url: str = os.getenv("DOCUMENTS_DATA_URL", "")
    http_timeout_seconds: int = _env_int("HTTP_TIMEOUT_SECONDS", 10)

    # Cache controls
    cache_ttl_seconds: int = _env_int("CACHE_TTL_SECONDS", 60 * 60)
    documents_cache_ttl_seconds: int = _env_int("DOCUMENTS_CACHE_TTL_SECONDS", 60 * 60)
    load_timeout_seconds: Optional[float] = _env_float("LOAD_TIMEOUT_SECONDS", None)
    strict_shape: bool = _env_bool("STRICT_SHAPE", False)

    # Query defaults
    page_size: int = _env_int("PAGE_SIZE", 20)
    max_page_size: int = _env_int("MAX_PAGE_SIZE", 100)

    # Startup / admin
    warmup_on_start: bool = _env_bool("WARMUP_ON_START", True)
    cache_admin_enabled: bool = _env_bool("CACHE_ADMIN_ENABLED", False)

    # Exams hidden from the practice listing (older papers with a different layout)
    excluded_exam_id_prefixes: List[str] = field(default_factory=lambda: ["35-", "36-", "37-"])

    def __post_init__(self):
        """
        Fill derived defaults and apply list overrides from env.

        Supported env options:
          - EXCLUDED_EXAM_ID_PREFIXES (comma list; empty string disables the filter)
        """
        # dataclass frozen => use object.__setattr__
        if not self.exams_data_path:
            object.__setattr__(self, "exams_data_path", os.path.join(self.data_dir, "data.json"))
        if not self.documents_data_path:
            object.__setattr__(self, "documents_data_path", os.path.join(self.data_dir, "document_links.json"))

        object.__setattr__(
            self,
            "excluded_exam_id_prefixes",
            _env_list("EXCLUDED_EXAM_ID_PREFIXES", list(self.excluded_exam_id_prefixes)),
        )

        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            object.__setattr__(self, "log_level", "INFO")

        if self.max_page_size < 1:
            object.__setattr__(self, "max_page_size", 100)
        if not 1 <= self.page_size <= self.max_page_size:
            object.__setattr__(self, "page_size", min(20, self.max_page_size))
