# topik_data/errors.py
"""
Error taxonomy for dataset loading.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class LoadErrorKind(str, Enum):
    """Why a load episode failed."""
    IO = "io"
    PARSE_FAILURE = "parse_failure"
    SHAPE_MISMATCH = "shape_mismatch"
    TIMEOUT = "timeout"


class LoadError(Exception):
    """Raised when a dataset cannot be read from its source."""

    def __init__(self, kind: LoadErrorKind, message: str, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.source = source

    def __str__(self) -> str:
        if self.source:
            return f"[{self.kind.value}] {self.message} ({self.source})"
        return f"[{self.kind.value}] {self.message}"
