# topik_data/data_source.py
"""
Readers for the persisted datasets (a JSON array of records).

A source is any zero-argument callable returning the parsed payload. Sources only
read; they never validate the top-level shape (the cache does that).
"""

from __future__ import annotations

import json
from typing import Any, Optional

import requests

from .errors import LoadError, LoadErrorKind


class JsonFileSource:
    """Reads and parses a JSON file from disk."""

    def __init__(self, path: str, encoding: str = "utf-8") -> None:
        self.path = path
        self.encoding = encoding

    def __call__(self) -> Any:
        try:
            with open(self.path, "r", encoding=self.encoding) as fh:
                raw = fh.read()
        except UnicodeDecodeError as exc:
            raise LoadError(LoadErrorKind.PARSE_FAILURE, f"cannot decode file: {exc}", self.path) from exc
        except OSError as exc:
            raise LoadError(LoadErrorKind.IO, f"cannot read file: {exc}", self.path) from exc

        try:
            return json.loads(raw)
        except ValueError as exc:
            raise LoadError(LoadErrorKind.PARSE_FAILURE, f"invalid JSON: {exc}", self.path) from exc

    def __repr__(self) -> str:
        return f"JsonFileSource({self.path!r})"


class HttpJsonSource:
    """Fetches a JSON blob over HTTP (object storage, CDN, another service)."""

    def __init__(self, url: str, timeout: int = 10) -> None:
        self.url = url
        self.timeout = timeout
        self._headers = {"User-Agent": "topik-data/1.0", "Accept": "application/json"}

    def __call__(self) -> Any:
        try:
            r = requests.get(self.url, timeout=self.timeout, headers=self._headers)
            r.raise_for_status()
        except requests.RequestException as exc:
            raise LoadError(LoadErrorKind.IO, f"request failed: {exc}", self.url) from exc

        try:
            return r.json()
        except ValueError as exc:
            raise LoadError(LoadErrorKind.PARSE_FAILURE, f"invalid JSON: {exc}", self.url) from exc

    def __repr__(self) -> str:
        return f"HttpJsonSource({self.url!r})"


def make_source(path: str, url: Optional[str] = None, timeout: int = 10):
    """Build a source for a dataset. A configured URL takes precedence over the path."""
    if url:
        return HttpJsonSource(url, timeout=timeout)
    return JsonFileSource(path)
