"""
Shared pytest fixtures.

Provides:
- A controllable clock for cache TTL tests
- Temporary exam / document JSON files
- A Flask test client wired to those files
"""

import json
import sys
from pathlib import Path

import pytest

# Make the root app module importable when running from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from app import create_app
from topik_data.config import AppConfig


EXAMS = [
    {"id": "35-1", "level": "TOPIK II", "skill": "Reading", "year_description": "2014"},
    {"id": "83-1", "level": "TOPIK I", "skill": "Listening", "year_description": "2022"},
    {"id": "83-2", "level": "TOPIK I", "skill": "Reading", "year_description": "2022"},
    {"id": "91-1", "level": "TOPIK II", "skill": "Listening", "year_description": "2023"},
    {"id": 7, "level": "TOPIK II", "skill": "Writing", "year_description": "legacy"},
]

DOCUMENTS = [
    {
        "id": "d1",
        "title": "TOPIK I Vocabulary 1000",
        "description": "Core vocabulary list",
        "category": "Vocabulary",
        "skill": "Reading",
        "googleDriveLink": "https://drive.example/d1",
        "fileType": "PDF",
        "year": 2023,
    },
    {
        "id": "d2",
        "title": "Grammar patterns",
        "category": "Grammar",
        "googleDriveLink": "https://drive.example/d2",
        "fileType": "PDF",
    },
    {
        "id": "d3",
        "title": "Past paper 91",
        "description": "TOPIK II listening audio",
        "category": "Past papers",
        "skill": "Listening",
        "googleDriveLink": "https://drive.example/d3",
        "fileType": "MP3",
    },
]


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Directory holding data.json and document_links.json."""
    (tmp_path / "data.json").write_text(json.dumps(EXAMS), encoding="utf-8")
    (tmp_path / "document_links.json").write_text(json.dumps(DOCUMENTS), encoding="utf-8")
    return tmp_path


@pytest.fixture
def make_config(data_dir: Path):
    """Build an AppConfig pointing at the temporary data directory."""

    def _make(**overrides) -> AppConfig:
        params = dict(
            data_dir=str(data_dir),
            exams_data_path="",
            documents_data_path="",
            exams_data_url="",
            documents_data_url="",
            cache_ttl_seconds=3600,
            documents_cache_ttl_seconds=3600,
            load_timeout_seconds=None,
            strict_shape=False,
            page_size=2,
            max_page_size=3,
            warmup_on_start=False,
            cache_admin_enabled=False,
        )
        params.update(overrides)
        return AppConfig(**params)

    return _make


@pytest.fixture
def client(make_config):
    app = create_app(make_config())
    app.config["TESTING"] = True
    return app.test_client()
