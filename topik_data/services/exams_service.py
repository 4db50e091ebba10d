# topik_data/services/exams_service.py
"""
Exam queries.

Responsibilities:
  - read exam records through the exams cache
  - filter by level / skill
  - hide excluded exam series from the practice listing
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..cache import ReadThroughCache


def field_matches(record: Mapping[str, Any], key: str, wanted: Optional[str]) -> bool:
    """Case-insensitive equality on a record field; an empty filter matches everything."""
    want = (wanted or "").strip().lower()
    if not want:
        return True
    value = record.get(key)
    return value is not None and str(value).strip().lower() == want


@dataclass
class ExamsService:
    """Service responsible for listing and looking up exams."""

    cache: ReadThroughCache
    excluded_id_prefixes: Sequence[str] = field(default_factory=tuple)

    def practice_exams(self) -> List[Dict[str, Any]]:
        """
        Exams offered for practice: records with a string id outside the excluded series.
        """
        prefixes = tuple(self.excluded_id_prefixes)
        return [
            e for e in self.cache.get()
            if isinstance(e, dict)
            and isinstance(e.get("id"), str)
            and not (prefixes and e["id"].startswith(prefixes))
        ]

    def list_exams(
        self,
        level: Optional[str] = None,
        skill: Optional[str] = None,
        practice_only: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Return exams filtered by level and skill.

        Args:
            level: e.g. "TOPIK I" / "TOPIK II" (case-insensitive).
            skill: e.g. "Listening" / "Reading" / "Writing" (case-insensitive).
            practice_only: apply the practice listing exclusions first.
        """
        exams = self.practice_exams() if practice_only else [e for e in self.cache.get() if isinstance(e, dict)]
        return [e for e in exams if field_matches(e, "level", level) and field_matches(e, "skill", skill)]

    def get_exam(self, exam_id: str) -> Optional[Dict[str, Any]]:
        """Look up one exam by id (string comparison)."""
        return self.cache.get_by_key(exam_id)
