# topik_data/services/documents_service.py
"""
Document link queries (downloadable PDFs: past papers, grammar, vocabulary).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..cache import ReadThroughCache
from .exams_service import field_matches


@dataclass
class DocumentsService:
    """Service responsible for listing and looking up document links."""

    cache: ReadThroughCache

    def _all(self) -> List[Dict[str, Any]]:
        return [d for d in self.cache.get() if isinstance(d, dict)]

    def list_documents(
        self,
        category: Optional[str] = None,
        skill: Optional[str] = None,
        file_type: Optional[str] = None,
        query: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Return documents matching every given filter.

        category / skill / file_type are case-insensitive equality filters;
        query is a case-insensitive substring search over title and description.
        """
        q = (query or "").strip().lower()
        out: List[Dict[str, Any]] = []
        for d in self._all():
            if not (field_matches(d, "category", category) and field_matches(d, "skill", skill) and field_matches(d, "fileType", file_type)):
                continue
            if q:
                haystack = f"{d.get('title') or ''} {d.get('description') or ''}".lower()
                if q not in haystack:
                    continue
            out.append(d)
        return out

    def categories(self) -> List[str]:
        """Distinct categories, sorted."""
        return sorted({d["category"] for d in self._all() if isinstance(d.get("category"), str) and d["category"]})

    def get_document(self, document_id: str) -> Optional[Dict[str, Any]]:
        """Look up one document by id."""
        return self.cache.get_by_key(document_id)
