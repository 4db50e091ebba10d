"""
Unit tests for the exam and document query services.
"""

import pytest

from topik_data.cache import ReadThroughCache
from topik_data.errors import LoadError, LoadErrorKind
from topik_data.services import DocumentsService, ExamsService

from conftest import DOCUMENTS, EXAMS


@pytest.fixture
def exams_service(clock):
    cache = ReadThroughCache("exams", lambda: EXAMS, ttl_seconds=3600, clock=clock)
    return ExamsService(cache=cache, excluded_id_prefixes=["35-", "36-", "37-"])


@pytest.fixture
def documents_service(clock):
    cache = ReadThroughCache("documents", lambda: DOCUMENTS, ttl_seconds=3600, clock=clock)
    return DocumentsService(cache=cache)


class TestExamsService:

    def test_practice_hides_excluded_and_non_string_ids(self, exams_service):
        ids = [e["id"] for e in exams_service.practice_exams()]
        assert ids == ["83-1", "83-2", "91-1"]

    def test_no_prefixes_keeps_string_ids(self, clock):
        cache = ReadThroughCache("exams", lambda: EXAMS, ttl_seconds=3600, clock=clock)
        ids = [e["id"] for e in ExamsService(cache=cache).practice_exams()]
        assert ids == ["35-1", "83-1", "83-2", "91-1"]

    def test_filters_are_case_insensitive(self, exams_service):
        ids = [e["id"] for e in exams_service.list_exams(level="topik i")]
        assert ids == ["83-1", "83-2"]
        ids = [e["id"] for e in exams_service.list_exams(level="TOPIK II", skill="listening")]
        assert ids == ["91-1"]

    def test_unfiltered_list_includes_everything(self, exams_service):
        assert len(exams_service.list_exams()) == len(EXAMS)
        assert len(exams_service.list_exams(level="  ")) == len(EXAMS)

    def test_practice_only_filter(self, exams_service):
        ids = [e["id"] for e in exams_service.list_exams(level="TOPIK II", practice_only=True)]
        assert ids == ["91-1"]

    def test_get_exam(self, exams_service):
        assert exams_service.get_exam("83-2")["skill"] == "Reading"
        assert exams_service.get_exam("7")["year_description"] == "legacy"
        assert exams_service.get_exam("missing") is None

    def test_load_errors_propagate(self, clock):
        def broken():
            raise LoadError(LoadErrorKind.IO, "gone")

        service = ExamsService(cache=ReadThroughCache("exams", broken, 60, clock=clock))
        with pytest.raises(LoadError):
            service.list_exams()


class TestDocumentsService:

    def test_filter_by_category(self, documents_service):
        assert [d["id"] for d in documents_service.list_documents(category="grammar")] == ["d2"]

    def test_filter_by_file_type_and_skill(self, documents_service):
        assert [d["id"] for d in documents_service.list_documents(file_type="pdf")] == ["d1", "d2"]
        assert [d["id"] for d in documents_service.list_documents(file_type="pdf", skill="Reading")] == ["d1"]

    def test_search_title_and_description(self, documents_service):
        assert [d["id"] for d in documents_service.list_documents(query="vocab")] == ["d1"]
        assert [d["id"] for d in documents_service.list_documents(query="listening audio")] == ["d3"]
        assert documents_service.list_documents(query="nothing like this") == []

    def test_categories(self, documents_service):
        assert documents_service.categories() == ["Grammar", "Past papers", "Vocabulary"]

    def test_get_document(self, documents_service):
        assert documents_service.get_document("d3")["fileType"] == "MP3"
        assert documents_service.get_document("d9") is None
