"""
Services package exports.
"""
from .documents_service import DocumentsService
from .exams_service import ExamsService

__all__ = ["DocumentsService", "ExamsService"]
