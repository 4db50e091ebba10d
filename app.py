# app.py
"""
Flask entrypoint for the TOPIK data service.

Routes:
  Cache:
    - POST /api/warmup-cache        (load every dataset, return counts + stats)
    - GET  /api/warmup-cache        (stats only, never loads)
    - POST /api/cache/invalidate    (only when CACHE_ADMIN_ENABLED)

  Exams:
    - /api/exams
    - /api/exams/<exam_id>

  Documents:
    - /api/documents
    - /api/documents/categories
    - /api/documents/<document_id>

Query parameters (list endpoints):
  - page=N, limit=N
  - exams: level=..., skill=..., practice=1|0
  - documents: category=..., skill=..., fileType=..., q=...

Notes:
  - Datasets are read from JSON files (or URLs) and cached per process for CACHE_TTL_SECONDS.
  - A dataset that cannot be loaded turns into a 503 for the requesting client.
  - gunicorn: gunicorn "app:create_app()"
"""

from __future__ import annotations

import logging
import os
import threading
from datetime import datetime
from typing import Optional

from dateutil import tz
from flask import Flask, abort, jsonify, request

from topik_data.cache import ReadThroughCache
from topik_data.config import AppConfig
from topik_data.data_source import make_source
from topik_data.errors import LoadError
from topik_data.handlers.cache_handler import CacheHandler
from topik_data.models import Page
from topik_data.services import DocumentsService, ExamsService

logger = logging.getLogger(__name__)


def build_caches(cfg: AppConfig) -> dict[str, ReadThroughCache]:
    """Create one cache slot per dataset from configuration."""
    exams = ReadThroughCache(
        name="exams",
        loader=make_source(cfg.exams_data_path, cfg.exams_data_url, cfg.http_timeout_seconds),
        ttl_seconds=cfg.cache_ttl_seconds,
        load_timeout=cfg.load_timeout_seconds,
        strict_shape=cfg.strict_shape,
    )
    documents = ReadThroughCache(
        name="documents",
        loader=make_source(cfg.documents_data_path, cfg.documents_data_url, cfg.http_timeout_seconds),
        ttl_seconds=cfg.documents_cache_ttl_seconds,
        load_timeout=cfg.load_timeout_seconds,
        strict_shape=cfg.strict_shape,
    )
    return {"exams": exams, "documents": documents}


def create_app(cfg: Optional[AppConfig] = None) -> Flask:
    """
    App factory.

    Builds the cache slots, services and handler once per process. Each gunicorn
    worker therefore owns an independent set of caches.
    """
    cfg = cfg or AppConfig()
    logging.basicConfig(
        level=cfg.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    caches = build_caches(cfg)
    exams_service = ExamsService(cache=caches["exams"], excluded_id_prefixes=cfg.excluded_exam_id_prefixes)
    documents_service = DocumentsService(cache=caches["documents"])
    cache_handler = CacheHandler(caches=caches)

    app = Flask(__name__)
    app.extensions["topik_caches"] = caches
    app.extensions["topik_cache_handler"] = cache_handler

    def now_iso() -> str:
        """Current time in the configured timezone, ISO formatted."""
        return datetime.now(tz=tz.gettz(cfg.tz)).isoformat()

    # -------------------------
    # Shared parsing helpers
    # -------------------------

    def parse_int(name: str, default: int) -> int:
        """Parse an integer query param with default fallback."""
        try:
            return int(request.args.get(name, default))
        except Exception:
            return default

    def parse_bool(name: str, default: bool = False) -> bool:
        """
        Parse a boolean-ish query param.

        Treats these as false: 0, false, no, off
        """
        raw = request.args.get(name)
        if raw is None:
            return default
        return raw.strip().lower() not in ("0", "false", "no", "off")

    def parse_page() -> tuple[int, int]:
        """Parse page/limit with limit capped at max_page_size."""
        page = parse_int("page", 1)
        limit = min(parse_int("limit", cfg.page_size), cfg.max_page_size)
        return page, limit

    # -------------------------
    # Errors
    # -------------------------

    @app.errorhandler(LoadError)
    def handle_load_error(exc: LoadError):
        """Any dataset load failure becomes a generic 503 for the client."""
        logger.error("request %s %s failed: %s", request.method, request.path, exc)
        return jsonify({"success": False, "error": "data temporarily unavailable"}), 503

    # -------------------------
    # Cache routes
    # -------------------------

    @app.post("/api/warmup-cache")
    def warmup_cache():
        """Load both datasets in parallel and report counts and stats."""
        try:
            report = cache_handler.warm()
        except Exception as exc:
            logger.error("warmup endpoint failed: %s", exc)
            return jsonify({"success": False, "error": str(exc)}), 500

        return jsonify(
            {
                "success": True,
                "message": "All caches warmed up successfully",
                "examsCount": report.counts.get("exams", 0),
                "documentsCount": report.counts.get("documents", 0),
                "cacheStats": report.stats,
                "generatedAt": now_iso(),
            }
        )

    @app.get("/api/warmup-cache")
    def cache_status():
        """Report the status of every cache without loading anything."""
        return jsonify({"success": True, "cache": cache_handler.status(), "generatedAt": now_iso()})

    @app.post("/api/cache/invalidate")
    def cache_invalidate():
        """
        Drop cached data so the next request re-reads the source.

        Query:
          - name=exams|documents (optional; default all)
        """
        if not cfg.cache_admin_enabled:
            abort(404)
        name = (request.args.get("name") or "").strip() or None
        try:
            cleared = cache_handler.invalidate(name)
        except KeyError:
            return jsonify({"success": False, "error": f"unknown cache: {name}"}), 404
        return jsonify({"success": True, "invalidated": cleared})

    # -------------------------
    # Exams
    # -------------------------

    @app.get("/api/exams")
    def list_exams():
        """
        Paginated exam list.

        Query:
          - level, skill (optional filters)
          - practice=1 hides the excluded exam series
          - page, limit
        """
        exams = exams_service.list_exams(
            level=request.args.get("level"),
            skill=request.args.get("skill"),
            practice_only=parse_bool("practice", False),
        )
        page, limit = parse_page()
        out = Page.from_items(exams, page, limit).to_dict()
        out["generatedAt"] = now_iso()
        return jsonify(out)

    @app.get("/api/exams/<exam_id>")
    def get_exam(exam_id: str):
        """Single exam by id."""
        exam = exams_service.get_exam(exam_id)
        if exam is None:
            return jsonify({"success": False, "error": f"exam {exam_id} not found"}), 404
        return jsonify(exam)

    # -------------------------
    # Documents
    # -------------------------

    @app.get("/api/documents")
    def list_documents():
        """
        Paginated document list.

        Query:
          - category, skill, fileType (optional filters)
          - q (title/description search)
          - page, limit
        """
        docs = documents_service.list_documents(
            category=request.args.get("category"),
            skill=request.args.get("skill"),
            file_type=request.args.get("fileType"),
            query=request.args.get("q"),
        )
        page, limit = parse_page()
        out = Page.from_items(docs, page, limit).to_dict()
        out["generatedAt"] = now_iso()
        return jsonify(out)

    @app.get("/api/documents/categories")
    def document_categories():
        """Distinct document categories."""
        return jsonify({"categories": documents_service.categories()})

    @app.get("/api/documents/<document_id>")
    def get_document(document_id: str):
        """Single document by id."""
        doc = documents_service.get_document(document_id)
        if doc is None:
            return jsonify({"success": False, "error": f"document {document_id} not found"}), 404
        return jsonify(doc)

    # -------------------------
    # Health
    # -------------------------

    @app.get("/health")
    def health():
        """Simple health endpoint for Docker/monitoring checks."""
        return {"ok": True}

    if cfg.warmup_on_start:
        # Background so the worker starts serving immediately.
        threading.Thread(target=cache_handler.preload_all, name="cache-preload", daemon=True).start()

    return app


if __name__ == "__main__":
    # Dev server (not for production).
    create_app().run(host="0.0.0.0", port=int(os.getenv("PORT", "8000")), debug=True)
