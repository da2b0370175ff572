from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from pdfrecog.application.bootstrap import build_library_service, build_recognize_queue
from pdfrecog.application.services.project_service import ProjectService
from pdfrecog.application.services.recognize_queue_service import RecognizeQueueService
from pdfrecog.core.config import AppPaths, RecognizerSettings
from pdfrecog.core.errors import LibraryError, RecogError
from pdfrecog.domain.models.item import Item

logger = logging.getLogger(__name__)


class ImportPdfRequest(BaseModel):
    path: str
    title: str | None = None
    collection_id: str | None = None


class CreateCollectionRequest(BaseModel):
    name: str


class CollectionItemRequest(BaseModel):
    item_id: str


class RecognizeRequest(BaseModel):
    item_ids: list[str]


def _jsonable(value: Any) -> Any:
    if is_dataclass(value):
        return asdict(value)
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return value


def _item_payload(item: Item) -> dict[str, Any]:
    payload = item.to_json()
    payload.update(
        {
            "id": item.id,
            "library_id": item.library_id,
            "parent_id": item.parent_id,
            "content_type": item.content_type,
            "file_path": item.file_path,
            "date_added": item.date_added,
            "date_modified": item.date_modified,
        }
    )
    return payload


def create_app(
    paths: AppPaths,
    *,
    settings: RecognizerSettings | None = None,
    queue_service: RecognizeQueueService | None = None,
) -> FastAPI:
    app = FastAPI(title="pdfrecog", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    project_service = ProjectService(paths)
    project_service.init_project()
    library = build_library_service(paths)
    recognize_queue = queue_service or build_recognize_queue(paths, settings)
    recognize_queue.mark_ready()

    @app.on_event("shutdown")
    def _shutdown_recognize_queue() -> None:
        recognize_queue.shutdown()

    @app.post("/api/init")
    def api_init() -> dict[str, Any]:
        result = project_service.init_project()
        recognize_queue.mark_ready()
        return {
            "ok": True,
            "db_path": str(result.db_path),
            "paths_created": [str(p) for p in result.paths_created],
        }

    @app.get("/api/items")
    def api_items(
        limit: int = Query(default=100, ge=1, le=10000),
        top_level_only: bool = False,
    ) -> dict[str, Any]:
        items = library.list_items(limit=limit, top_level_only=top_level_only)
        return {"ok": True, "count": len(items), "items": [_item_payload(item) for item in items]}

    @app.get("/api/items/{item_id}")
    def api_item(item_id: str) -> dict[str, Any]:
        try:
            item = library.get_item(item_id)
        except LibraryError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {
            "ok": True,
            "item": _item_payload(item),
            "collections": library.collections_for_item(item.id),
            "children": [_item_payload(child) for child in library.list_children(item.id)],
        }

    @app.post("/api/items/import")
    def api_import_item(req: ImportPdfRequest) -> dict[str, Any]:
        try:
            item = library.import_pdf(Path(req.path), title=req.title, collection_id=req.collection_id)
        except RecogError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"ok": True, "item": _item_payload(item)}

    @app.get("/api/collections")
    def api_collections(limit: int = Query(default=100, ge=1, le=10000)) -> dict[str, Any]:
        collections = library.list_collections(limit=limit)
        return {"ok": True, "count": len(collections), "collections": _jsonable(collections)}

    @app.post("/api/collections")
    def api_create_collection(req: CreateCollectionRequest) -> dict[str, Any]:
        try:
            collection = library.create_collection(req.name)
        except RecogError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"ok": True, "collection": _jsonable(collection)}

    @app.post("/api/collections/{collection_id}/items")
    def api_add_collection_item(collection_id: str, req: CollectionItemRequest) -> dict[str, Any]:
        if library.collection_repo.get_by_id(collection_id) is None:
            raise HTTPException(status_code=404, detail=f"Collection not found: {collection_id}")
        try:
            library.add_to_collection(collection_id, req.item_id)
        except RecogError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"ok": True, "collection_id": collection_id, "item_id": req.item_id}

    @app.post("/api/recognize")
    def api_recognize(req: RecognizeRequest) -> dict[str, Any]:
        recognizable: list[Item] = []
        skipped: list[dict[str, str]] = []
        for item_id in req.item_ids:
            item = library.item_repo.get_by_id(item_id)
            if item is None:
                skipped.append({"id": item_id, "reason": "not_found"})
            elif not recognize_queue.can_recognize(item):
                skipped.append({"id": item_id, "reason": "not_recognizable"})
            else:
                recognizable.append(item)

        queued = recognize_queue.recognize_items(recognizable)
        already_active = [item.id for item in recognizable if item.id not in queued]
        skipped.extend({"id": item_id, "reason": "already_queued"} for item_id in already_active)
        return {"ok": True, "queued": queued, "skipped": skipped}

    @app.get("/api/recognize/status")
    def api_recognize_status() -> dict[str, Any]:
        return {
            "ok": True,
            "total": recognize_queue.count_total(),
            "processed": recognize_queue.count_processed(),
            "processing": recognize_queue.is_processing,
            "rows": [row.to_dict() for row in recognize_queue.list_rows()],
        }

    @app.post("/api/recognize/cancel")
    def api_recognize_cancel() -> dict[str, Any]:
        recognize_queue.cancel_all()
        return {"ok": True, "total": recognize_queue.count_total()}

    return app
