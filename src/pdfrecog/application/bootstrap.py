from __future__ import annotations

import threading

from pdfrecog.application.services.library_service import LibraryService
from pdfrecog.application.services.materialization_service import ItemMaterializer
from pdfrecog.application.services.metadata_resolver import MetadataResolver
from pdfrecog.application.services.pipeline_service import RecognitionPipelineService
from pdfrecog.application.services.project_service import ProjectService
from pdfrecog.application.services.recognition_service import RecognitionService
from pdfrecog.application.services.recognize_queue_service import RecognizeQueueService
from pdfrecog.core.config import AppPaths, RecognizerSettings
from pdfrecog.infrastructure.db.repos.collection_repo import CollectionRepo
from pdfrecog.infrastructure.db.repos.item_repo import ItemRepo
from pdfrecog.infrastructure.extractors.pdf_text_extractor import PdfTextExtractor
from pdfrecog.infrastructure.http.connectivity import ConnectivityProbe
from pdfrecog.infrastructure.http.recognition_client import RecognitionClient
from pdfrecog.infrastructure.lookup.crossref import CrossrefDoiLookup
from pdfrecog.infrastructure.lookup.openlibrary import OpenLibraryIsbnLookup


def build_library_service(paths: AppPaths) -> LibraryService:
    return LibraryService(ItemRepo(paths.db_path), CollectionRepo(paths.db_path))


def build_recognize_queue(paths: AppPaths, settings: RecognizerSettings | None = None) -> RecognizeQueueService:
    settings = settings or RecognizerSettings.from_env()
    item_repo = ItemRepo(paths.db_path)
    collection_repo = CollectionRepo(paths.db_path)

    resolver = MetadataResolver(
        item_repo,
        CrossrefDoiLookup(settings.doi_lookup_url, settings.request_timeout_seconds),
        OpenLibraryIsbnLookup(settings.isbn_lookup_url, settings.request_timeout_seconds),
    )
    recognition = RecognitionService(
        PdfTextExtractor(
            settings.extractor_command,
            timeout_seconds=settings.extractor_timeout_seconds,
            scratch_dir=paths.scratch_dir,
        ),
        RecognitionClient(settings.recognizer_url, settings.request_timeout_seconds),
        resolver,
        max_pages=settings.max_pages,
    )
    pipeline = RecognitionPipelineService(
        item_repo,
        recognition,
        ItemMaterializer(paths.db_path, item_repo, collection_repo),
    )

    connectivity: ConnectivityProbe | None = None
    if settings.connectivity_probe_url:
        connectivity = ConnectivityProbe(settings.connectivity_probe_url)

    ready = threading.Event()
    if ProjectService(paths).is_initialized():
        ready.set()
    return RecognizeQueueService(
        pipeline=pipeline,
        connectivity=connectivity,
        ready=ready,
        offline_recheck_seconds=settings.offline_recheck_seconds,
    )
